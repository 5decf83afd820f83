import os
import tempfile

# Point the app at a throwaway SQLite file before anything imports storeadmin.db.
_db_dir = tempfile.mkdtemp(prefix="storeadmin-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_db_dir}/test.db"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

import storeadmin.models  # noqa: F401  registers models on Base.metadata
from storeadmin.auth.security import create_access_token, hash_password
from storeadmin.db import Base, SessionLocal, engine
from storeadmin.main import app
from storeadmin.models.admin_user import AccessLevel, AdminStatus, AdminUser
from storeadmin.services.mailer import get_mailer
from storeadmin.services.status_transitions import status_flags
from storeadmin.services.token_verifier import AuthenticatedAdmin

TEST_PASSWORD = "secret123"
# bcrypt is slow; hash once for every seeded account.
_TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


class FakeMailer:
    """Records activation emails instead of sending them."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent = []

    async def send_activation_email(self, *, email: str, name: str, token: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP unavailable")
        self.sent.append({"email": email, "name": name, "token": token})


@pytest.fixture(scope="session", autouse=True)
def _create_tables():
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def _clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_admin(
    db,
    *,
    email: str,
    name: str = "Test Admin",
    access_level: AccessLevel = AccessLevel.EDITOR,
    status: AdminStatus = AdminStatus.ACTIVE,
    password_hash: str = _TEST_PASSWORD_HASH,
) -> AdminUser:
    flags = {"active": False, "email_verified": False}
    flags.update(status_flags(status))
    admin = AdminUser(
        name=name,
        email=email,
        password_hash=password_hash,
        access_level=access_level,
        status=status,
        **flags,
    )
    db.add(admin)
    db.commit()
    return admin


def actor_for(admin: AdminUser) -> AuthenticatedAdmin:
    return AuthenticatedAdmin(id=admin.id, email=admin.email, access_level=admin.access_level)


def token_for(admin: AdminUser) -> str:
    return create_access_token(
        admin_id=admin.id,
        email=admin.email,
        access_level=admin.access_level.value,
    )


def auth_headers(admin: AdminUser) -> dict:
    return {"Authorization": f"Bearer {token_for(admin)}"}


@pytest.fixture
def superadmin(db) -> AdminUser:
    return make_admin(db, email="root@example.com", name="Root", access_level=AccessLevel.SUPERADMIN)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(mailer):
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_mailer, None)
