"""Create (or reset) the bootstrap SUPERADMIN.

Invitations and status changes need an active superadmin to exist, so a fresh
database starts here:

    ADMIN_EMAIL=... ADMIN_PASSWORD=... python -m storeadmin.scripts.seed_admin
"""
from __future__ import annotations

import os

from storeadmin.auth.security import hash_password
from storeadmin.db import SessionLocal
from storeadmin.init_db import init_db
from storeadmin.models.admin_user import AccessLevel, AdminStatus, AdminUser
from storeadmin.services.status_transitions import status_flags
from storeadmin.store import get_admin_by_email, normalize_email


def seed_superadmin(db, *, name: str, email: str, password: str, force_reset: bool = False) -> str:
    normalized_email = normalize_email(email)
    existing = get_admin_by_email(db, normalized_email)
    if existing:
        if not force_reset:
            return f"Admin already exists: {normalized_email}"
        existing.password_hash = hash_password(password)
        existing.access_level = AccessLevel.SUPERADMIN
        existing.status = AdminStatus.ACTIVE
        for field, value in status_flags(AdminStatus.ACTIVE).items():
            setattr(existing, field, value)
        existing.activation_token = None
        existing.activation_token_expires_at = None
        db.commit()
        return f"Reset superadmin: {normalized_email}"

    db.add(
        AdminUser(
            name=name.strip(),
            email=normalized_email,
            password_hash=hash_password(password),
            access_level=AccessLevel.SUPERADMIN,
            status=AdminStatus.ACTIVE,
            **status_flags(AdminStatus.ACTIVE),
        )
    )
    db.commit()
    return f"Created superadmin: {normalized_email}"


def main() -> None:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    name = os.getenv("ADMIN_NAME", "Superadmin")

    if not email or not password:
        raise SystemExit("Set ADMIN_EMAIL and ADMIN_PASSWORD env vars before running.")

    init_db()
    db = SessionLocal()
    try:
        print(
            seed_superadmin(
                db,
                name=name,
                email=email,
                password=password,
                force_reset=os.getenv("FORCE_RESET_ADMIN", "").strip() == "1",
            )
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
