from datetime import timedelta

from conftest import FakeMailer, auth_headers, make_admin
from storeadmin.models.admin_user import AccessLevel, AdminStatus
from storeadmin.services import invitations
from storeadmin.services.mailer import get_mailer
from storeadmin.main import app
from storeadmin.store import count_admins, get_admin, get_admin_by_email


def test_invite_scenario_returns_201_pending(client, db, superadmin, mailer):
    r = client.post(
        "/administrators",
        headers=auth_headers(superadmin),
        json={"name": "Ana Silva", "email": "ana@example.com", "accessLevel": "ADMIN"},
    )

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["success"] is True
    assert body["data"]["status"] == "PENDING"
    assert body["data"]["access_level"] == "ADMIN"
    assert body["data"]["email_sent"] is True

    admin = get_admin_by_email(db, "ana@example.com")
    assert admin.password_hash == ""
    assert len(mailer.sent) == 1


def test_invite_without_token_is_401(client):
    r = client.post("/administrators", json={"name": "Ana Silva", "email": "ana@example.com"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Authorization token required"}


def test_invite_by_admin_is_403(client, db):
    admin = make_admin(db, email="admin@example.com", access_level=AccessLevel.ADMIN)
    r = client.post(
        "/administrators",
        headers=auth_headers(admin),
        json={"name": "Ana Silva", "email": "ana@example.com"},
    )
    assert r.status_code == 403
    assert r.json()["success"] is False


def test_invite_validation_errors_use_envelope(client, superadmin):
    r = client.post("/administrators", headers=auth_headers(superadmin), json={"name": "Al", "email": "ana@example.com"})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert "3 characters" in r.json()["error"]


def test_invite_duplicate_email_is_409(client, db, superadmin):
    make_admin(db, email="ana@example.com")
    r = client.post(
        "/administrators",
        headers=auth_headers(superadmin),
        json={"name": "Ana Silva", "email": "ana@example.com"},
    )
    assert r.status_code == 409


def test_invite_email_failure_is_500_and_leaves_no_record(client, db, superadmin):
    app.dependency_overrides[get_mailer] = lambda: FakeMailer(fail=True)
    before = count_admins(db)

    r = client.post(
        "/administrators",
        headers=auth_headers(superadmin),
        json={"name": "Ana Silva", "email": "ana@example.com"},
    )

    assert r.status_code == 500
    assert r.json()["success"] is False
    assert count_admins(db) == before


def test_list_requires_admin_level(client, db, superadmin):
    editor = make_admin(db, email="ed@example.com")
    admin = make_admin(db, email="admin@example.com", access_level=AccessLevel.ADMIN)

    assert client.get("/administrators", headers=auth_headers(editor)).status_code == 403

    r = client.get("/administrators", headers=auth_headers(admin))
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert {a["email"] for a in body["admins"]} == {"root@example.com", "ed@example.com", "admin@example.com"}
    assert all("password_hash" not in a for a in body["admins"])


def test_patch_status(client, db, superadmin):
    target = make_admin(db, email="target@example.com")

    r = client.patch(
        f"/administrators/{target.id}/status",
        headers=auth_headers(superadmin),
        json={"status": "SUSPENDED"},
    )

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert "SUSPENDED" in body["message"]
    assert body["data"]["status"] == "SUSPENDED"
    assert body["data"]["active"] is False


def test_suspended_admin_is_locked_out(client, db, superadmin):
    target = make_admin(db, email="target@example.com", access_level=AccessLevel.ADMIN)
    headers = auth_headers(target)
    client.patch(f"/administrators/{target.id}/status", headers=auth_headers(superadmin), json={"status": "BLOCKED"})

    r = client.get("/administrators", headers=headers)
    assert r.status_code == 403
    assert "BLOCKED" in r.json()["error"]


def test_patch_own_status_to_suspended_is_forbidden(client, superadmin):
    r = client.patch(
        f"/administrators/{superadmin.id}/status",
        headers=auth_headers(superadmin),
        json={"status": "SUSPENDED"},
    )
    assert r.status_code == 403
    assert r.json()["success"] is False


def test_patch_status_errors(client, db, superadmin):
    target = make_admin(db, email="target@example.com")
    h = auth_headers(superadmin)

    assert client.patch(f"/administrators/{target.id}/status", headers=h, json={"status": "SUSPENSO"}).status_code == 400
    assert client.patch("/administrators/999/status", headers=h, json={"status": "ACTIVE"}).status_code == 404
    assert client.patch(f"/administrators/{target.id}/status", headers=auth_headers(target), json={"status": "ACTIVE"}).status_code == 403


def test_get_status(client, db, superadmin):
    target = make_admin(db, email="target@example.com", status=AdminStatus.INACTIVE)
    r = client.get(f"/administrators/{target.id}/status", headers=auth_headers(superadmin))
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "INACTIVE"


def test_superadmin_with_stale_status_is_healed_by_next_request(client, db):
    boss = make_admin(db, email="boss@example.com", access_level=AccessLevel.SUPERADMIN, status=AdminStatus.BLOCKED)

    r = client.get("/administrators", headers=auth_headers(boss))

    assert r.status_code == 200
    db.expire_all()
    assert get_admin(db, boss.id).status == AdminStatus.ACTIVE


def test_get_one_self_or_superadmin(client, db, superadmin):
    editor = make_admin(db, email="ed@example.com")
    other = make_admin(db, email="other@example.com")

    assert client.get(f"/administrators/{editor.id}", headers=auth_headers(editor)).status_code == 200
    assert client.get(f"/administrators/{other.id}", headers=auth_headers(editor)).status_code == 403
    assert client.get(f"/administrators/{other.id}", headers=auth_headers(superadmin)).status_code == 200
    assert client.get("/administrators/999", headers=auth_headers(superadmin)).status_code == 404


def test_non_integer_id_is_400(client, superadmin):
    r = client.get("/administrators/abc", headers=auth_headers(superadmin))
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_put_updates_profile(client, db, superadmin):
    editor = make_admin(db, email="ed@example.com", name="Edna")

    r = client.put(
        f"/administrators/{editor.id}",
        headers=auth_headers(superadmin),
        json={"name": "Edna Souza", "email": "Edna.Souza@Example.com", "accessLevel": "ADMIN"},
    )

    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["name"] == "Edna Souza"
    assert data["email"] == "edna.souza@example.com"
    assert data["access_level"] == "ADMIN"
    assert data["status"] == "ACTIVE"


def test_put_cannot_raise_own_level(client, db):
    editor = make_admin(db, email="ed@example.com", name="Edna")
    r = client.put(
        f"/administrators/{editor.id}",
        headers=auth_headers(editor),
        json={"name": "Edna", "email": "ed@example.com", "access_level": "SUPERADMIN"},
    )
    assert r.status_code == 403


def test_put_cannot_demote_another_superadmin(client, db, superadmin):
    other = make_admin(db, email="boss2@example.com", name="Boss Two", access_level=AccessLevel.SUPERADMIN)
    r = client.put(
        f"/administrators/{other.id}",
        headers=auth_headers(superadmin),
        json={"name": "Boss Two", "email": "boss2@example.com", "access_level": "EDITOR"},
    )
    assert r.status_code == 403


def test_put_email_conflict_and_weak_password(client, db, superadmin):
    editor = make_admin(db, email="ed@example.com", name="Edna")
    h = auth_headers(editor)

    r = client.put(f"/administrators/{editor.id}", headers=h, json={"name": "Edna", "email": "root@example.com"})
    assert r.status_code == 409

    r = client.put(f"/administrators/{editor.id}", headers=h, json={"name": "Edna", "email": "ed@example.com", "password": "123"})
    assert r.status_code == 400


def test_delete_marks_deleted(client, db, superadmin):
    target = make_admin(db, email="target@example.com")

    r = client.delete(f"/administrators/{target.id}", headers=auth_headers(superadmin))

    assert r.status_code == 200
    assert r.json()["data"]["status"] == "DELETED"
    db.expire_all()
    assert get_admin(db, target.id) is not None


def test_resend_invitation_endpoint(client, db, superadmin, mailer, monkeypatch):
    client.post(
        "/administrators",
        headers=auth_headers(superadmin),
        json={"name": "Ana Silva", "email": "ana@example.com"},
    )
    pending = get_admin_by_email(db, "ana@example.com")
    real_now = invitations._now()
    monkeypatch.setattr(invitations, "_now", lambda: real_now + timedelta(hours=30))

    r = client.post(f"/administrators/{pending.id}/invitation", headers=auth_headers(superadmin))

    assert r.status_code == 200, r.text
    assert len(mailer.sent) == 2
    assert client.post("/activation", json={"token": mailer.sent[-1]["token"], "password": "s3cret!"}).status_code == 200
