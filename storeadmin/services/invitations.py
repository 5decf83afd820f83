"""Invitations and account activation.

An invitation creates a PENDING administrator with an empty password and a
24h activation token, then emails the token. If the email cannot be sent the
record is deleted again, so no pending account is left without a way in.
Activation consumes the token once: it sets the password and moves the
account to ACTIVE.
"""
from __future__ import annotations

import logging
import os
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Protocol, Tuple, Union

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storeadmin.auth.guard import sufficient_level
from storeadmin.auth.security import hash_password
from storeadmin.models.admin_user import AccessLevel, AdminStatus, AdminUser
from storeadmin.services.errors import AdminError, AdminErrorKind
from storeadmin.services.status_transitions import status_flags
from storeadmin.services.token_verifier import AuthenticatedAdmin
from storeadmin.store import (
    get_admin,
    get_admin_by_activation_token,
    get_admin_by_email,
    normalize_email,
)

logger = logging.getLogger("storeadmin.invitations")

ACTIVATION_TOKEN_TTL_HOURS = int(os.getenv("ACTIVATION_TOKEN_TTL_HOURS", "24"))
MIN_NAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class Mailer(Protocol):
    async def send_activation_email(self, *, email: str, name: str, token: str) -> None:
        ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _new_activation_token() -> str:
    return secrets.token_hex(32)


def validate_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if len(cleaned) < MIN_NAME_LENGTH:
        raise AdminError(
            AdminErrorKind.INVALID_NAME,
            f"Name must have at least {MIN_NAME_LENGTH} characters",
        )
    return cleaned


def validate_email(email: Optional[str]) -> str:
    cleaned = normalize_email(email or "")
    if not _EMAIL_RE.match(cleaned):
        raise AdminError(AdminErrorKind.INVALID_EMAIL, "Invalid email format")
    return cleaned


def parse_level(level: Union[AccessLevel, str, None]) -> AccessLevel:
    if level is None or level == "":
        return AccessLevel.EDITOR
    try:
        return AccessLevel(level)
    except ValueError:
        raise AdminError(AdminErrorKind.INVALID_LEVEL, "Invalid access level")


def validate_password(password: Optional[str]) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise AdminError(
            AdminErrorKind.WEAK_PASSWORD,
            f"Password must have at least {MIN_PASSWORD_LENGTH} characters",
        )
    return password


def _email_taken() -> AdminError:
    return AdminError(AdminErrorKind.EMAIL_TAKEN, "This email is already registered")


def public_fields(admin: AdminUser) -> Dict[str, Any]:
    return {
        "id": admin.id,
        "name": admin.name,
        "email": admin.email,
        "access_level": admin.access_level.value,
        "status": admin.status.value,
        "email_verified": admin.email_verified,
        "created_at": admin.created_at,
    }


def _create_pending_admin(
    db: Session,
    name: Optional[str],
    email: Optional[str],
    access_level: Union[AccessLevel, str, None],
) -> AdminUser:
    clean_name = validate_name(name)
    clean_email = validate_email(email)
    if get_admin_by_email(db, clean_email) is not None:
        raise _email_taken()
    level = parse_level(access_level)

    admin = AdminUser(
        name=clean_name,
        email=clean_email,
        password_hash="",
        access_level=level,
        status=AdminStatus.PENDING,
        active=False,
        email_verified=False,
        activation_token=_new_activation_token(),
        activation_token_expires_at=_now() + timedelta(hours=ACTIVATION_TOKEN_TTL_HOURS),
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another invite for the same address.
        db.rollback()
        raise _email_taken()
    return admin


def _discard_admin(db: Session, admin: AdminUser) -> None:
    db.delete(admin)
    db.commit()


async def invite_admin(
    db: Session,
    actor: AuthenticatedAdmin,
    *,
    name: Optional[str],
    email: Optional[str],
    access_level: Union[AccessLevel, str, None] = None,
    mailer: Mailer,
) -> Dict[str, Any]:
    if not sufficient_level(actor.access_level, AccessLevel.SUPERADMIN):
        raise AdminError(
            AdminErrorKind.INSUFFICIENT_PRIVILEGE,
            "Only SUPERADMIN can create administrators",
        )

    # Session work is blocking; keep it off the event loop.
    admin = await run_in_threadpool(_create_pending_admin, db, name, email, access_level)

    try:
        await mailer.send_activation_email(email=admin.email, name=admin.name, token=admin.activation_token)
    except Exception:
        logger.exception(
            "activation_email_failed",
            extra={"actor_id": actor.id, "admin_id": admin.id},
        )
        await run_in_threadpool(_discard_admin, db, admin)
        logger.warning("pending_admin_rolled_back", extra={"admin_id": admin.id})
        raise AdminError(
            AdminErrorKind.EMAIL_DELIVERY_FAILED,
            "Could not send the activation email. Check the mail settings.",
        )

    logger.info(
        "admin_invited",
        extra={"actor_id": actor.id, "admin_id": admin.id, "access_level": admin.access_level.value},
    )
    data = public_fields(admin)
    data["email_sent"] = True
    return data


def _load_valid_invitation(db: Session, token: Optional[str]) -> AdminUser:
    admin = get_admin_by_activation_token(db, (token or "").strip())
    # Only a still-pending account can be activated; any other status was set by a superadmin.
    if admin is None or admin.status != AdminStatus.PENDING:
        raise AdminError(AdminErrorKind.INVALID_TOKEN, "Invalid activation token")

    expires_at = admin.activation_token_expires_at
    if expires_at is None or _as_utc(expires_at) <= _now():
        raise AdminError(AdminErrorKind.EXPIRED_TOKEN, "Activation token expired")
    return admin


def lookup_invitation(db: Session, token: Optional[str]) -> Dict[str, Any]:
    """Summary of the pending account behind an activation token."""
    admin = _load_valid_invitation(db, token)
    return {
        "admin": {
            "id": admin.id,
            "name": admin.name,
            "email": admin.email,
            "access_level": admin.access_level.value,
        },
        "expires_at": _as_utc(admin.activation_token_expires_at),
    }


def activate_account(db: Session, token: Optional[str], password: Optional[str]) -> AdminUser:
    admin = _load_valid_invitation(db, token)
    validate_password(password)

    admin.password_hash = hash_password(password)
    admin.activation_token = None
    admin.activation_token_expires_at = None
    admin.status = AdminStatus.ACTIVE
    for field, value in status_flags(AdminStatus.ACTIVE).items():
        setattr(admin, field, value)
    db.commit()

    logger.info("admin_activated", extra={"admin_id": admin.id})
    return admin


def _issue_new_token(db: Session, target_id: int) -> Tuple[AdminUser, Optional[str], Optional[datetime]]:
    admin = get_admin(db, target_id)
    if admin is None:
        raise AdminError(AdminErrorKind.TARGET_NOT_FOUND, "Administrator not found")
    if admin.status != AdminStatus.PENDING or admin.password_hash:
        raise AdminError(AdminErrorKind.ALREADY_ACTIVATED, "Administrator account is already activated")

    previous_token = admin.activation_token
    previous_expiry = admin.activation_token_expires_at
    admin.activation_token = _new_activation_token()
    admin.activation_token_expires_at = _now() + timedelta(hours=ACTIVATION_TOKEN_TTL_HOURS)
    db.commit()
    return admin, previous_token, previous_expiry


def _restore_token(
    db: Session,
    admin: AdminUser,
    token: Optional[str],
    expires_at: Optional[datetime],
) -> None:
    admin.activation_token = token
    admin.activation_token_expires_at = expires_at
    db.commit()


async def resend_invitation(
    db: Session,
    actor: AuthenticatedAdmin,
    target_id: int,
    *,
    mailer: Mailer,
) -> Dict[str, Any]:
    """Issue a fresh activation token for a still-pending administrator."""
    if not sufficient_level(actor.access_level, AccessLevel.SUPERADMIN):
        raise AdminError(
            AdminErrorKind.INSUFFICIENT_PRIVILEGE,
            "Only SUPERADMIN can resend invitations",
        )

    admin, previous_token, previous_expiry = await run_in_threadpool(_issue_new_token, db, target_id)

    try:
        await mailer.send_activation_email(email=admin.email, name=admin.name, token=admin.activation_token)
    except Exception:
        logger.exception(
            "activation_email_failed",
            extra={"actor_id": actor.id, "admin_id": admin.id},
        )
        await run_in_threadpool(_restore_token, db, admin, previous_token, previous_expiry)
        raise AdminError(
            AdminErrorKind.EMAIL_DELIVERY_FAILED,
            "Could not send the activation email. Check the mail settings.",
        )

    logger.info("invitation_resent", extra={"actor_id": actor.id, "admin_id": admin.id})
    data = public_fields(admin)
    data["email_sent"] = True
    data["expires_at"] = _as_utc(admin.activation_token_expires_at)
    return data
