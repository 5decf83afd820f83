from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from sqlalchemy.orm import Session

from storeadmin.auth.security import TOKEN_TYPE, decode_access_token
from storeadmin.models.admin_user import AccessLevel, AdminStatus, AdminUser
from storeadmin.services.errors import AdminError, AdminErrorKind
from storeadmin.store import get_admin

logger = logging.getLogger("storeadmin.auth")


@dataclass(frozen=True)
class AuthenticatedAdmin:
    id: int
    email: str
    access_level: AccessLevel


def repair_superadmin_status(db: Session, admin: AdminUser) -> bool:
    """Force a superadmin back to ACTIVE.

    A superadmin must never be locked out by a stale status. Returns True
    when a write happened.
    """
    if admin.access_level != AccessLevel.SUPERADMIN or admin.status == AdminStatus.ACTIVE:
        return False

    previous = admin.status
    admin.status = AdminStatus.ACTIVE
    admin.active = True
    admin.email_verified = True
    db.commit()

    logger.warning(
        "superadmin_status_repaired",
        extra={"admin_id": admin.id, "previous_status": previous.value},
    )
    return True


def decode_credential(credential: Optional[str]) -> dict:
    """Decode a bearer credential, mapping every failure to an AdminError."""
    if not credential or not credential.strip():
        raise AdminError(AdminErrorKind.MISSING_CREDENTIAL, "Authorization token required")

    try:
        payload = decode_access_token(credential.strip())
    except jwt.ExpiredSignatureError:
        raise AdminError(AdminErrorKind.EXPIRED_CREDENTIAL, "Token expired")
    except jwt.InvalidTokenError:
        raise AdminError(AdminErrorKind.INVALID_CREDENTIAL, "Invalid token")

    if payload.get("type") != TOKEN_TYPE:
        raise AdminError(AdminErrorKind.INVALID_CREDENTIAL, "Invalid token")
    return payload


def verify_credential(db: Session, credential: Optional[str]) -> AuthenticatedAdmin:
    """Resolve a bearer credential to the administrator behind it.

    The level and email come from the stored record, not the token claims.
    """
    payload = decode_credential(credential)

    try:
        admin_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AdminError(AdminErrorKind.INVALID_CREDENTIAL, "Invalid token subject")

    admin = get_admin(db, admin_id)
    if admin is None:
        raise AdminError(AdminErrorKind.SUBJECT_NOT_FOUND, "Administrator not found")

    if admin.access_level == AccessLevel.SUPERADMIN:
        repair_superadmin_status(db, admin)
    elif admin.status != AdminStatus.ACTIVE:
        raise AdminError(
            AdminErrorKind.ACCOUNT_NOT_ACTIVE,
            f"Administrator account is not active (status: {admin.status.value})",
        )

    return AuthenticatedAdmin(id=admin.id, email=admin.email, access_level=admin.access_level)
