from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storeadmin.auth.guard import sufficient_level
from storeadmin.auth.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from storeadmin.models.admin_user import AccessLevel, AdminStatus, AdminUser
from storeadmin.services.errors import AdminError, AdminErrorKind
from storeadmin.services.invitations import (
    parse_level,
    validate_email,
    validate_name,
    validate_password,
)
from storeadmin.services.token_verifier import AuthenticatedAdmin
from storeadmin.store import get_admin, get_admin_by_email

logger = logging.getLogger("storeadmin.accounts")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def login(db: Session, email: Optional[str], password: Optional[str]) -> Tuple[AdminUser, str]:
    """Check credentials and issue a bearer token."""
    user = get_admin_by_email(db, email or "")
    if user is None or not verify_password(password or "", user.password_hash):
        raise AdminError(AdminErrorKind.INVALID_LOGIN, "Incorrect email or password")

    # A superadmin with a stale status gets repaired on its first authenticated call.
    if user.access_level != AccessLevel.SUPERADMIN and user.status != AdminStatus.ACTIVE:
        raise AdminError(
            AdminErrorKind.ACCOUNT_NOT_ACTIVE,
            f"Administrator account is not active (status: {user.status.value})",
        )

    user.last_login = _now()
    db.commit()

    token = create_access_token(
        admin_id=user.id,
        email=user.email,
        access_level=user.access_level.value,
    )
    logger.info("admin_login", extra={"admin_id": user.id})
    return user, token


def logout(db: Session, credential: Optional[str]) -> Optional[int]:
    """Stamp ``last_logout`` when the token still identifies someone.

    Logging out with a bad or expired token is not an error.
    """
    if not credential:
        return None
    try:
        payload = decode_access_token(credential)
        admin_id = int(payload.get("sub"))
    except (jwt.InvalidTokenError, TypeError, ValueError):
        logger.info("admin_logout_unverified")
        return None

    user = get_admin(db, admin_id)
    if user is None:
        return None
    user.last_logout = _now()
    db.commit()
    logger.info("admin_logout", extra={"admin_id": user.id})
    return user.id


def _can_access(actor: AuthenticatedAdmin, target_id: int) -> bool:
    return actor.id == target_id or sufficient_level(actor.access_level, AccessLevel.SUPERADMIN)


def get_admin_for(db: Session, actor: AuthenticatedAdmin, target_id: int) -> AdminUser:
    if not _can_access(actor, target_id):
        raise AdminError(AdminErrorKind.INSUFFICIENT_PRIVILEGE, "Access denied")
    target = get_admin(db, target_id)
    if target is None:
        raise AdminError(AdminErrorKind.TARGET_NOT_FOUND, "Administrator not found")
    return target


def update_admin(
    db: Session,
    actor: AuthenticatedAdmin,
    target_id: int,
    *,
    name: Optional[str],
    email: Optional[str],
    access_level: Union[AccessLevel, str, None] = None,
    password: Optional[str] = None,
) -> AdminUser:
    """Edit profile fields. Status only changes through ``set_status``."""
    if not _can_access(actor, target_id):
        raise AdminError(
            AdminErrorKind.INSUFFICIENT_PRIVILEGE,
            "You can only edit your own account unless you are SUPERADMIN",
        )

    target = get_admin(db, target_id)
    if target is None:
        raise AdminError(AdminErrorKind.TARGET_NOT_FOUND, "Administrator not found")

    clean_name = validate_name(name)
    clean_email = validate_email(email)
    if clean_email != target.email:
        existing = get_admin_by_email(db, clean_email)
        if existing is not None and existing.id != target.id:
            raise AdminError(AdminErrorKind.EMAIL_TAKEN, "This email is already in use by another administrator")

    new_level: Optional[AccessLevel] = None
    if access_level not in (None, ""):
        new_level = parse_level(access_level)
        own_account = actor.id == target.id
        if new_level != target.access_level:
            if own_account or not sufficient_level(actor.access_level, AccessLevel.SUPERADMIN):
                raise AdminError(
                    AdminErrorKind.INSUFFICIENT_PRIVILEGE,
                    "Only SUPERADMIN can change another administrator's access level",
                )
            if target.access_level == AccessLevel.SUPERADMIN:
                raise AdminError(
                    AdminErrorKind.INSUFFICIENT_PRIVILEGE,
                    "The access level of a SUPERADMIN cannot be changed",
                )

    if password:
        validate_password(password)

    target.name = clean_name
    target.email = clean_email
    if new_level is not None:
        target.access_level = new_level
    if password:
        target.password_hash = hash_password(password)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AdminError(AdminErrorKind.EMAIL_TAKEN, "This email is already in use by another administrator")

    logger.info("admin_updated", extra={"actor_id": actor.id, "admin_id": target.id})
    return target
