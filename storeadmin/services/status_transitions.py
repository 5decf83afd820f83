"""Administrator lifecycle status changes.

Every status implies a fixed set of derived flags (see ``status_flags``);
the status and its flags are written in one commit.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Union

from sqlalchemy.orm import Session

from storeadmin.auth.guard import sufficient_level
from storeadmin.models.admin_user import AccessLevel, AdminStatus, AdminUser
from storeadmin.services.errors import AdminError, AdminErrorKind
from storeadmin.services.token_verifier import AuthenticatedAdmin
from storeadmin.store import get_admin

logger = logging.getLogger("storeadmin.status")

VALID_STATUSES = ", ".join(s.value for s in AdminStatus)


def status_flags(new_status: AdminStatus) -> Dict[str, bool]:
    """Derived fields written alongside ``new_status``.

    Absent keys are left unchanged.
    """
    if new_status == AdminStatus.ACTIVE:
        return {"active": True, "email_verified": True}
    if new_status == AdminStatus.PENDING:
        return {"active": True, "email_verified": False}
    return {"active": False}


def parse_status(value: Union[AdminStatus, str, None]) -> AdminStatus:
    try:
        return AdminStatus(value)
    except ValueError:
        raise AdminError(
            AdminErrorKind.INVALID_STATUS,
            f"Invalid status. Use one of: {VALID_STATUSES}",
        )


def _require_superadmin(actor: AuthenticatedAdmin, message: str) -> None:
    if not sufficient_level(actor.access_level, AccessLevel.SUPERADMIN):
        raise AdminError(AdminErrorKind.INSUFFICIENT_PRIVILEGE, message)


def set_status(
    db: Session,
    actor: AuthenticatedAdmin,
    target_id: int,
    new_status: Union[AdminStatus, str, None],
) -> AdminUser:
    _require_superadmin(actor, "Only SUPERADMIN can change administrator status")
    parsed = parse_status(new_status)

    target: Optional[AdminUser] = get_admin(db, target_id)
    if target is None:
        raise AdminError(AdminErrorKind.TARGET_NOT_FOUND, "Administrator not found")

    if actor.id == target.id and parsed != AdminStatus.ACTIVE:
        raise AdminError(
            AdminErrorKind.SELF_DEACTIVATION_FORBIDDEN,
            "You cannot deactivate your own account",
        )

    previous = target.status
    if previous == AdminStatus.PENDING and parsed != AdminStatus.PENDING and not target.password_hash:
        # Leaving PENDING closes the invitation window.
        target.activation_token = None
        target.activation_token_expires_at = None
    target.status = parsed
    for field, value in status_flags(parsed).items():
        setattr(target, field, value)
    db.commit()

    logger.info(
        "admin_status_changed",
        extra={
            "actor_id": actor.id,
            "admin_id": target.id,
            "previous_status": previous.value,
            "new_status": parsed.value,
        },
    )
    return target


def get_status(db: Session, actor: AuthenticatedAdmin, target_id: int) -> AdminUser:
    _require_superadmin(actor, "Access denied")
    target = get_admin(db, target_id)
    if target is None:
        raise AdminError(AdminErrorKind.TARGET_NOT_FOUND, "Administrator not found")
    return target


def delete_admin(db: Session, actor: AuthenticatedAdmin, target_id: int) -> AdminUser:
    """Soft delete: the record stays, its status becomes DELETED."""
    _require_superadmin(actor, "Only SUPERADMIN can delete administrators")
    return set_status(db, actor, target_id, AdminStatus.DELETED)
