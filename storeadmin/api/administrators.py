from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storeadmin.api.deps import require_admin, require_level
from storeadmin.db import get_db
from storeadmin.models.admin_user import AccessLevel, AdminUser
from storeadmin.schemas.admin import (
    AdminInviteIn,
    AdminOut,
    AdminStatusIn,
    AdminStatusOut,
    AdminUpdateIn,
)
from storeadmin.services.accounts import get_admin_for, update_admin
from storeadmin.services.invitations import invite_admin, resend_invitation
from storeadmin.services.mailer import ActivationMailer, get_mailer
from storeadmin.services.status_transitions import delete_admin, get_status, set_status
from storeadmin.services.token_verifier import AuthenticatedAdmin
from storeadmin.store import list_admins

router = APIRouter(prefix="/administrators", tags=["administrators"])


def _admin_json(user: AdminUser) -> Dict[str, Any]:
    return AdminOut.model_validate(user).model_dump(mode="json")


def _status_json(user: AdminUser) -> Dict[str, Any]:
    return AdminStatusOut.model_validate(user).model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_admin_invitation(
    payload: AdminInviteIn,
    actor: AuthenticatedAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    mailer: ActivationMailer = Depends(get_mailer),
) -> dict:
    data = await invite_admin(
        db,
        actor,
        name=payload.name,
        email=payload.email,
        access_level=payload.access_level,
        mailer=mailer,
    )
    return {
        "success": True,
        "message": "Administrator created. Activation email sent.",
        "data": data,
    }


@router.get("")
def list_administrators(
    _: AuthenticatedAdmin = Depends(require_level(AccessLevel.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    return {"success": True, "admins": [_admin_json(a) for a in list_admins(db)]}


@router.get("/{admin_id}")
def get_administrator(
    admin_id: int,
    actor: AuthenticatedAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    return {"success": True, "data": _admin_json(get_admin_for(db, actor, admin_id))}


@router.put("/{admin_id}")
def edit_administrator(
    admin_id: int,
    payload: AdminUpdateIn,
    actor: AuthenticatedAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    user = update_admin(
        db,
        actor,
        admin_id,
        name=payload.name,
        email=payload.email,
        access_level=payload.access_level,
        password=payload.password,
    )
    return {"success": True, "message": "Administrator updated", "data": _admin_json(user)}


@router.delete("/{admin_id}")
def delete_administrator(
    admin_id: int,
    actor: AuthenticatedAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    user = delete_admin(db, actor, admin_id)
    return {"success": True, "message": "Administrator deleted", "data": _status_json(user)}


@router.get("/{admin_id}/status")
def get_administrator_status(
    admin_id: int,
    actor: AuthenticatedAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    return {"success": True, "data": _status_json(get_status(db, actor, admin_id))}


@router.patch("/{admin_id}/status")
def change_administrator_status(
    admin_id: int,
    payload: AdminStatusIn,
    actor: AuthenticatedAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    user = set_status(db, actor, admin_id, payload.status)
    return {
        "success": True,
        "message": f"Status changed to {user.status.value}",
        "data": _admin_json(user),
    }


@router.post("/{admin_id}/invitation")
async def resend_administrator_invitation(
    admin_id: int,
    actor: AuthenticatedAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    mailer: ActivationMailer = Depends(get_mailer),
) -> dict:
    data = await resend_invitation(db, actor, admin_id, mailer=mailer)
    return {"success": True, "message": "Activation email sent", "data": data}
