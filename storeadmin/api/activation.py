from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storeadmin.db import get_db
from storeadmin.schemas.admin import ActivationIn
from storeadmin.services.invitations import activate_account, lookup_invitation

router = APIRouter(prefix="/activation", tags=["activation"])


@router.get("")
def check_activation_token(
    token: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    summary = lookup_invitation(db, token)
    return {"success": True, **summary}


@router.post("")
def activate(payload: ActivationIn, db: Session = Depends(get_db)) -> dict:
    user = activate_account(db, payload.token, payload.password)
    return {
        "success": True,
        "message": "Account activated",
        "admin": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "access_level": user.access_level.value,
            "email_verified": user.email_verified,
        },
    }
