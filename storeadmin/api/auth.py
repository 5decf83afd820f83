from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storeadmin.api.deps import bearer_credential, require_admin
from storeadmin.db import get_db
from storeadmin.schemas.admin import AdminLoginIn, AdminOut
from storeadmin.services import accounts
from storeadmin.services.token_verifier import AuthenticatedAdmin, decode_credential
from storeadmin.store import get_admin

router = APIRouter(tags=["auth"])


@router.post("/auth/login")
def admin_login(payload: AdminLoginIn, db: Session = Depends(get_db)) -> dict:
    user, token = accounts.login(db, payload.email, payload.password)
    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "admin": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "access_level": user.access_level.value,
            "last_login": user.last_login,
        },
    }


@router.post("/auth/logout")
def admin_logout(
    credential: Optional[str] = Depends(bearer_credential),
    db: Session = Depends(get_db),
) -> dict:
    accounts.logout(db, credential)
    return {"success": True, "message": "Logged out"}


@router.get("/auth/verify")
def verify_token(
    admin: AuthenticatedAdmin = Depends(require_admin),
    credential: Optional[str] = Depends(bearer_credential),
    db: Session = Depends(get_db),
) -> dict:
    # The token may expire between require_admin and this decode.
    claims = decode_credential(credential)
    now = int(datetime.now(timezone.utc).timestamp())
    user = get_admin(db, admin.id)
    return {
        "success": True,
        "message": "Token valid",
        "admin": AdminOut.model_validate(user).model_dump(mode="json"),
        "token_info": {
            "issued_at": datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            "expires_at": datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            "remaining_seconds": max(claims["exp"] - now, 0),
        },
    }


@router.get("/me")
def admin_me(
    admin: AuthenticatedAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    user = get_admin(db, admin.id)
    return {"success": True, "data": AdminOut.model_validate(user).model_dump(mode="json")}
