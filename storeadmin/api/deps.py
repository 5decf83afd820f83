from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storeadmin.auth.guard import sufficient_level
from storeadmin.db import get_db
from storeadmin.models.admin_user import AccessLevel
from storeadmin.services.errors import AdminError, AdminErrorKind
from storeadmin.services.token_verifier import AuthenticatedAdmin, verify_credential

bearer_scheme = HTTPBearer(auto_error=False)


def bearer_credential(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    if not creds or not creds.credentials or creds.scheme.lower() != "bearer":
        return None
    return creds.credentials


def require_admin(
    credential: Optional[str] = Depends(bearer_credential),
    db: Session = Depends(get_db),
) -> AuthenticatedAdmin:
    """Require a valid admin token in the Authorization: Bearer <token> header."""
    return verify_credential(db, credential)


def require_level(required: AccessLevel) -> Callable[..., AuthenticatedAdmin]:
    def _dependency(admin: AuthenticatedAdmin = Depends(require_admin)) -> AuthenticatedAdmin:
        if not sufficient_level(admin.access_level, required):
            raise AdminError(AdminErrorKind.INSUFFICIENT_PRIVILEGE, "Access denied")
        return admin

    return _dependency
