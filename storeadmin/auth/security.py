from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

# Password hashing
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a stored bcrypt hash.

    Pending accounts carry an empty hash; those never verify.
    """
    if not password_hash:
        return False
    return _pwd_context.verify(password, password_hash)


# JWT settings
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", str(7 * 24 * 60)))  # 7 days default

TOKEN_TYPE = "admin"


def create_access_token(
    *,
    admin_id: int,
    email: str,
    access_level: str,
    expires_in: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    """Create a signed admin bearer token."""
    now = now or datetime.now(timezone.utc)
    exp = now + (expires_in if expires_in is not None else timedelta(minutes=JWT_EXPIRE_MINUTES))

    payload: Dict[str, Any] = {
        "sub": str(admin_id),
        "email": email,
        "access_level": access_level,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate an access token. Raises jwt exceptions if invalid/expired."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
