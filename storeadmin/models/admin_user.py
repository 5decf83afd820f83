from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from storeadmin.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessLevel(str, enum.Enum):
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"
    SUPERADMIN = "SUPERADMIN"


class AdminStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    BLOCKED = "BLOCKED"
    PENDING = "PENDING"
    DELETED = "DELETED"


class AdminUser(Base):
    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Stored lowercased; unique across every status, DELETED included.
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    # Empty while the invitation is outstanding.
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    access_level: Mapped[AccessLevel] = mapped_column(
        Enum(AccessLevel, native_enum=False, length=16),
        nullable=False,
        default=AccessLevel.EDITOR,
    )
    status: Mapped[AdminStatus] = mapped_column(
        Enum(AdminStatus, native_enum=False, length=16),
        nullable=False,
        default=AdminStatus.PENDING,
        index=True,
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    activation_token: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True, unique=True, index=True
    )
    activation_token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_logout: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<AdminUser id={self.id} email={self.email!r} "
            f"level={self.access_level} status={self.status}>"
        )
