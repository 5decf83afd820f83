"""Record access for administrator accounts.

Thin query helpers over a SQLAlchemy session. Callers own the transaction
and decide when to commit.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storeadmin.models.admin_user import AdminUser


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_admin(db: Session, admin_id: int) -> Optional[AdminUser]:
    return db.get(AdminUser, admin_id)


def get_admin_by_email(db: Session, email: str) -> Optional[AdminUser]:
    return db.execute(
        select(AdminUser).where(AdminUser.email == normalize_email(email))
    ).scalar_one_or_none()


def get_admin_by_activation_token(db: Session, token: str) -> Optional[AdminUser]:
    if not token:
        return None
    return db.execute(
        select(AdminUser).where(AdminUser.activation_token == token)
    ).scalar_one_or_none()


def list_admins(db: Session) -> List[AdminUser]:
    return list(
        db.execute(
            select(AdminUser).order_by(AdminUser.created_at.desc(), AdminUser.id.desc())
        ).scalars()
    )


def count_admins(db: Session) -> int:
    return db.execute(select(func.count(AdminUser.id))).scalar() or 0
