"""Access level ordering.

``EDITOR < ADMIN < SUPERADMIN``. Anything else ranks 0 and never passes.
"""
from __future__ import annotations

from typing import Union

from storeadmin.models.admin_user import AccessLevel

LEVEL_RANKS = {
    AccessLevel.EDITOR: 1,
    AccessLevel.ADMIN: 2,
    AccessLevel.SUPERADMIN: 3,
}


def rank(level: Union[AccessLevel, str, None]) -> int:
    if level is None:
        return 0
    try:
        return LEVEL_RANKS[AccessLevel(level)]
    except ValueError:
        return 0


def sufficient_level(actual: Union[AccessLevel, str, None], required: Union[AccessLevel, str]) -> bool:
    return rank(actual) >= rank(required) and rank(actual) > 0
