"""Manager eligibility.

``is_manager_eligible`` reads meaning out of the free-text ``role`` and
``jabatan`` fields. It has false positives/negatives and is only used to
backfill explicit capabilities (see scripts/backfill_capabilities.py) and
for user records that have never been backfilled.
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from ..core.enums import Capability
from .model import User

_SHARED_MARKERS = ("manager", "gm", "head")
_EXACT_ROLES = ("general_manager", "general manager")
_JABATAN_MARKERS = ("kepala", "supervisor", "spv")

UserLike = Union[User, Mapping[str, Any]]


def _get(user: UserLike, name: str) -> str:
    if isinstance(user, User):
        value = getattr(user, name)
    else:
        value = user.get(name)
    return str(value or "").strip().lower()


def is_manager_eligible(user: UserLike) -> bool:
    if not _get(user, "nama"):
        return False

    role = _get(user, "role")
    jabatan = _get(user, "jabatan")

    if any(m in role for m in _SHARED_MARKERS) or role in _EXACT_ROLES:
        return True
    if any(m in jabatan for m in _SHARED_MARKERS + _JABATAN_MARKERS) or jabatan in _EXACT_ROLES:
        return True
    return False


def derive_capabilities(user: UserLike) -> frozenset[Capability]:
    """Capabilities to persist for a legacy user record."""
    if is_manager_eligible(user):
        return frozenset({Capability.MANAGE_DEPARTMENT})
    return frozenset()


def can_manage_department(user: User) -> bool:
    if user.capabilities is None:
        return is_manager_eligible(user)
    return bool(user.nama) and Capability.MANAGE_DEPARTMENT in user.capabilities
