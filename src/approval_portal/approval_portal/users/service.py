from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_email, require_non_empty
from ..core.constants import RECAP_ROLES
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("nik", "nama", "email", "role", "jabatan", "dept")


class UserService:
    """Use case: look up the principal and manage users (admin area)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, uid: Optional[str]) -> Optional[User]:
        if not uid:
            return None
        return self._users.get_by_uid(str(uid))

    def has_admin_access(self, user: Optional[User]) -> bool:
        return bool(user) and user.role in RECAP_ROLES

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def update_user(self, *, current_user: User, uid: str, changes: dict) -> User:
        if not self.has_admin_access(current_user):
            raise AuthorizationError("You are not allowed to edit users")

        existing = self._users.get_by_uid(uid)
        if not existing:
            raise NotFoundError("User not found")

        cleaned: dict = {}
        for key in EDITABLE_FIELDS:
            if key not in changes:
                continue
            value = str(changes.get(key) or "").strip()
            if key == "nama":
                value = require_non_empty(value, "Name")
            elif key == "email" and value:
                value = require_email(value, "Email")
            cleaned[key] = value

        if not cleaned:
            raise ValidationError("Nothing to update")

        # MySQL reports 0 affected rows when values are unchanged, so the
        # result is not treated as a failure here.
        self._users.update_user(uid, changes=cleaned)
        logger.info("User %s updated by %s: %s", uid, current_user.uid, sorted(cleaned))
        return self._users.get_by_uid(uid) or existing

    def delete_user(self, *, current_user: User, uid: str) -> None:
        if not self.has_admin_access(current_user):
            raise AuthorizationError("You are not allowed to delete users")
        if current_user.uid == uid:
            raise ValidationError("You cannot delete your own account")

        if not self._users.get_by_uid(uid):
            raise NotFoundError("User not found")
        if not self._users.delete_by_uid(uid):
            raise ValidationError("Failed to delete user")
        logger.info("User %s deleted by %s", uid, current_user.uid)
