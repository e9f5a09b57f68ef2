from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Capability
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_uid(self, uid: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def count_in_department(self, *, dept_id: str, dept_name: str) -> int:
        """Users whose ``dept`` holds either the department id or its name, ignoring case."""

        raise NotImplementedError

    def update_user(self, uid: str, *, changes: dict) -> bool:
        raise NotImplementedError

    def set_capabilities(self, uid: str, capabilities: Iterable[Capability]) -> bool:
        raise NotImplementedError

    def delete_by_uid(self, uid: str) -> bool:
        raise NotImplementedError
