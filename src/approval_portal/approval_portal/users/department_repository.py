from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .department_model import Department


class DepartmentRepository(Protocol):
    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def get(self, dept_id: str) -> Optional[Department]:
        raise NotImplementedError

    def create(self, *, name: str) -> str:
        raise NotImplementedError

    def delete(self, dept_id: str) -> bool:
        raise NotImplementedError

    def set_manager(
        self,
        dept_id: str,
        *,
        manager_id: Optional[str],
        manager_name: Optional[str],
        manager_nik: Optional[str],
    ) -> bool:
        raise NotImplementedError
