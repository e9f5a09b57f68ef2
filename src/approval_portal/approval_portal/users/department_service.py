from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .department_model import Department
from .department_repository import DepartmentRepository
from .eligibility import can_manage_department
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class DepartmentService:
    """Use case: department administration.

    Employee counts and duplicate-name checks are read-then-act; a concurrent
    change between the check and the write is not detected.
    """

    def __init__(self, departments: DepartmentRepository, users: UserRepository):
        self._departments = departments
        self._users = users

    def name_map(self) -> dict[str, str]:
        return {d.dept_id: d.name for d in self._departments.list_all()}

    def list_departments(self, *, search: Optional[str] = None) -> list[Department]:
        users = self._users.list_all()
        out: list[Department] = []
        for dept in self._departments.list_all():
            count = sum(1 for u in users if dept.holds(u.dept))
            out.append(dept.with_count(count))

        term = (search or "").strip().lower()
        if term:
            out = [
                d
                for d in out
                if term in d.name.lower() or (d.manager_name and term in d.manager_name.lower())
            ]
        return out

    def list_manager_candidates(self) -> Sequence[User]:
        return [u for u in self._users.list_all() if can_manage_department(u)]

    def add_department(self, *, name: str) -> str:
        name = require_non_empty(name, "Department name")
        for dept in self._departments.list_all():
            if dept.name.lower() == name.lower():
                raise ValidationError("A department with that name already exists.")

        dept_id = self._departments.create(name=name)
        logger.info("Department %s (%s) created", name, dept_id)
        return dept_id

    def delete_department(self, *, dept_id: str) -> None:
        dept = self._departments.get(dept_id)
        if not dept:
            raise NotFoundError("Department not found")

        count = self._users.count_in_department(dept_id=dept.dept_id, dept_name=dept.name)
        if count > 0:
            raise ValidationError("Cannot delete a department that still has active employees.")

        if not self._departments.delete(dept.dept_id):
            raise ValidationError("Failed to delete department")
        logger.info("Department %s (%s) deleted", dept.name, dept.dept_id)

    def assign_manager(self, *, dept_id: str, manager_uid: Optional[str]) -> Department:
        dept = self._departments.get(dept_id)
        if not dept:
            raise NotFoundError("Department not found")

        manager_uid = (manager_uid or "").strip()
        if not manager_uid:
            self._departments.set_manager(dept.dept_id, manager_id=None, manager_name=None, manager_nik=None)
            logger.info("Manager removed from department %s", dept.dept_id)
            return Department(dept_id=dept.dept_id, name=dept.name)

        manager = self._users.get_by_uid(manager_uid)
        if not manager:
            raise NotFoundError("Manager not found")
        if not can_manage_department(manager):
            raise ValidationError(f"{manager.nama or manager.uid} cannot be assigned as a department manager")

        self._departments.set_manager(
            dept.dept_id,
            manager_id=manager.uid,
            manager_name=manager.nama,
            manager_nik=manager.nik,
        )
        logger.info("Manager %s assigned to department %s", manager.uid, dept.dept_id)
        return Department(
            dept_id=dept.dept_id,
            name=dept.name,
            manager_id=manager.uid,
            manager_name=manager.nama,
            manager_nik=manager.nik,
        )
