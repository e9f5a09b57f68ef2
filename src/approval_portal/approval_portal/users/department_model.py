from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class Department:
    dept_id: str
    name: str
    manager_id: Optional[str] = None
    manager_name: Optional[str] = None
    manager_nik: Optional[str] = None
    employee_count: int = 0

    def holds(self, dept: Optional[str]) -> bool:
        """True when a user's ``dept`` value names this department, by id or name, ignoring case."""
        key = (dept or "").strip().casefold()
        return bool(key) and key in (self.dept_id.strip().casefold(), self.name.strip().casefold())

    def with_count(self, count: int) -> "Department":
        return replace(self, employee_count=int(count))

    def as_dict(self) -> dict:
        return {
            "id": self.dept_id,
            "name": self.name,
            "managerId": self.manager_id or "",
            "managerName": self.manager_name or "",
            "managerNIK": self.manager_nik or "",
            "employeeCount": self.employee_count,
        }
