from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .department_model import Department
from .department_repository import DepartmentRepository

_SELECT = "SELECT dept_id, name, manager_id, manager_name, manager_nik FROM departments"


def _row_to_department(r: dict) -> Department:
    return Department(
        dept_id=str(r["dept_id"]),
        name=r["name"],
        manager_id=r.get("manager_id") or None,
        manager_name=r.get("manager_name") or None,
        manager_nik=r.get("manager_nik") or None,
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY name")
            return [_row_to_department(r) for r in fetchall(cur)]

    def get(self, dept_id: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE dept_id=%s", (dept_id,))
            row = fetchone(cur)
            return _row_to_department(row) if row else None

    def create(self, *, name: str) -> str:
        dept_id = uuid.uuid4().hex[:20]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO departments(dept_id, name, manager_id, manager_name, manager_nik)
                VALUES(%s, %s, '', '', '')
                """,
                (dept_id, name),
            )
        return dept_id

    def delete(self, dept_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM departments WHERE dept_id=%s", (dept_id,))
            return cur.rowcount > 0

    def set_manager(
        self,
        dept_id: str,
        *,
        manager_id: Optional[str],
        manager_name: Optional[str],
        manager_nik: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE departments
                SET manager_id=%s, manager_name=%s, manager_nik=%s
                WHERE dept_id=%s
                """,
                (manager_id or "", manager_name or "", manager_nik or "", dept_id),
            )
            return cur.rowcount > 0
