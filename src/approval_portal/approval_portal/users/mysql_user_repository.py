from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import Capability
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import User
from .repository import UserRepository

EDITABLE_COLUMNS = ("nik", "nama", "email", "role", "jabatan", "dept")

_SELECT = "SELECT uid, nik, nama, email, role, jabatan, dept, capabilities FROM users"


def _row_to_user(row: dict) -> User:
    data = dict(row)
    data["capabilities"] = load_json(row.get("capabilities"), None)
    return User.from_dict(data)


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_uid(self, uid: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE uid=%s", (uid,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY nama")
            return [_row_to_user(r) for r in fetchall(cur)]

    def count_in_department(self, *, dept_id: str, dept_name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM users WHERE LOWER(TRIM(dept)) IN (LOWER(TRIM(%s)), LOWER(TRIM(%s)))",
                (dept_id, dept_name),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def update_user(self, uid: str, *, changes: dict) -> bool:
        cols = [c for c in EDITABLE_COLUMNS if c in changes]
        if not cols:
            return False
        assignments = ", ".join(f"{c}=%s" for c in cols)
        params = [changes[c] for c in cols] + [uid]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {assignments} WHERE uid=%s", tuple(params))
            return cur.rowcount > 0

    def set_capabilities(self, uid: str, capabilities: Iterable[Capability]) -> bool:
        values = sorted({Capability(c).value for c in capabilities})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET capabilities=%s WHERE uid=%s", (dump_json(values), uid))
            return cur.rowcount > 0

    def delete_by_uid(self, uid: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE uid=%s", (uid,))
            return cur.rowcount > 0
