from __future__ import annotations

from typing import Any, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchone, load_json
from .repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[dict[str, Any]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT value FROM settings WHERE setting_key=%s", (key,))
            row = fetchone(cur)
            return load_json(row["value"], None) if row else None

    def put(self, key: str, value: dict[str, Any]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO settings(setting_key, value) VALUES(%s, %s)
                ON DUPLICATE KEY UPDATE value=VALUES(value)
                """,
                (key, dump_json(value)),
            )
