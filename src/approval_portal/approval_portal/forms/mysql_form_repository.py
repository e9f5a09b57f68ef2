from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..approvals.model import ApprovalStep
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Form
from .repository import FormRepository

_SELECT = """
    SELECT form_id, type, requester_uid, requester_name, dept_id, status,
           created_at, created_ts, updated_at, approval_flow, entries, details
    FROM forms
"""


def _raw_created_at(value: Any) -> Any:
    # Timestamp mappings are stored as JSON text in the VARCHAR column.
    if isinstance(value, str) and value.lstrip().startswith("{"):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _stored_created_at(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return dump_json(value)
    return str(value)


def _row_to_form(row: dict[str, Any]) -> Form:
    doc = dict(load_json(row.get("details"), {}) or {})
    doc.update(
        {
            "type": row.get("type"),
            "requesterUid": row.get("requester_uid"),
            "requesterName": row.get("requester_name"),
            "deptId": row.get("dept_id"),
            "status": row.get("status"),
            "createdAt": _raw_created_at(row.get("created_at")) or row.get("created_ts"),
            "updatedAt": row.get("updated_at"),
            "approvalFlow": load_json(row.get("approval_flow"), []),
            "entries": load_json(row.get("entries"), []),
        }
    )
    return Form.from_document(row["form_id"], doc)


def _in_clause(column: str, values: Sequence[str]) -> tuple[str, list]:
    placeholders = ",".join(["%s"] * len(values))
    return f"{column} IN ({placeholders})", list(values)


class MySQLFormRepository(FormRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, form_id: str) -> Optional[Form]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE form_id=%s", (form_id,))
            row = fetchone(cur)
            return _row_to_form(row) if row else None

    def list_forms(
        self,
        *,
        types: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[str]] = None,
        dept_id: Optional[str] = None,
        requester_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Form]:
        where: list[str] = []
        params: list[Any] = []

        if types:
            clause, values = _in_clause("type", types)
            where.append(clause)
            params.extend(values)
        if statuses:
            clause, values = _in_clause("status", statuses)
            where.append(clause)
            params.extend(values)
        if dept_id:
            where.append("dept_id=%s")
            params.append(dept_id)
        if requester_id:
            where.append("requester_uid=%s")
            params.append(requester_id)

        sql = _SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_ts DESC, created_at DESC"
        if limit:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_form(r) for r in fetchall(cur)]

    def update_approval(
        self,
        *,
        form_id: str,
        status: str,
        approval_flow: Sequence[ApprovalStep],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE forms
                SET status=%s, approval_flow=%s, updated_at=%s
                WHERE form_id=%s
                """,
                (status, dump_json([s.to_dict() for s in approval_flow]), updated_at, form_id),
            )
            return cur.rowcount > 0

    def set_department(self, form_id: str, dept_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE forms SET dept_id=%s WHERE form_id=%s", (dept_id, form_id))
            return cur.rowcount > 0

    def create(self, form: Form) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO forms
                    (form_id, type, requester_uid, requester_name, dept_id, status,
                     created_at, created_ts, updated_at, approval_flow, entries, details)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    form.form_id,
                    form.type,
                    form.requester_id,
                    form.requester_name,
                    form.dept_id,
                    form.status,
                    _stored_created_at(form.created_at),
                    form.created_dt,
                    form.updated_at,
                    dump_json([s.to_dict() for s in form.approval_flow]),
                    dump_json(list(form.entries)),
                    dump_json(dict(form.fields)),
                ),
            )

    def set_created_ts(self, form_id: str, created_ts: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE forms SET created_ts=%s WHERE form_id=%s", (created_ts, form_id))
            return cur.rowcount > 0
