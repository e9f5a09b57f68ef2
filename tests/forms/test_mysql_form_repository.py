from __future__ import annotations

import json
from datetime import datetime

from src.approval_portal.approval_portal.approvals.model import ApprovalStep
from src.approval_portal.approval_portal.forms.mysql_form_repository import MySQLFormRepository
from tests.fakes import make_form


class RecordingCursor:
    def __init__(self, rows=()):
        self.rows = list(rows)
        self.executed: list[tuple[str, tuple]] = []
        self.rowcount = 1

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), tuple(params)))

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return self.rows

    def close(self):
        pass


class RecordingConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        pass


class RecordingFactory:
    def __init__(self, rows=()):
        self.cursor = RecordingCursor(rows)

    def connect(self):
        return RecordingConnection(self.cursor)


def _row(**overrides):
    row = {
        "form_id": "f1",
        "type": "leave",
        "requester_uid": "u1",
        "requester_name": "Budi",
        "dept_id": "d1",
        "status": "pending",
        "created_at": "2024-01-15T09:00:00",
        "created_ts": datetime(2024, 1, 15, 9, 0),
        "updated_at": None,
        "approval_flow": "[]",
        "entries": "[]",
        "details": '{"jenisCuti": "Annual"}',
    }
    row.update(overrides)
    return row


def test_list_orders_by_normalized_timestamp():
    factory = RecordingFactory([_row()])
    forms = MySQLFormRepository(factory).list_forms(statuses=["pending"], limit=10)

    sql, params = factory.cursor.executed[0]
    assert sql.endswith("WHERE status IN (%s) ORDER BY created_ts DESC, created_at DESC LIMIT %s")
    assert params == ("pending", 10)
    assert forms[0].get_field("jenisCuti") == "Annual"


def test_timestamp_mapping_stored_as_text_is_decoded():
    stamp = {"seconds": int(datetime(2024, 1, 16, 8, 30).timestamp()), "nanoseconds": 0}
    factory = RecordingFactory([_row(created_at=json.dumps(stamp), created_ts=None)])

    form = MySQLFormRepository(factory).get("f1")

    assert form.created_at == stamp
    assert form.created_dt == datetime(2024, 1, 16, 8, 30)


def test_missing_raw_value_falls_back_to_normalized_timestamp():
    factory = RecordingFactory([_row(created_at=None)])
    assert MySQLFormRepository(factory).get("f1").created_dt == datetime(2024, 1, 15, 9, 0)


def test_create_writes_raw_and_normalized_timestamps():
    factory = RecordingFactory()
    form = make_form(
        "cuti-1",
        created_at="2024-01-15T02:00:00Z",
        requester_id="u1",
        dept_id="d1",
        approval_flow=(ApprovalStep(role="manager", approver_id="m1"),),
        entries=({"employee": {"nik": "1"}},),
        fields={"jenisCuti": "Annual"},
    )

    MySQLFormRepository(factory).create(form)

    sql, params = factory.cursor.executed[0]
    assert sql.startswith("INSERT INTO forms")
    assert params[0] == "cuti-1"
    assert params[6] == "2024-01-15T02:00:00Z"
    assert params[7] == form.created_dt
    assert json.loads(params[9])[0]["approverId"] == "m1"
    assert json.loads(params[11]) == {"jenisCuti": "Annual"}
