from __future__ import annotations

from datetime import datetime

import pytest

from src.approval_portal.approval_portal.core.exceptions import NotFoundError, ValidationError
from src.approval_portal.approval_portal.forms import service as service_module
from src.approval_portal.approval_portal.forms.service import FormService, total_days, total_hours
from src.approval_portal.approval_portal.users.department_model import Department
from src.approval_portal.approval_portal.users.model import User
from tests.fakes import FakeDepartmentsRepo, FakeFormsRepo, FakeUsersRepo

NOW = datetime(2024, 3, 4, 10, 15, 30, 250000)

REQUESTER = User(uid="u1", nama="Ani", role="staff", nik="100", dept="d1", email="ani@example.com")


@pytest.fixture
def svc(monkeypatch):
    monkeypatch.setattr(service_module, "now_local", lambda: NOW)
    forms = FakeFormsRepo()
    users = FakeUsersRepo(
        [
            REQUESTER,
            User(uid="m1", nama="Mira", role="manager", dept="d1", email="mira@example.com"),
            User(uid="m2", nama="Joko", role="manager", dept="IT"),
            User(uid="u2", nama="Rudi", role="staff", dept="IT"),
            User(uid="u3", nama="Sari", role="staff", dept="d3"),
        ]
    )
    departments = FakeDepartmentsRepo(
        [Department("d1", "Sales", manager_id="m1", manager_name="Mira"), Department("d2", "IT"), Department("d3", "Legal")]
    )
    return FormService(forms, users, departments), forms


@pytest.mark.parametrize(
    "start,end,half,expected",
    [
        ("2024-03-04", "2024-03-04", "", 1),
        ("2024-03-04", "2024-03-06", "", 3),
        ("2024-02-28", "2024-03-01", "", 3),
        ("2024-03-04", "2024-03-09", "am", 0.5),
    ],
)
def test_total_days(start, end, half, expected):
    assert total_days(start, end, half) == expected


def test_total_days_rejects_reversed_range():
    with pytest.raises(ValidationError):
        total_days("2024-03-06", "2024-03-04")


@pytest.mark.parametrize(
    "start,end,break_minutes,expected",
    [
        ("17:00", "20:00", 0, 3.0),
        ("17:00", "20:10", 0, 3.5),
        ("17:00", "20:00", 30, 2.5),
        ("22:00", "02:00", "60", 3.0),
        ("17:00", "17:30", 45, 0.0),
        ("08:00", "08:00", 0, 24.0),
    ],
)
def test_total_hours(start, end, break_minutes, expected):
    assert total_hours(start, end, break_minutes) == expected


def test_leave_for_self_seeds_manager_step_and_totals(svc):
    service, forms = svc
    form = service.submit(
        user=REQUESTER,
        form_type="leave",
        data={"jenisCuti": "Annual", "alasan": "Family", "status": "approved", "entry": {"tanggalMulai": "2024-03-11", "tanggalSelesai": "2024-03-13"}},
    )

    assert form.form_id == f"cuti-{int(NOW.timestamp() * 1000)}"
    assert forms.created == [form]
    assert form.status == "pending"
    assert form.dept_id == "d1"
    assert form.created_at == "2024-03-04T10:15:30.250"
    assert [(s.role, s.approver_id, s.approver_name, s.status) for s in form.approval_flow] == [
        ("manager", "m1", "Mira", "pending"),
        ("general_manager", None, None, "pending"),
        ("hrd", None, None, "pending"),
    ]
    assert form.entries[0]["employee"] == {"id": "u1", "nik": "100", "nama": "Ani", "dept": "d1"}
    assert form.entries[0]["totalHari"] == 3
    assert form.get_field("jenisCuti") == "Annual"
    assert form.get_field("status") is None


def test_half_day_leave_ends_on_start_date(svc):
    service, _ = svc
    form = service.submit(
        user=REQUESTER,
        form_type="leave",
        data={"jenisCuti": "Annual", "entry": {"tanggalMulai": "2024-03-11", "tanggalSelesai": "2024-03-15", "halfDayType": "pm"}},
    )
    entry = form.entries[0]
    assert (entry["tanggalSelesai"], entry["totalHari"], entry["halfDayType"]) == ("2024-03-11", 0.5, "pm")


def test_leave_requires_type(svc):
    service, forms = svc
    with pytest.raises(ValidationError):
        service.submit(user=REQUESTER, form_type="leave", data={"entry": {"tanggalMulai": "2024-03-11", "tanggalSelesai": "2024-03-11"}})
    assert forms.created == []


def test_overtime_for_members_computes_hours(svc):
    service, _ = svc
    form = service.submit(
        user=REQUESTER,
        form_type="overtime",
        data={
            "entries": [
                {"employee": {"id": "e9", "nik": "900", "nama": "Eko", "dept": "d1"}, "tanggal": "2024-03-01", "jamMulai": "21:00", "jamSelesai": "01:00", "breakTime": "30"},
                {"tanggal": "2024-03-01", "jamMulai": "17:00", "jamSelesai": "19:10"},
            ]
        },
    )

    assert form.form_id.startswith("overtime-")
    assert [e["totalJam"] for e in form.entries] == [3.5, 2.5]
    assert form.entries[0]["breakTime"] == 30
    assert form.entries[0]["employee"]["nik"] == "900"
    assert form.entries[1]["employee"]["id"] == "u1"


def test_missed_punch_kind_is_checked(svc):
    service, _ = svc
    with pytest.raises(ValidationError):
        service.submit(
            user=REQUESTER,
            form_type="missedpunch",
            data={"entry": {"tanggal": "2024-03-01", "jenisMiss": "lunch", "jam": "08:00"}},
        )


def test_empty_member_list_is_rejected(svc):
    service, _ = svc
    with pytest.raises(ValidationError):
        service.submit(user=REQUESTER, form_type="sick_leave", data={"entries": []})


def test_purchase_needs_items_and_ends_with_finance(svc):
    service, _ = svc
    with pytest.raises(ValidationError):
        service.submit(user=REQUESTER, form_type="purchase", data={"items": []})

    form = service.submit(user=REQUESTER, form_type="purchase", data={"urgent": True, "items": [{"namaItem": "Laptop", "qty": 1}]})
    assert form.form_id.startswith("pr-")
    assert form.entries == ()
    assert form.get_field("items") == [{"namaItem": "Laptop", "qty": 1}]
    assert [s.role for s in form.approval_flow] == ["manager", "general_manager", "finance"]


def test_manager_found_by_department_name_when_none_is_assigned(svc):
    service, _ = svc
    rudi = User(uid="u2", nama="Rudi", role="staff", dept="IT")
    form = service.submit(user=rudi, form_type="permission-to-leave", data={"keperluan": "Bank", "tanggal": "2024-03-05"})

    assert form.form_id.startswith("keluar-")
    assert form.dept_id == "d2"
    assert form.approval_flow[0].approver_id == "m2"
    assert form.get_field("keperluan") == "Bank"


def test_missing_manager_is_reported(svc):
    service, forms = svc
    sari = User(uid="u3", nama="Sari", role="staff", dept="d3")
    with pytest.raises(ValidationError, match="Manager data not found"):
        service.submit(user=sari, form_type="permission-to-leave", data={})
    assert forms.created == []


def test_unknown_form_type(svc):
    service, _ = svc
    with pytest.raises(NotFoundError):
        service.submit(user=REQUESTER, form_type="resign", data={})
