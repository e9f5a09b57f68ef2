from __future__ import annotations

from datetime import date, datetime

from src.approval_portal.approval_portal.recap.filters import (
    DepartmentDirectory,
    departments_of,
    entry_department,
    filter_records,
)
from tests.fakes import make_form

DIRECTORY = DepartmentDirectory({"d1": "Sales", "d2": "IT"})


def _emp(dept):
    return {"employee": {"nik": "100", "nama": "Ani", "dept": dept}}


def test_end_of_day_is_inclusive_to_the_millisecond():
    inside = make_form("in", created_at="2024-01-31T23:59:59.999")
    outside = make_form("out", created_at="2024-02-01T00:00:00.000")
    kept = filter_records([inside, outside], start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))
    assert [f.form_id for f in kept] == ["in"]


def test_sub_millisecond_timestamp_in_last_millisecond_is_kept():
    last_second = int(datetime(2024, 1, 31, 23, 59, 59).timestamp())
    form = make_form("late", created_at={"seconds": last_second, "nanoseconds": 999_500_000})

    assert form.created_dt == datetime(2024, 1, 31, 23, 59, 59, 999000)
    assert filter_records([form], end_date=date(2024, 1, 31)) == [form]


def test_iso_microseconds_are_truncated_to_milliseconds():
    form = make_form("late", created_at="2024-01-31T23:59:59.999999")
    assert filter_records([form], end_date=date(2024, 1, 31)) == [form]


def test_start_of_day_is_inclusive():
    first = make_form("first", created_at="2024-01-01T00:00:00")
    before = make_form("before", created_at="2023-12-31T23:59:59")
    kept = filter_records([before, first], start_date=date(2024, 1, 1))
    assert [f.form_id for f in kept] == ["first"]


def test_unreadable_submission_time_is_excluded():
    forms = [make_form("bad", created_at="not a date"), make_form("none", created_at=None), make_form("ok")]
    assert [f.form_id for f in filter_records(forms)] == ["ok"]


def test_timestamp_mappings_are_accepted():
    form = make_form("ts", created_at={"seconds": 1705309200, "nanoseconds": 0})
    assert filter_records([form]) == [form]


def test_department_filter_matches_any_entry():
    by_form_dept = make_form("a", dept_id="d1", entries=(_emp("d2"),))
    by_entry = make_form("b", entries=(_emp("IT"), _emp("d1")))
    other = make_form("c", dept_id="d2", entries=(_emp("d2"),))

    kept = filter_records([by_form_dept, by_entry, other], department="Sales", directory=DIRECTORY)
    assert [f.form_id for f in kept] == ["a", "b"]


def test_all_departments_and_blank_do_not_filter():
    forms = [make_form("a", dept_id="d1"), make_form("b", dept_id="d2")]
    assert filter_records(forms, department="All Departments", directory=DIRECTORY) == forms
    assert filter_records(forms, department="  ", directory=DIRECTORY) == forms


def test_filter_is_idempotent_and_keeps_order():
    forms = [
        make_form("a", created_at="2024-01-10T10:00:00", dept_id="d1"),
        make_form("b", created_at="2024-01-05T10:00:00", dept_id="d1"),
        make_form("c", created_at="2024-03-01T10:00:00", dept_id="d1"),
    ]
    kwargs = dict(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), department="Sales", directory=DIRECTORY)
    once = filter_records(forms, **kwargs)
    assert [f.form_id for f in once] == ["a", "b"]
    assert filter_records(once, **kwargs) == once


def test_entry_department_resolution():
    assert entry_department(make_form(dept_id="d1"), _emp("d2"), DIRECTORY) == "Sales"
    assert entry_department(make_form(dept_id="zz"), _emp("d2"), DIRECTORY) == "IT"
    assert entry_department(make_form(), _emp("Finance"), DIRECTORY) == "Finance"
    assert entry_department(make_form(dept_id="Legal"), {}, DIRECTORY) == "Legal"


def test_form_without_entries_uses_form_department():
    assert departments_of(make_form(dept_id="d2"), DIRECTORY) == ["IT"]
    assert departments_of(make_form(), DIRECTORY) == []


def test_directory_options():
    assert DIRECTORY.options() == ["All Departments", "Sales", "IT"]
    assert DIRECTORY.resolve("unknown") == "unknown"
    assert DIRECTORY.name_of("unknown") is None
