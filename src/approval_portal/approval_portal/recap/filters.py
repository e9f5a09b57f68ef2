"""Date-range and department filtering for recapitulation reports."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Callable, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import END_OF_DAY
from ..core.constants import ALL_DEPARTMENTS
from ..forms.model import Form, employee_of
from ..users.department_model import Department


class DepartmentDirectory:
    """Department id -> name lookup, built once per report.

    Legacy records store either a department id or the literal name, so any
    value that is not a known id is taken to be a name already.
    """

    def __init__(self, id_to_name: Optional[Mapping[str, str]] = None):
        self._id_to_name = dict(id_to_name or {})

    @classmethod
    def from_departments(cls, departments: Iterable[Department]) -> "DepartmentDirectory":
        return cls({d.dept_id: d.name for d in departments})

    def name_of(self, dept_id: Optional[str]) -> Optional[str]:
        if not dept_id:
            return None
        return self._id_to_name.get(str(dept_id))

    def resolve(self, value: Optional[str]) -> str:
        if not value:
            return ""
        return self._id_to_name.get(str(value), str(value))

    def options(self) -> list[str]:
        return [ALL_DEPARTMENTS] + list(self._id_to_name.values())


def entry_department(form: Form, entry: Mapping, directory: DepartmentDirectory) -> str:
    """Department name shown for one entry of a form.

    The form's own department wins when it resolves; otherwise the
    employee's department (id or name) is used.
    """

    form_dept = directory.name_of(form.dept_id)
    if form_dept:
        return form_dept
    emp_dept = employee_of(entry).get("dept")
    if emp_dept:
        return directory.resolve(emp_dept)
    return directory.resolve(form.dept_id)


def departments_of(
    form: Form,
    directory: DepartmentDirectory,
    leaves: Optional[Sequence[Mapping]] = None,
) -> list[str]:
    entries = form.entries if leaves is None else leaves
    if not entries:
        name = directory.resolve(form.dept_id)
        return [name] if name else []
    return [entry_department(form, e, directory) for e in entries]


def _date_bounds(start_date: Optional[date], end_date: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
    start = datetime.combine(start_date, time.min) if start_date else None
    end = datetime.combine(end_date, END_OF_DAY) if end_date else None
    return start, end


def filter_records(
    records: Iterable[Form],
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    department: Optional[str] = None,
    directory: Optional[DepartmentDirectory] = None,
    leaves_of: Optional[Callable[[Form], Sequence[Mapping]]] = None,
) -> list[Form]:
    """Keep records submitted inside [start_date, end_date] for ``department``.

    Records whose submission time cannot be read are dropped.
    """

    directory = directory or DepartmentDirectory()
    start, end = _date_bounds(start_date, end_date)
    selected = (department or "").strip()
    check_dept = bool(selected) and selected != ALL_DEPARTMENTS

    out: list[Form] = []
    for form in records:
        submitted = form.created_dt
        if submitted is None:
            continue
        if start is not None and submitted < start:
            continue
        if end is not None and submitted > end:
            continue
        if check_dept:
            leaves = leaves_of(form) if leaves_of else None
            if selected not in departments_of(form, directory, leaves):
                continue
        out.append(form)
    return out
