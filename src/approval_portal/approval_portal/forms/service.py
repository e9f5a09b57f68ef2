from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..approvals.service import default_approval_flow
from ..common.datetime_utils import now_local, parse_iso_date
from ..core.enums import FormStatus, FormType, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..users.department_model import Department
from ..users.department_repository import DepartmentRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import Form
from .repository import FormRepository

logger = logging.getLogger(__name__)

# Form id prefix per type: "<prefix>-<epoch millis>".
ID_PREFIXES = {
    FormType.LEAVE.value: "cuti",
    FormType.SICK_LEAVE.value: "sakit",
    FormType.OVERTIME.value: "overtime",
    FormType.MISSED_PUNCH.value: "missedpunch",
    FormType.PURCHASE.value: "pr",
    FormType.PERMISSION_TO_LEAVE.value: "keluar",
}

HALF_DAY_TYPES = ("am", "pm")
MISSED_PUNCH_KINDS = ("checkIn", "checkOut")

# Keys the server owns; never taken from the submitted body.
_RESERVED_KEYS = {
    "id",
    "type",
    "status",
    "requesterUid",
    "requesterName",
    "deptId",
    "createdAt",
    "updatedAt",
    "approvalFlow",
    "entries",
    "entry",
}

NO_MANAGER_MESSAGE = "Manager data not found for your department. Please contact HR."


def total_days(start: str, end: str, half_day_type: str = "") -> float:
    """Inclusive day count of a leave entry; a half day counts 0.5."""
    start_date = _date(start, "Start date")
    if half_day_type:
        return 0.5
    end_date = _date(end, "End date")
    if end_date < start_date:
        raise ValidationError("End date cannot be before the start date")
    return (end_date - start_date).days + 1


def total_hours(start: str, end: str, break_minutes: Any = 0) -> float:
    """Overtime hours between two HH:MM times, minus the break, rounded up to half hours.

    An end time at or before the start time runs past midnight.
    """

    begin = _clock(start, "Start time")
    finish = _clock(end, "End time")
    minutes = (finish - begin).total_seconds() / 60
    if minutes <= 0:
        minutes += 24 * 60
    hours = max(0.0, (minutes - _break_minutes(break_minutes)) / 60)
    return math.ceil(hours * 2) / 2


def _date(value: Any, label: str):
    try:
        return parse_iso_date(str(value or "").strip())
    except ValueError:
        raise ValidationError(f"{label} must be a YYYY-MM-DD date") from None


def _clock(value: Any, label: str) -> datetime:
    try:
        return datetime.strptime(str(value or "").strip(), "%H:%M")
    except ValueError:
        raise ValidationError(f"{label} must be an HH:MM time") from None


def _break_minutes(value: Any) -> int:
    try:
        minutes = int(str(value or 0).strip() or 0)
    except ValueError:
        raise ValidationError("Break time must be a whole number of minutes") from None
    if minutes < 0:
        raise ValidationError("Break time cannot be negative")
    return minutes


def _employee_of(user: User) -> dict:
    return {"id": user.uid, "nik": user.nik, "nama": user.nama, "dept": user.dept}


class FormService:
    """Use case: a requester submits a new form into its approval flow.

    The requester's department manager is resolved at submission time and
    written into the first step; general manager and the final approver
    steps are filled in when they decide.
    """

    def __init__(self, forms: FormRepository, users: UserRepository, departments: DepartmentRepository):
        self._forms = forms
        self._users = users
        self._departments = departments

    def _department_of(self, user: User) -> Optional[Department]:
        if not user.dept:
            return None
        dept = self._departments.get(user.dept)
        if dept:
            return dept
        return next((d for d in self._departments.list_all() if d.holds(user.dept)), None)

    def resolve_manager(self, user: User) -> tuple[str, User]:
        """The requester's department id and its manager."""
        dept = self._department_of(user)
        manager = None
        if dept and dept.manager_id:
            manager = self._users.get_by_uid(dept.manager_id)
        if manager is None:
            manager = next(
                (
                    u
                    for u in self._users.list_all()
                    if u.role == Role.MANAGER.value
                    and (dept.holds(u.dept) if dept else bool(user.dept) and u.dept == user.dept)
                ),
                None,
            )
        if manager is None:
            raise ValidationError(NO_MANAGER_MESSAGE)
        return (dept.dept_id if dept else user.dept), manager

    def _entries(self, user: User, data: Mapping[str, Any]) -> list[dict]:
        raw = data.get("entries")
        if raw is None:
            raw = [data.get("entry") or {}]
        if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
            raise ValidationError("Entries must be a list")

        entries = []
        for item in raw:
            if not isinstance(item, Mapping):
                raise ValidationError("Each entry must be an object")
            entry = dict(item)
            employee = entry.get("employee")
            if isinstance(employee, Mapping) and (employee.get("nik") or employee.get("id")):
                entry["employee"] = {k: str(employee.get(k) or "") for k in ("id", "nik", "nama", "dept")}
            else:
                entry["employee"] = _employee_of(user)
            entries.append(entry)
        if not entries:
            raise ValidationError("Please add at least one employee to the request")
        return entries

    def _leave_entry(self, entry: dict) -> dict:
        half_day = str(entry.get("halfDayType") or "").strip()
        if half_day and half_day not in HALF_DAY_TYPES:
            raise ValidationError("Half day type must be am or pm")
        if half_day:
            entry["tanggalSelesai"] = entry.get("tanggalMulai")
        entry["halfDayType"] = half_day
        entry["totalHari"] = total_days(entry.get("tanggalMulai"), entry.get("tanggalSelesai"), half_day)
        return entry

    def _sick_entry(self, entry: dict) -> dict:
        entry["totalHari"] = total_days(entry.get("tanggalMulai"), entry.get("tanggalSelesai"))
        return entry

    def _overtime_entry(self, entry: dict) -> dict:
        _date(entry.get("tanggal"), "Overtime date")
        entry["breakTime"] = _break_minutes(entry.get("breakTime"))
        entry["totalJam"] = total_hours(entry.get("jamMulai"), entry.get("jamSelesai"), entry["breakTime"])
        return entry

    def _missed_punch_entry(self, entry: dict) -> dict:
        if entry.get("jenisMiss") not in MISSED_PUNCH_KINDS:
            raise ValidationError("Missed punch type must be checkIn or checkOut")
        _date(entry.get("tanggal"), "Missed punch date")
        _clock(entry.get("jam"), "Missed punch time")
        return entry

    def _build_entries(self, form_type: str, user: User, data: Mapping[str, Any]) -> list[dict]:
        if form_type == FormType.PURCHASE.value:
            items = data.get("items")
            if not isinstance(items, Sequence) or isinstance(items, (str, bytes)) or not items:
                raise ValidationError("Please add at least one item to the purchase request")
            return []

        entries = self._entries(user, data)
        if form_type == FormType.LEAVE.value:
            if not str(data.get("jenisCuti") or "").strip():
                raise ValidationError("Please select a leave type first!")
            return [self._leave_entry(e) for e in entries]
        if form_type == FormType.SICK_LEAVE.value:
            return [self._sick_entry(e) for e in entries]
        if form_type == FormType.OVERTIME.value:
            return [self._overtime_entry(e) for e in entries]
        if form_type == FormType.MISSED_PUNCH.value:
            return [self._missed_punch_entry(e) for e in entries]
        return entries

    def submit(self, *, user: User, form_type: str, data: Mapping[str, Any]) -> Form:
        if form_type not in ID_PREFIXES:
            raise NotFoundError(f"Unknown form type: {form_type}")

        entries = self._build_entries(form_type, user, data)
        dept_id, manager = self.resolve_manager(user)

        flow = list(default_approval_flow(dept_id))
        flow[0] = replace(flow[0], approver_id=manager.uid, approver_name=manager.nama)
        if form_type == FormType.PURCHASE.value:
            flow[-1] = replace(flow[-1], role=Role.FINANCE.value)

        now = now_local()
        form = Form(
            form_id=f"{ID_PREFIXES[form_type]}-{int(now.timestamp() * 1000)}",
            type=form_type,
            requester_id=user.uid,
            requester_name=user.nama,
            dept_id=dept_id,
            status=FormStatus.PENDING.value,
            created_at=now.isoformat(timespec="milliseconds"),
            updated_at=now,
            approval_flow=tuple(flow),
            entries=tuple(entries),
            fields={k: v for k, v in data.items() if k not in _RESERVED_KEYS},
        )
        self._forms.create(form)
        logger.info("Form %s (%s) submitted by %s, manager %s", form.form_id, form_type, user.uid, manager.uid)
        return form
