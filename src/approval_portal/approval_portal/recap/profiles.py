"""Per-type report profiles.

A profile says which forms a recapitulation covers, what its leaf entries
are, how rows are keyed and which columns the screen/export shows. The
filter/group/project pipeline itself is shared.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import format_id_date, format_us_date, parse_loose_date
from ..core.enums import FormType
from ..core.exceptions import NotFoundError
from ..forms.model import Form
from .model import RecapRow

Getter = Callable[[RecapRow], Any]


@dataclass(frozen=True)
class Column:
    header: str
    getter: Getter


@dataclass(frozen=True)
class ReportProfile:
    key: str
    title: str
    form_types: tuple[str, ...]
    filename: str
    sheet_name: str
    columns: tuple[Column, ...]
    leaves: Callable[[Form], Sequence[Mapping[str, Any]]]
    business_date: Callable[[Form, Mapping[str, Any]], Optional[date]]
    merge_key: Optional[Callable[[Form, Mapping[str, Any]], tuple]] = None

    @property
    def headers(self) -> list[str]:
        return ["No"] + [c.header for c in self.columns]


def _entries(form: Form) -> Sequence[Mapping[str, Any]]:
    return form.entries


def _purchase_items(form: Form) -> Sequence[Mapping[str, Any]]:
    items = form.get_field("items") or form.get_field("purchaseItems") or []
    return [i for i in items if isinstance(i, Mapping)]


def _leaf_date(name: str) -> Callable[[Form, Mapping[str, Any]], Optional[date]]:
    def getter(form: Form, leaf: Mapping[str, Any]) -> Optional[date]:
        return parse_loose_date(leaf.get(name))

    return getter


def _form_date(name: str) -> Callable[[Form, Mapping[str, Any]], Optional[date]]:
    def getter(form: Form, leaf: Mapping[str, Any]) -> Optional[date]:
        value = parse_loose_date(form.get_field(name))
        if value is None and form.created_dt:
            return form.created_dt.date()
        return value

    return getter


def _leaf(name: str, default: Any = "") -> Getter:
    return lambda row: row.leaf.get(name, default)


def _field(name: str, default: Any = "") -> Getter:
    return lambda row: row.form.get_field(name, default)


def _employee(name: str) -> Getter:
    return lambda row: row.employee.get(name, "")


def _submitted_us(row: RecapRow) -> str:
    return format_us_date(row.submitted_at)


def _submitted_id(row: RecapRow) -> str:
    return format_id_date(row.submitted_at)


def _status_text(row: RecapRow) -> str:
    return row.status.text


def leave_type(form: Form) -> str:
    if form.type == FormType.SICK_LEAVE.value:
        return "Sick Leave"
    if form.type == FormType.LEAVE.value and form.get_field("jenisCuti"):
        return str(form.get_field("jenisCuti"))
    return "N/A"


def permission_time(form: Form) -> str:
    start = form.get_field("waktuMulai")
    end = form.get_field("waktuSelesai")
    kind = form.get_field("jenisIzin")
    if kind == "tidak-hadir":
        return "Absent (1 day)"
    if kind == "pulang-lebih-awal" and end:
        return f"until {end}"
    if kind == "datang-terlambat" and start:
        return f"Starts {start}"
    if start and end:
        return f"{start} - {end}"
    return "-"


def vehicle_details(form: Form) -> str:
    if not form.get_field("menggunakanKendaraan"):
        return "No"
    driver = form.get_field("namaSupir") or "-"
    plate = form.get_field("platNomor") or "-"
    return f"Yes (Driver: {driver}, Plate: {plate})"


def colleagues(form: Form) -> str:
    rekan = form.get_field("rekan") or []
    if not form.get_field("bawaRekan") or not rekan:
        return "None"
    return ", ".join(str(r.get("nama", "")) for r in rekan if isinstance(r, Mapping))


def _missed_punch_key(form: Form, leaf: Mapping[str, Any]) -> tuple:
    emp = leaf.get("employee") or {}
    return (str(emp.get("nik", "")), str(leaf.get("tanggal", "")))


_COMMON_HEAD = (
    Column("Form ID", lambda row: row.form.form_id),
    Column("Requester Name", lambda row: row.form.requester_name),
)
_FINAL_STATUS = Column("Final Status", _status_text)

LEAVE = ReportProfile(
    key="leave",
    title="Leave Recapitulation",
    form_types=(FormType.LEAVE.value, FormType.SICK_LEAVE.value),
    filename="leave_recapitulation.xlsx",
    sheet_name="LeaveRecap",
    leaves=_entries,
    business_date=_leaf_date("tanggalMulai"),
    columns=_COMMON_HEAD
    + (
        Column("Date Submitted", _submitted_us),
        Column("Employee NIK", _employee("nik")),
        Column("Employee Name", _employee("nama")),
        Column("Employee Dept", lambda row: row.department),
        Column("Leave Type", lambda row: leave_type(row.form)),
        Column("Start Date", _leaf("tanggalMulai")),
        Column("End Date", _leaf("tanggalSelesai")),
        Column("Total Days", _leaf("totalHari")),
        Column("Reason", _field("alasan")),
        _FINAL_STATUS,
    ),
)

OVERTIME = ReportProfile(
    key="overtime",
    title="Overtime Recapitulation",
    form_types=(FormType.OVERTIME.value,),
    filename="overtime_recapitulation.xlsx",
    sheet_name="OvertimeRecap",
    leaves=_entries,
    business_date=_leaf_date("tanggal"),
    columns=_COMMON_HEAD
    + (
        Column("Date Submitted", _submitted_id),
        Column("Employee NIK", _employee("nik")),
        Column("Employee Name", _employee("nama")),
        Column("Employee Dept", lambda row: row.department),
        Column("Overtime Date", _leaf("tanggal")),
        Column("Start Time", _leaf("jamMulai")),
        Column("End Time", _leaf("jamSelesai")),
        Column("Break Time (mins)", _leaf("breakTime")),
        Column("Total Hours", _leaf("totalJam")),
        Column("Reason", _field("alasan")),
        _FINAL_STATUS,
    ),
)

MISSED_PUNCH = ReportProfile(
    key="missedpunch",
    title="Missed Punch Recapitulation",
    form_types=(FormType.MISSED_PUNCH.value,),
    filename="missed_punch_recapitulation.xlsx",
    sheet_name="MissedPunchRecap",
    leaves=_entries,
    business_date=_leaf_date("tanggal"),
    merge_key=_missed_punch_key,
    columns=_COMMON_HEAD
    + (
        Column("Date Submitted", _submitted_us),
        Column("Form Department", lambda row: row.form_department),
        Column("Employee Name", _employee("nama")),
        Column("Employee NIK", _employee("nik")),
        Column("Employee Dept", lambda row: row.department),
        Column("Missed Date", _leaf("tanggal")),
        Column("Check-In Time", lambda row: row.check_in_time or "-"),
        Column("Check-Out Time", lambda row: row.check_out_time or "-"),
        Column("Reason", _field("alasan", None)),
        _FINAL_STATUS,
    ),
)

PURCHASE = ReportProfile(
    key="purchase",
    title="Purchase Recapitulation",
    form_types=(FormType.PURCHASE.value,),
    filename="purchase_recapitulation.xlsx",
    sheet_name="PurchaseRecap",
    leaves=_purchase_items,
    business_date=_form_date("tanggalRequest"),
    columns=_COMMON_HEAD
    + (
        Column("Date Submitted", _submitted_us),
        Column("Department", lambda row: row.form_department),
        Column("Item Code", _leaf("kodeItem")),
        Column("Item Name", _leaf("namaItem")),
        Column("Specification", _leaf("spek")),
        Column("Quantity", _leaf("qty")),
        Column("Unit", _leaf("unit")),
        Column("Reason", _leaf("alasan")),
        Column("Remarks", _leaf("remarks")),
        _FINAL_STATUS,
    ),
)

OUT_OF_DUTY = ReportProfile(
    key="outofduty",
    title="Out of Duty Recapitulation",
    form_types=(FormType.PERMISSION_TO_LEAVE.value,),
    filename="out_of_duty_recapitulation.xlsx",
    sheet_name="OutOfDutyRecap",
    leaves=_entries,
    business_date=_form_date("tanggal"),
    columns=(
        Column("Form ID", lambda row: row.form.form_id),
        Column("Requester", lambda row: row.form.requester_name),
        Column("Date Submitted", _submitted_us),
        Column("Department", lambda row: row.form_department),
        Column("Employee Name", _employee("nama")),
        Column("Employee NIK", _employee("nik")),
        Column("Permission Date", _field("tanggal")),
        Column("Permission Type", _field("jenisIzin")),
        Column("Time", lambda row: permission_time(row.form)),
        Column("Purpose", _field("keperluan")),
        Column("Explanation", _field("penjelasan")),
        Column("Vehicle Used?", lambda row: vehicle_details(row.form)),
        Column("Colleague(s)", lambda row: colleagues(row.form)),
        _FINAL_STATUS,
    ),
)

PROFILES: dict[str, ReportProfile] = {
    p.key: p for p in (LEAVE, OVERTIME, MISSED_PUNCH, PURCHASE, OUT_OF_DUTY)
}


def get_profile(key: str) -> ReportProfile:
    try:
        return PROFILES[key]
    except KeyError:
        raise NotFoundError(f"Unknown report: {key}")
