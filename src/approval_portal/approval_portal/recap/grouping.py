"""Turn filtered forms into display rows.

Missed-punch forms submit check-in and check-out as separate entries; rows
sharing (NIK, date) are merged so one employee-day shows once. Every other
report yields one row per leaf entry.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..approvals.status import resolve
from ..forms.model import Form
from .filters import DepartmentDirectory, entry_department
from .model import RecapRow
from .profiles import ReportProfile

CHECK_IN = "checkIn"
CHECK_OUT = "checkOut"


def _sort_key(row: RecapRow) -> tuple[int, date]:
    # Rows without a business date go last.
    if row.business_date is None:
        return (0, date.min)
    return (1, row.business_date)


def _new_row(key: tuple, form: Form, leaf, profile: ReportProfile, directory: DepartmentDirectory) -> RecapRow:
    return RecapRow(
        key=key,
        form=form,
        leaf=leaf,
        department=entry_department(form, leaf, directory),
        form_department=directory.name_of(form.dept_id) or "",
        business_date=profile.business_date(form, leaf),
        submitted_at=form.created_dt,
        status=resolve(form.approval_flow),
    )


def _apply_punch(row: RecapRow, leaf) -> None:
    kind = leaf.get("jenisMiss")
    if kind == CHECK_IN:
        row.check_in_time = leaf.get("jam")
    else:
        row.check_out_time = leaf.get("jam")


def group_records(
    records: Iterable[Form],
    profile: ReportProfile,
    directory: Optional[DepartmentDirectory] = None,
) -> list[RecapRow]:
    directory = directory or DepartmentDirectory()
    rows: dict[tuple, RecapRow] = {}

    for form in records:
        for index, leaf in enumerate(profile.leaves(form)):
            if profile.merge_key is None:
                key = (form.form_id, index)
                rows[key] = _new_row(key, form, leaf, profile, directory)
                continue

            key = profile.merge_key(form, leaf)
            existing = rows.get(key)
            if existing is None:
                row = _new_row(key, form, leaf, profile, directory)
                kind = leaf.get("jenisMiss")
                if kind == CHECK_IN:
                    row.check_in_time = leaf.get("jam")
                elif kind == CHECK_OUT:
                    row.check_out_time = leaf.get("jam")
                rows[key] = row
            else:
                _apply_punch(existing, leaf)

    return sorted(rows.values(), key=_sort_key, reverse=True)
