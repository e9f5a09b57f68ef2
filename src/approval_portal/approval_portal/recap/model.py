from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..approvals.status import StatusLabel
from ..forms.model import Form, employee_of


@dataclass
class RecapRow:
    """One display/export row: a leaf entry of a form (or a merged group)."""

    key: tuple
    form: Form
    leaf: Mapping[str, Any]
    department: str
    form_department: str
    business_date: Optional[date]
    submitted_at: Optional[datetime]
    status: StatusLabel
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None

    @property
    def employee(self) -> dict:
        return employee_of(self.leaf)


@dataclass(frozen=True)
class RecapReport:
    report: str
    title: str
    rows: list[dict]
    departments: list[str]
    total_forms: int
