from __future__ import annotations

import io
import logging
from datetime import date
from typing import Optional

from ..forms.repository import FormRepository
from ..users.department_repository import DepartmentRepository
from .exporter import rows_to_xlsx
from .filters import DepartmentDirectory, filter_records
from .grouping import group_records
from .profiles import PROFILES, ReportProfile, get_profile
from .projection import project_rows
from .model import RecapReport, RecapRow

logger = logging.getLogger(__name__)


class RecapService:
    """Recapitulation reports: fetch -> filter -> group -> project."""

    def __init__(self, forms: FormRepository, departments: DepartmentRepository):
        self._forms = forms
        self._departments = departments

    def list_reports(self) -> list[dict]:
        return [{"key": p.key, "title": p.title, "filename": p.filename} for p in PROFILES.values()]

    def directory(self) -> DepartmentDirectory:
        return DepartmentDirectory.from_departments(self._departments.list_all())

    def build_rows(
        self,
        profile: ReportProfile,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        department: Optional[str] = None,
        directory: Optional[DepartmentDirectory] = None,
    ) -> tuple[list[RecapRow], int]:
        directory = directory or self.directory()
        forms = self._forms.list_forms(types=profile.form_types)
        kept = filter_records(
            forms,
            start_date=start_date,
            end_date=end_date,
            department=department,
            directory=directory,
            leaves_of=profile.leaves,
        )
        logger.debug("Report %s: %d/%d forms kept", profile.key, len(kept), len(forms))
        return group_records(kept, profile, directory), len(kept)

    def build_report(
        self,
        report: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        department: Optional[str] = None,
    ) -> RecapReport:
        profile = get_profile(report)
        directory = self.directory()
        rows, total_forms = self.build_rows(
            profile,
            start_date=start_date,
            end_date=end_date,
            department=department,
            directory=directory,
        )

        projected = project_rows(rows, profile)
        for record, row in zip(projected, rows):
            record["_status"] = row.status.as_dict()

        return RecapReport(
            report=profile.key,
            title=profile.title,
            rows=projected,
            departments=directory.options(),
            total_forms=total_forms,
        )

    def export(
        self,
        report: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        department: Optional[str] = None,
    ) -> tuple[io.BytesIO, str]:
        profile = get_profile(report)
        rows, _ = self.build_rows(profile, start_date=start_date, end_date=end_date, department=department)
        projected = project_rows(rows, profile)
        logger.info("Exporting %s: %d rows", profile.key, len(projected))
        return rows_to_xlsx(projected, headers=profile.headers, sheet_name=profile.sheet_name), profile.filename
