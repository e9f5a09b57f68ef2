from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..approvals.model import ApprovalStep
from .model import Form


class FormRepository(Protocol):
    def get(self, form_id: str) -> Optional[Form]:
        raise NotImplementedError

    def list_forms(
        self,
        *,
        types: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[str]] = None,
        dept_id: Optional[str] = None,
        requester_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Form]:
        """Forms newest first; every filter is optional."""

        raise NotImplementedError

    def update_approval(
        self,
        *,
        form_id: str,
        status: str,
        approval_flow: Sequence[ApprovalStep],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def set_department(self, form_id: str, dept_id: str) -> bool:
        raise NotImplementedError

    def create(self, form: Form) -> None:
        """Insert a new form; ``created_ts`` is derived from ``created_at``."""

        raise NotImplementedError

    def set_created_ts(self, form_id: str, created_ts: datetime) -> bool:
        raise NotImplementedError
