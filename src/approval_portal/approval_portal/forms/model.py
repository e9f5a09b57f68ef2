from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..approvals.model import ApprovalStep
from ..common.datetime_utils import to_local_datetime

# Keys lifted out of a stored form document; everything else is type-specific.
_CORE_KEYS = {
    "id",
    "type",
    "requesterUid",
    "requesterName",
    "deptId",
    "createdAt",
    "updatedAt",
    "status",
    "approvalFlow",
    "entries",
}


@dataclass(frozen=True)
class Form:
    form_id: str
    type: str
    requester_name: str
    status: str
    created_at: Any
    requester_id: Optional[str] = None
    dept_id: Optional[str] = None
    approval_flow: tuple[ApprovalStep, ...] = ()
    entries: tuple[dict, ...] = ()
    fields: Mapping[str, Any] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @property
    def created_dt(self) -> Optional[datetime]:
        """Local submission time, or None when the stored value is unusable."""
        return to_local_datetime(self.created_at)

    def get_field(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    @classmethod
    def from_document(cls, form_id: str, data: Mapping[str, Any]) -> "Form":
        flow = data.get("approvalFlow") or []
        entries = data.get("entries") or []
        return cls(
            form_id=str(form_id),
            type=str(data.get("type") or "unknown"),
            requester_id=data.get("requesterUid"),
            requester_name=str(data.get("requesterName") or ""),
            dept_id=data.get("deptId") or data.get("dept") or None,
            status=str(data.get("status") or "draft"),
            created_at=data.get("createdAt"),
            updated_at=to_local_datetime(data.get("updatedAt")),
            approval_flow=tuple(ApprovalStep.from_dict(s) for s in flow if isinstance(s, Mapping)),
            entries=tuple(e for e in entries if isinstance(e, Mapping)),
            fields={k: v for k, v in data.items() if k not in _CORE_KEYS},
        )


def employee_of(entry: Mapping[str, Any]) -> dict:
    emp = entry.get("employee")
    return dict(emp) if isinstance(emp, Mapping) else {}
