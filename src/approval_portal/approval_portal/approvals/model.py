from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import to_local_datetime
from ..core.enums import StepStatus


@dataclass(frozen=True)
class ApprovalStep:
    """One step of a form's approval flow.

    Stored steps come from several generations of the submit pages, so
    ``from_dict`` accepts the legacy key names as well.
    """

    role: str
    status: str = StepStatus.PENDING.value
    approver_id: Optional[str] = None
    approver_name: Optional[str] = None
    decided_at: Optional[datetime] = None
    comment: Optional[str] = None
    dept_id: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == StepStatus.PENDING.value

    @classmethod
    def from_dict(cls, data: dict) -> "ApprovalStep":
        return cls(
            role=str(data.get("role") or ""),
            status=str(data.get("status") or StepStatus.PENDING.value),
            approver_id=data.get("approverId") or data.get("approvedBy") or data.get("uid"),
            approver_name=data.get("approverName") or data.get("approvedByName") or data.get("nama"),
            decided_at=to_local_datetime(data.get("decidedAt") or data.get("approvedAt")),
            comment=data.get("comment") or data.get("comments") or None,
            dept_id=data.get("deptId") or data.get("dept"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "status": self.status,
            "approverId": self.approver_id,
            "approverName": self.approver_name,
            "decidedAt": self.decided_at.isoformat() if self.decided_at else None,
            "comment": self.comment,
            "deptId": self.dept_id,
        }
