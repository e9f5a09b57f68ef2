"""Final-status resolution for approval flows.

The recap screens, the history page and the exports all show the same
derived status: the most recent decision taken on the flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from ..core.enums import FormStatus, StatusColor, StepStatus
from .model import ApprovalStep

_COLORS = {
    FormStatus.APPROVED.value: StatusColor.SUCCESS,
    FormStatus.GM_APPROVED.value: StatusColor.SUCCESS,
    FormStatus.MANAGER_APPROVED.value: StatusColor.SUCCESS,
    FormStatus.HRD_APPROVED.value: StatusColor.SUCCESS,
    FormStatus.REJECTED.value: StatusColor.DANGER,
    FormStatus.PENDING.value: StatusColor.WARNING,
    FormStatus.IN_REVIEW.value: StatusColor.WARNING,
}

StepLike = Union[ApprovalStep, dict]


@dataclass(frozen=True)
class StatusLabel:
    value: str
    text: str
    color: StatusColor

    def as_dict(self) -> dict:
        return {"value": self.value, "text": self.text, "color": self.color.value}


def _step_status(step: StepLike) -> str:
    if isinstance(step, ApprovalStep):
        return step.status
    return str(step.get("status") or StepStatus.PENDING.value)


def resolve_final_status(steps: Optional[Sequence[StepLike]]) -> str:
    """Status of the last non-pending step, or ``pending``."""
    if not steps:
        return StepStatus.PENDING.value
    for step in reversed(steps):
        status = _step_status(step)
        if status != StepStatus.PENDING.value:
            return status
    return StepStatus.PENDING.value


def format_status_text(status: str) -> str:
    return (status or "").replace("_", " ").upper()


def status_color(status: str) -> StatusColor:
    return _COLORS.get((status or "").strip().lower(), StatusColor.NEUTRAL)


def resolve(steps: Optional[Iterable[StepLike]]) -> StatusLabel:
    value = resolve_final_status(list(steps or []))
    return StatusLabel(value=value, text=format_status_text(value), color=status_color(value))
