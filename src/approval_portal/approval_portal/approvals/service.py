from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_QUEUE_LIMIT
from ..core.enums import ApprovalAction, FormStatus, Role, StepStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..forms.model import Form
from ..forms.repository import FormRepository
from ..users.model import User
from .model import ApprovalStep
from .status import resolve

logger = logging.getLogger(__name__)

_FINAL_APPROVERS = {Role.HRD.value, Role.FINANCE.value}

# Routing status a role is allowed to act on.
_ACTIONABLE = {
    Role.GENERAL_MANAGER.value: (FormStatus.MANAGER_APPROVED.value,),
    Role.HRD.value: (FormStatus.GM_APPROVED.value,),
    Role.FINANCE.value: (FormStatus.GM_APPROVED.value,),
}
_MANAGER_ACTIONABLE = (FormStatus.DRAFT.value, FormStatus.PENDING.value)


def default_approval_flow(dept_id: Optional[str]) -> tuple[ApprovalStep, ...]:
    """Flow used for forms stored without one: manager -> GM -> HRD."""
    return (
        ApprovalStep(role=Role.MANAGER.value, dept_id=dept_id),
        ApprovalStep(role=Role.GENERAL_MANAGER.value),
        ApprovalStep(role=Role.HRD.value),
    )


def effective_flow(form: Form) -> tuple[ApprovalStep, ...]:
    return tuple(form.approval_flow) or default_approval_flow(form.dept_id)


def current_step_index(flow: Sequence[ApprovalStep]) -> int:
    for i, step in enumerate(flow):
        if step.is_pending:
            return i
    return 0


def can_approve(user: Optional[User], form: Form) -> bool:
    if not user:
        return False
    if user.role == Role.MANAGER.value:
        return form.status in _MANAGER_ACTIONABLE and bool(form.dept_id) and form.dept_id == user.dept
    return form.status in _ACTIONABLE.get(user.role, ())


def next_status(role: str, action: ApprovalAction) -> str:
    if action == ApprovalAction.REJECT:
        return FormStatus.REJECTED.value
    if role == Role.MANAGER.value:
        return FormStatus.MANAGER_APPROVED.value
    if role == Role.GENERAL_MANAGER.value:
        return FormStatus.GM_APPROVED.value
    if role in _FINAL_APPROVERS:
        return FormStatus.APPROVED.value
    raise AuthorizationError("Your role cannot approve requests")


class ApprovalService:
    """Use case: approver queues and approve/reject decisions.

    The stored ``status`` is the routing field approver queues query on;
    it is written together with the flow in one update so both agree.
    Displayed outcomes always come from the flow (see ``status.resolve``).
    """

    def __init__(self, forms: FormRepository):
        self._forms = forms

    def list_queue(self, *, user: User, limit: int = DEFAULT_QUEUE_LIMIT) -> Sequence[Form]:
        role = user.role
        if role == Role.MANAGER.value:
            return self._forms.list_forms(statuses=_MANAGER_ACTIONABLE, dept_id=user.dept or None, limit=limit)
        if role in _ACTIONABLE:
            return self._forms.list_forms(statuses=_ACTIONABLE[role], limit=limit)
        if role == Role.ADMIN.value:
            return self._forms.list_forms(limit=limit)
        return self._forms.list_forms(requester_id=user.uid, limit=limit)

    def list_own(self, *, user: User, limit: int = DEFAULT_QUEUE_LIMIT) -> Sequence[Form]:
        return self._forms.list_forms(requester_id=user.uid, limit=limit)

    def summarize_own(self, *, user: User) -> dict[str, int]:
        counts: dict[str, int] = {}
        for form in self.list_own(user=user):
            value = resolve(form.approval_flow).value
            counts[value] = counts.get(value, 0) + 1
        return counts

    def decide(
        self,
        *,
        user: User,
        form_id: str,
        action: ApprovalAction,
        comment: str = "",
    ) -> Form:
        form = self._forms.get(form_id)
        if not form:
            raise NotFoundError("Request not found")
        if not can_approve(user, form):
            raise AuthorizationError("You are not authorized to approve this request at this time.")

        status = next_status(user.role, action)
        flow = list(effective_flow(form))
        index = current_step_index(flow)
        decided_at = now_local()
        flow[index] = replace(
            flow[index],
            status=StepStatus.REJECTED.value if action == ApprovalAction.REJECT else StepStatus.APPROVED.value,
            approver_id=user.uid,
            approver_name=user.nama or user.email or "Unknown",
            decided_at=decided_at,
            comment=(comment or "").strip() or None,
        )

        ok = self._forms.update_approval(
            form_id=form.form_id,
            status=status,
            approval_flow=flow,
            updated_at=decided_at,
        )
        if not ok:
            raise ValidationError("Failed to update the approval")

        logger.info("Form %s %s by %s (%s) -> %s", form.form_id, action.value, user.uid, user.role, status)
        return replace(form, status=status, approval_flow=tuple(flow), updated_at=decided_at)
