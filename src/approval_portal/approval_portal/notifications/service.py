from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..approvals.model import ApprovalStep
from ..common.datetime_utils import format_datetime
from ..core.constants import DEFAULT_APP_NAME
from ..core.enums import FormStatus, Role, StepStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..forms.model import Form
from ..forms.repository import FormRepository
from ..settings.service import BroadcastSettingsService
from ..users.repository import UserRepository
from .mailer import Mailer

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

_BROADCAST_STATUSES = (FormStatus.APPROVED.value, FormStatus.FULLY_APPROVED.value)

_ROLE_LABELS = {
    Role.MANAGER.value: "Manager",
    Role.GENERAL_MANAGER.value: "General Manager",
    Role.HRD.value: "HRD",
    Role.FINANCE.value: "Finance",
}


def unique_recipients(emails: Iterable[Optional[str]]) -> list[str]:
    """Drop blanks and repeats, keeping first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for email in emails:
        email = (email or "").strip()
        if not email or email in seen:
            continue
        seen.add(email)
        out.append(email)
    return out


def _first_step(flow: Iterable[ApprovalStep], role: str) -> Optional[ApprovalStep]:
    return next((s for s in flow if s.role == role), None)


class NotificationService:
    """Approval-request and fully-approved broadcast e-mails for one form."""

    def __init__(
        self,
        *,
        forms: FormRepository,
        users: UserRepository,
        settings: BroadcastSettingsService,
        mailer: Mailer,
        base_url: str = "",
        app_name: str = DEFAULT_APP_NAME,
    ):
        self._forms = forms
        self._users = users
        self._settings = settings
        self._mailer = mailer
        self._base_url = (base_url or "").rstrip("/")
        self._app_name = app_name or DEFAULT_APP_NAME
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
        )

    def send_for_form(self, form_id: Optional[str]) -> str:
        """Send whichever e-mail the form's state calls for.

        Returns the success message. Raises ValidationError (400) or
        NotFoundError (404); anything else comes from the repositories or
        the mailer and is left to the caller.
        """

        form_id = (form_id or "").strip() if isinstance(form_id, str) else form_id
        if not form_id:
            raise ValidationError("Form ID is required.")

        form = self._forms.get(str(form_id))
        if not form:
            raise NotFoundError("Form not found.")

        flow = form.approval_flow
        if flow and flow[0].status == StepStatus.PENDING.value:
            self.send_approval_request(form)
            return "Approval request email sent successfully."
        if form.status in _BROADCAST_STATUSES:
            self.send_broadcast(form)
            return "Broadcast email sent successfully."
        raise ValidationError("No email sent. Form status is not supported.")

    def _render(self, template: str, **context) -> str:
        return self._env.get_template(template).render(app_name=self._app_name, **context)

    def _email_of(self, uid: Optional[str]) -> Optional[str]:
        if not uid:
            return None
        user = self._users.get_by_uid(uid)
        return user.email if user and user.email else None

    def send_approval_request(self, form: Form) -> bool:
        step = next((s for s in form.approval_flow if s.is_pending), None)
        if step is None:
            return False

        approver = self._users.get_by_uid(step.approver_id) if step.approver_id else None
        if not approver or not approver.email:
            logger.error("Approver email not found for UID: %s", step.approver_id)
            return False

        form_type = form.type.upper()
        html = self._render(
            "approval_request.html",
            heading="New Form for Approval",
            form=form,
            form_type=form_type,
            approver_name=approver.nama or "Approver",
            submitted=format_datetime(form.created_dt),
            reason=form.get_field("reason") or form.get_field("alasan") or "N/A",
            form_url=f"{self._base_url}/forms/{form.form_id}",
        )
        self._mailer.send(
            to=approver.email,
            subject=f"[Action Required] New Form for Your Approval: {form_type}",
            html=html,
        )
        logger.info("Approval request for form %s sent to %s", form.form_id, approver.uid)
        return True

    def broadcast_recipients(self, form: Form) -> list[str]:
        settings = self._settings.load()
        manager = _first_step(form.approval_flow, Role.MANAGER.value)
        gm = _first_step(form.approval_flow, Role.GENERAL_MANAGER.value)
        return unique_recipients(
            [
                self._email_of(form.requester_id),
                self._email_of(manager.approver_id if manager else None),
                self._email_of(gm.approver_id if gm else None),
                *settings.hrd,
                *settings.finance,
            ]
        )

    def send_broadcast(self, form: Form) -> int:
        recipients = self.broadcast_recipients(form)
        if not recipients:
            raise NotFoundError("No recipients found to send the email.")

        form_type = form.type.upper()
        steps = [
            {
                "role_label": _ROLE_LABELS.get(s.role, s.role),
                "approver_name": s.approver_name,
                "status": s.status,
                "decided": format_datetime(s.decided_at),
                "comment": s.comment,
            }
            for s in form.approval_flow
        ]
        html = self._render(
            "broadcast.html",
            heading="Form Fully Approved",
            form=form,
            form_type=form_type,
            submitted=format_datetime(form.created_dt),
            steps=steps,
        )
        subject = f"[Form Approval Broadcast] Fully Approved Form: {form_type}"
        for email in recipients:
            self._mailer.send(to=email, subject=subject, html=html)
        logger.info("Broadcast for form %s sent to %d recipient(s)", form.form_id, len(recipients))
        return len(recipients)
