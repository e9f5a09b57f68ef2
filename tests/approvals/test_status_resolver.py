from __future__ import annotations

import pytest

from src.approval_portal.approval_portal.approvals.model import ApprovalStep
from src.approval_portal.approval_portal.approvals.status import (
    format_status_text,
    resolve,
    resolve_final_status,
    status_color,
)
from src.approval_portal.approval_portal.core.enums import StatusColor


def _flow(*statuses):
    roles = ("manager", "general_manager", "hrd")
    return [ApprovalStep(role=roles[i], status=s) for i, s in enumerate(statuses)]


def test_empty_or_missing_flow_is_pending():
    assert resolve_final_status([]) == "pending"
    assert resolve_final_status(None) == "pending"


def test_last_decision_wins_and_trailing_pending_is_ignored():
    assert resolve_final_status(_flow("approved", "pending", "pending")) == "approved"
    assert resolve_final_status(_flow("approved", "rejected", "pending")) == "rejected"
    assert resolve_final_status(_flow("approved", "approved", "approved")) == "approved"


def test_all_pending_is_pending():
    assert resolve_final_status(_flow("pending", "pending", "pending")) == "pending"


def test_accepts_raw_step_dicts():
    steps = [{"role": "manager", "status": "approved"}, {"role": "general_manager"}]
    assert resolve_final_status(steps) == "approved"


@pytest.mark.parametrize(
    "status,text",
    [("gm_approved", "GM APPROVED"), ("pending", "PENDING"), ("", "")],
)
def test_format_status_text(status, text):
    assert format_status_text(status) == text


def test_status_color():
    assert status_color("approved") == StatusColor.SUCCESS
    assert status_color(" Rejected ") == StatusColor.DANGER
    assert status_color("in_review") == StatusColor.WARNING
    assert status_color("draft") == StatusColor.NEUTRAL


def test_resolve_label():
    label = resolve(_flow("approved", "pending"))
    assert label.as_dict() == {"value": "approved", "text": "APPROVED", "color": "success"}


def test_step_from_dict_accepts_legacy_keys():
    step = ApprovalStep.from_dict(
        {"role": "manager", "status": "approved", "uid": "u9", "approvedByName": "Sari", "comments": "ok"}
    )
    assert step.approver_id == "u9"
    assert step.approver_name == "Sari"
    assert step.comment == "ok"
    assert not step.is_pending
