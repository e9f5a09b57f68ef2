from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization and approval routing."""

    ADMIN = "admin"
    HRD = "hrd"
    FINANCE = "finance"
    MANAGER = "manager"
    GENERAL_MANAGER = "general_manager"
    STAFF = "staff"


class StepStatus(str, Enum):
    """Status of a single approval step."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FormStatus(str, Enum):
    """Routing status stored on a form."""

    DRAFT = "draft"
    PENDING = "pending"
    IN_REVIEW = "in_review"
    MANAGER_APPROVED = "manager_approved"
    GM_APPROVED = "gm_approved"
    HRD_APPROVED = "hrd_approved"
    APPROVED = "approved"
    FULLY_APPROVED = "fully_approved"
    REJECTED = "rejected"


class FormType(str, Enum):
    LEAVE = "leave"
    SICK_LEAVE = "sick_leave"
    MISSED_PUNCH = "missedpunch"
    PERMISSION_TO_LEAVE = "permission-to-leave"
    PURCHASE = "purchase"
    OVERTIME = "overtime"


class StatusColor(str, Enum):
    SUCCESS = "success"
    DANGER = "danger"
    WARNING = "warning"
    NEUTRAL = "neutral"


class Capability(str, Enum):
    """Explicit user capabilities (replaces free-text role/jabatan checks)."""

    MANAGE_DEPARTMENT = "manage_department"


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
