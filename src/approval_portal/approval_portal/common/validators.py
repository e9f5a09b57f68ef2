from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_email(value: str, field_name: str) -> str:
    v = require_non_empty(value, field_name)
    if not _EMAIL_RE.match(v):
        raise ValidationError(f"{field_name} is not a valid e-mail address: {v}")
    return v
