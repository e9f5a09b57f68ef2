from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

from ..common.validators import require_email
from ..core.constants import BROADCAST_SETTINGS_KEY, MAX_BROADCAST_EMAILS
from ..core.exceptions import ValidationError
from .model import BroadcastSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[,;\s]+")


def _clean(values: Iterable[Any] | str | None, label: str) -> list[str]:
    if isinstance(values, str):
        values = _SEPARATORS.split(values)
    out: list[str] = []
    for v in values or []:
        v = str(v or "").strip()
        if not v:
            continue
        out.append(require_email(v, label))
    if len(out) > MAX_BROADCAST_EMAILS:
        raise ValidationError(f"{label}: at most {MAX_BROADCAST_EMAILS} addresses are allowed")
    return out


class BroadcastSettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def load(self) -> BroadcastSettings:
        return BroadcastSettings.from_dict(self._settings.get(BROADCAST_SETTINGS_KEY))

    def save(self, data: Mapping[str, Any]) -> BroadcastSettings:
        """Merge the given lists into the stored settings.

        Blank entries are dropped; keys missing from ``data`` keep their
        stored value.
        """

        current = self.load().as_dict()
        for key, label in (("hrd", "HRD"), ("finance", "Finance"), ("general_manager", "General Manager")):
            if key in data:
                current[key] = _clean(data.get(key) or [], label)

        if "managers" in data:
            given = data.get("managers") or {}
            if not isinstance(given, Mapping):
                raise ValidationError("Managers: expected a mapping of department id to addresses")
            managers = dict(current["managers"])
            for dept_id, emails in given.items():
                managers[str(dept_id)] = _clean(emails or [], f"Managers ({dept_id})")
            current["managers"] = managers

        self._settings.put(BROADCAST_SETTINGS_KEY, current)
        logger.info("Broadcast e-mail settings saved")
        return BroadcastSettings.from_dict(current)
