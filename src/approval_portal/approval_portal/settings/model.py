from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _emails(values: Any) -> list[str]:
    if not values:
        return []
    return [str(v) for v in values if v is not None]


@dataclass(frozen=True)
class BroadcastSettings:
    """Mailing lists used by the fully-approved broadcast."""

    hrd: list[str] = field(default_factory=list)
    finance: list[str] = field(default_factory=list)
    general_manager: list[str] = field(default_factory=list)
    managers: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "BroadcastSettings":
        data = data or {}
        managers = data.get("managers") or {}
        return cls(
            hrd=_emails(data.get("hrd")),
            finance=_emails(data.get("finance")),
            general_manager=_emails(data.get("general_manager")),
            managers={str(k): _emails(v) for k, v in dict(managers).items()},
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "hrd": list(self.hrd),
            "finance": list(self.finance),
            "general_manager": list(self.general_manager),
            "managers": {k: list(v) for k, v in self.managers.items()},
        }
