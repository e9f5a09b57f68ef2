from __future__ import annotations

from typing import Any, Optional, Protocol


class SettingsRepository(Protocol):
    """Key/value store for portal-wide settings documents."""

    def get(self, key: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def put(self, key: str, value: dict[str, Any]) -> None:
        raise NotImplementedError
