from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from ..core.enums import Capability


def parse_capabilities(values: Optional[Iterable[Any]]) -> Optional[frozenset[Capability]]:
    """None means "never backfilled"; unknown values are ignored."""
    if values is None:
        return None
    out = set()
    for v in values:
        try:
            out.add(Capability(str(v)))
        except ValueError:
            continue
    return frozenset(out)


@dataclass(frozen=True)
class User:
    """Portal user.

    ``role`` and ``jabatan`` (job title) are free text as entered by admins.
    ``capabilities`` is the explicit replacement for reading meaning out of
    them; None marks a record that has not been backfilled yet.
    """

    uid: str
    nama: str
    role: str = ""
    nik: str = ""
    email: str = ""
    jabatan: str = ""
    dept: str = ""
    capabilities: Optional[frozenset[Capability]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            uid=str(data.get("uid") or data.get("id") or ""),
            nama=str(data.get("nama") or ""),
            role=str(data.get("role") or ""),
            nik=str(data.get("nik") or ""),
            email=str(data.get("email") or ""),
            jabatan=str(data.get("jabatan") or ""),
            dept=str(data.get("dept") or ""),
            capabilities=parse_capabilities(data.get("capabilities")),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "nik": self.nik,
            "nama": self.nama,
            "email": self.email,
            "role": self.role,
            "jabatan": self.jabatan,
            "dept": self.dept,
            "capabilities": sorted(c.value for c in self.capabilities) if self.capabilities is not None else None,
        }
