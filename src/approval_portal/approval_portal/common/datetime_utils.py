from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

END_OF_DAY = time(23, 59, 59, 999000)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    return parse_iso_date(v)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def _naive_local(dt: datetime) -> datetime:
    """Naive local time truncated to milliseconds, the precision timestamps are stored with."""
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def to_local_datetime(value: Any) -> Optional[datetime]:
    """Convert a stored timestamp into a naive local datetime.

    Accepts datetime/date, ISO-8601 strings, epoch seconds and
    ``{"seconds": .., "nanoseconds": ..}`` timestamp mappings.
    Returns None for anything that cannot be interpreted.
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _naive_local(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if isinstance(value, (int, float)):
        try:
            return _naive_local(datetime.fromtimestamp(float(value), tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if seconds is None:
            return None
        nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
        try:
            dt = datetime.fromtimestamp(int(seconds), tz=timezone.utc) + timedelta(microseconds=int(nanos) // 1000)
            return _naive_local(dt)
        except (TypeError, ValueError, OverflowError, OSError):
            return None

    if isinstance(value, str):
        v = value.strip()
        if not v:
            return None
        if v.endswith("Z"):
            v = v[:-1] + "+00:00"
        try:
            return _naive_local(datetime.fromisoformat(v))
        except ValueError:
            return None

    return None


def parse_loose_date(value: Any) -> Optional[date]:
    """Business dates are stored as 'YYYY-MM-DD' strings; tolerate datetimes too."""
    dt = to_local_datetime(value)
    return dt.date() if dt else None


def format_us_date(dt: Optional[datetime]) -> str:
    """M/D/YYYY, the format the recap screens show."""
    if not dt:
        return ""
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_id_date(dt: Optional[datetime]) -> str:
    """D/M/YYYY (Indonesian locale)."""
    if not dt:
        return ""
    return f"{dt.day}/{dt.month}/{dt.year}"


def format_datetime(dt: Optional[datetime]) -> str:
    if not dt:
        return "N/A"
    return dt.strftime("%m/%d/%Y, %I:%M:%S %p")
