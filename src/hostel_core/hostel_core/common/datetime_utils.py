from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional, Union

import pytz


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def get_timezone(name_or_tz: Union[str, tzinfo, None]) -> tzinfo:
    if name_or_tz is None:
        return pytz.utc
    if isinstance(name_or_tz, str):
        return pytz.timezone(name_or_tz)
    return name_or_tz


def now_local(tz: Union[str, tzinfo, None] = None) -> datetime:
    """Current time in the given zone (aware).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(pytz.utc).astimezone(get_timezone(tz))


def localize(value: datetime, tz: Union[str, tzinfo, None]) -> datetime:
    """Return ``value`` expressed in ``tz``; naive values are taken as already local."""
    zone = get_timezone(tz)
    if value.tzinfo is None:
        if hasattr(zone, "localize"):
            return zone.localize(value)
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def to_iso(value: datetime, tz: Union[str, tzinfo, None] = None) -> str:
    """Serialize as a UTC ISO-8601 string so stored timestamps sort lexicographically."""
    if value.tzinfo is None:
        value = localize(value, tz)
    return value.astimezone(pytz.utc).isoformat()


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed
