"""Time parsing and formatting helpers shared by window extraction and reporting."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

UTC = timezone.utc

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_HHMM_12H_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*(AM|PM)$", re.IGNORECASE)


def as_instant(value: datetime) -> datetime:
    """Anchor naive datetimes to the host's local zone."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def looks_like_iso(value: Any) -> bool:
    """Cheap ISO-instant heuristic: a string containing 'T' or ending in 'Z'."""
    if not isinstance(value, str):
        return False
    return "T" in value or value.endswith("Z")


def _parse_iso_string(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        d = date.fromisoformat(text)
    except ValueError:
        return None
    return datetime(d.year, d.month, d.day)


def _from_timestamp_dict(value: dict[str, Any]) -> datetime | None:
    seconds = value.get("seconds", value.get("_seconds"))
    if seconds is None:
        return None
    nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
    try:
        return datetime.fromtimestamp(float(seconds), tz=UTC) + timedelta(microseconds=int(nanos) // 1000)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def to_datetime(value: Any) -> datetime | None:
    """Resolve a stored date/time value without anchoring it to a zone.

    Accepts datetimes, dates (midnight), ISO-8601 strings and serialized
    document-store timestamps. Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return _parse_iso_string(value)
    if isinstance(value, dict):
        return _from_timestamp_dict(value)
    return None


def parse_instant(value: Any) -> datetime | None:
    """Parse a stored value into an aware instant, or None."""
    dt = to_datetime(value)
    if dt is None:
        return None
    try:
        return as_instant(dt)
    except (ValueError, OverflowError, OSError):
        return None


def _is_named_zone(tz: Any) -> bool:
    return isinstance(tz, ZoneInfo) and tz.key not in ("UTC", "Etc/UTC")


def to_reference(value: Any) -> datetime | None:
    """Resolve a value whose calendar date (and weekday) is what matters.

    Naive values and aware values in a named IANA zone are kept as they
    are. Stored instants (UTC or fixed-offset ISO strings, document-store
    timestamps, UTC datetimes) are converted to naive host-local wall time,
    so "midnight local on June 1" stays June 1 after a round trip through UTC.
    """
    dt = to_datetime(value)
    if dt is None or dt.tzinfo is None or _is_named_zone(dt.tzinfo):
        return dt
    try:
        return dt.astimezone().replace(tzinfo=None)
    except (ValueError, OverflowError, OSError):
        return None


def parse_time_of_day(reference: Any, time_str: Any) -> datetime | None:
    """Combine an "HH:MM" or "H:MM AM/PM" string with the calendar date of ``reference``.

    Seconds and microseconds are zeroed. A reference in a named zone keeps
    that zone; anything else is read as host local time (see to_reference).
    Returns None for unrecognized strings or an unparsable reference.
    """
    if not time_str or not isinstance(time_str, str):
        return None
    ref = to_reference(reference)
    if ref is None:
        return None

    text = time_str.strip()
    match = _HHMM_RE.match(text)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
    else:
        match = _HHMM_12H_RE.match(text)
        if not match:
            return None
        hours = int(match.group(1))
        minutes = int(match.group(2))
        is_pm = match.group(3).upper() == "PM"
        if is_pm and hours != 12:
            hours += 12
        if not is_pm and hours == 12:
            hours = 0

    try:
        combined = ref.replace(hour=hours, minute=minutes, second=0, microsecond=0)
        return as_instant(combined)
    except (ValueError, OverflowError, OSError):
        return None


def at_local_time(reference: Any, hour: int, minute: int) -> datetime | None:
    """Instant at hour:minute on the calendar date of ``reference``."""
    ref = to_reference(reference)
    if ref is None:
        return None
    try:
        return as_instant(ref.replace(hour=hour, minute=minute, second=0, microsecond=0))
    except (ValueError, OverflowError, OSError):
        return None


def add_minutes(start: datetime | None, minutes: float) -> datetime | None:
    if start is None:
        return None
    try:
        return start + timedelta(minutes=minutes)
    except OverflowError:
        return None


def resolve_zone(name: str | None) -> ZoneInfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using host local time", name)
        return None


def format_time(instant: datetime | None, tz_name: str | None = None) -> str:
    """Format an instant as "h:MM AM/PM" in ``tz_name`` (host local time if omitted)."""
    if instant is None:
        return ""
    zone = resolve_zone(tz_name)
    local = as_instant(instant).astimezone(zone) if zone else as_instant(instant).astimezone()
    return local.strftime("%I:%M %p").lstrip("0")


def format_time_range(start: datetime | None, end: datetime | None, tz_name: str | None = None) -> str:
    if start is None or end is None:
        return "Unknown time"
    return f"{format_time(start, tz_name)} - {format_time(end, tz_name)}"
