from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import InvalidInput

_HHMM = re.compile(r"^([0-9]{2}):([0-9]{2})$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except (AttributeError, TypeError, ValueError):
        raise InvalidInput(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_hhmm(value: str) -> int:
    """Parse a zero-padded 24-hour ``HH:MM`` string into minutes since midnight."""
    m = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if not m:
        raise InvalidInput(f"Invalid time (HH:MM): {value!r}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidInput(f"Invalid time (HH:MM): {value!r}")
    return hours * 60 + minutes


def parse_optional_hhmm(value: Optional[str]) -> Optional[time]:
    v = (value or "").strip()
    if not v:
        return None
    return minutes_to_time(parse_hhmm(v))


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise InvalidInput(f"Minute of day out of range: {minutes}")
    return time(hour=minutes // 60, minute=minutes % 60)


def parse_override_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant into naive local wall-clock time.

    Aware values are converted to the server's local zone; the rest of the
    system is single-timezone and works on naive datetimes.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        raise InvalidInput(f"Invalid instant: {value!r}", code="INVALID_TIME")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def weekday_index(value: date) -> int:
    """Weekday with 0=Sunday .. 6=Saturday (Python's weekday() starts on Monday)."""
    return (value.weekday() + 1) % 7


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= int(month) <= 12:
        raise InvalidInput(f"Invalid month: {month}")
    last_day = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def now_local() -> datetime:
    """Current local time truncated to the minute.

    Note: Only controllers call this; services and the classifier take "now"
    as a parameter.
    """
    return datetime.now().replace(second=0, microsecond=0)
