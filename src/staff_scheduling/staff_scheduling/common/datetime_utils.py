from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Iterator

from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import InvalidRangeError

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_minute_of_day(value: str) -> int:
    """Convert ``HH:MM`` into minutes since midnight.

    ``24:00`` is accepted and maps to the end of the day (1440).
    """
    m = _HHMM.match((value or "").strip())
    if not m:
        raise InvalidRangeError(f"Invalid time {value!r}, expected HH:MM")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if minutes > 59:
        raise InvalidRangeError(f"Invalid time {value!r}, minutes must be 00-59")
    total = hours * 60 + minutes
    if total > MINUTES_PER_DAY:
        raise InvalidRangeError(f"Invalid time {value!r}, must be within 00:00-24:00")
    return total


def format_minute_of_day(minute: int) -> str:
    return f"{minute // 60:02d}:{minute % 60:02d}"


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)
