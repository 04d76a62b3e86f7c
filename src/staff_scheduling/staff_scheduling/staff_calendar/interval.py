"""Half-open time intervals on a single calendar date.

A ``TimeInterval`` covers ``[start_minute, end_minute)`` minutes of ``day``.
Two intervals touching at a boundary (10:00-11:00 and 11:00-12:00) do not
overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..common.datetime_utils import format_minute_of_day, parse_minute_of_day
from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import InvalidRangeError


@dataclass(frozen=True, order=True)
class TimeInterval:
    day: date
    start_minute: int
    end_minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.start_minute < self.end_minute <= MINUTES_PER_DAY:
            raise InvalidRangeError(
                f"Invalid interval {self.start_minute}-{self.end_minute} on {self.day.isoformat()}: "
                f"need 0 <= start < end <= {MINUTES_PER_DAY}"
            )

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def start_time(self) -> str:
        return format_minute_of_day(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_minute_of_day(self.end_minute)

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self, other)

    def __str__(self) -> str:
        return f"{self.day.isoformat()} {self.start_time}-{self.end_time}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.day == b.day and a.start_minute < b.end_minute and b.start_minute < a.end_minute


def normalize(day: date, start: str, end: str) -> TimeInterval:
    """Build an interval from ``HH:MM`` strings.

    Raises InvalidRangeError when a time is outside 00:00-24:00 or end <= start.
    Nothing is clamped.
    """
    start_minute = parse_minute_of_day(start)
    end_minute = parse_minute_of_day(end)
    if end_minute <= start_minute:
        raise InvalidRangeError(f"End time {end} must be after start time {start}")
    return TimeInterval(day=day, start_minute=start_minute, end_minute=end_minute)


def whole_day(day: date) -> TimeInterval:
    return TimeInterval(day=day, start_minute=0, end_minute=MINUTES_PER_DAY)
