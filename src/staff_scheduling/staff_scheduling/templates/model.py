from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import format_minute_of_day, parse_minute_of_day
from ..core.constants import MINUTES_PER_DAY
from ..core.enums import DayOfWeek
from ..core.exceptions import InvalidRangeError, InvalidTemplateError


@dataclass(frozen=True)
class RecurrenceRule:
    """Days of the week plus a time of day, e.g. Mon/Wed/Fri 06:00-14:00."""

    days_of_week: frozenset[DayOfWeek]
    start_minute: int
    end_minute: int

    def __post_init__(self) -> None:
        if not self.days_of_week:
            raise InvalidTemplateError("Recurrence needs at least one day of the week")
        if not 0 <= self.start_minute < self.end_minute <= MINUTES_PER_DAY:
            raise InvalidRangeError(
                f"Invalid recurrence time {self.start_minute}-{self.end_minute}: need start < end within the day"
            )

    @classmethod
    def from_times(cls, days_of_week: Iterable[DayOfWeek], start: str, end: str) -> "RecurrenceRule":
        return cls(
            days_of_week=frozenset(DayOfWeek(d) for d in days_of_week),
            start_minute=parse_minute_of_day(start),
            end_minute=parse_minute_of_day(end),
        )

    def matches(self, day: date) -> bool:
        return DayOfWeek.from_date(day) in self.days_of_week

    @property
    def start_time(self) -> str:
        return format_minute_of_day(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_minute_of_day(self.end_minute)


@dataclass(frozen=True)
class ShiftTemplate:
    template_id: Optional[int]
    staff_id: int
    branch_id: int
    recurrence: RecurrenceRule
    advance_days: int
    end_date: date
    auto_generate: bool = False
    name: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class TemplateStats:
    total: int
    active: int
    inactive: int
    auto_generate: int
