"""Expansion of shift templates into dated candidate intervals.

``expand`` is a pure function of (template, today): the same inputs always
give the same intervals. It commits nothing and does not know about
existing shifts; skipping dates that are already covered is done by the
caller through the conflict detector.
"""

from __future__ import annotations

from datetime import date, timedelta

from ..common.datetime_utils import iter_dates
from ..core.exceptions import InvalidTemplateError
from ..staff_calendar.interval import TimeInterval
from .model import ShiftTemplate


def horizon(template: ShiftTemplate, today: date) -> date:
    """Last date (inclusive) the template generates for when run on ``today``."""
    if template.advance_days <= 0:
        raise InvalidTemplateError(f"advance_days must be positive, got {template.advance_days}")
    if template.end_date < today:
        raise InvalidTemplateError(
            f"Template ended on {template.end_date.isoformat()}, before {today.isoformat()}"
        )
    return min(today + timedelta(days=template.advance_days), template.end_date)


def expand(template: ShiftTemplate, today: date) -> list[TimeInterval]:
    rule = template.recurrence
    return [
        TimeInterval(day=day, start_minute=rule.start_minute, end_minute=rule.end_minute)
        for day in iter_dates(today, horizon(template, today))
        if rule.matches(day)
    ]
