from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.staff_scheduling.staff_scheduling.core.enums import DayOfWeek
from src.staff_scheduling.staff_scheduling.core.exceptions import InvalidRangeError, InvalidTemplateError
from src.staff_scheduling.staff_scheduling.templates.generator import expand, horizon
from src.staff_scheduling.staff_scheduling.templates.model import RecurrenceRule, ShiftTemplate

MONDAY = date(2024, 6, 3)


def template(days=(DayOfWeek.MONDAY,), start="06:00", end="14:00", advance_days=7, end_date=None):
    return ShiftTemplate(
        template_id=1,
        staff_id=7,
        branch_id=3,
        recurrence=RecurrenceRule.from_times(days, start, end),
        advance_days=advance_days,
        end_date=end_date or MONDAY + timedelta(days=60),
    )


def test_monday_window_includes_both_ends():
    t = template(end_date=MONDAY + timedelta(days=7))
    days = [i.day for i in expand(t, MONDAY)]
    assert days == [MONDAY, date(2024, 6, 10)]


def test_window_starting_midweek_has_one_monday():
    days = [i.day for i in expand(template(), date(2024, 6, 4))]
    assert days == [date(2024, 6, 10)]


def test_end_date_clamps_horizon():
    t = template(days=list(DayOfWeek), advance_days=30, end_date=date(2024, 6, 5))
    assert horizon(t, MONDAY) == date(2024, 6, 5)
    assert [i.day for i in expand(t, MONDAY)] == [MONDAY, date(2024, 6, 4), date(2024, 6, 5)]


def test_intervals_carry_the_rule_times():
    intervals = expand(template(days=[DayOfWeek.MONDAY, DayOfWeek.FRIDAY], start="18:30", end="24:00"), MONDAY)
    assert [i.day for i in intervals] == [MONDAY, date(2024, 6, 7), date(2024, 6, 10)]
    assert {(i.start_time, i.end_time) for i in intervals} == {("18:30", "24:00")}


def test_expand_is_repeatable():
    t = template(days=[DayOfWeek.TUESDAY, DayOfWeek.THURSDAY])
    assert expand(t, MONDAY) == expand(t, MONDAY)


def test_end_date_on_today_still_expands():
    assert [i.day for i in expand(template(end_date=MONDAY), MONDAY)] == [MONDAY]


def test_expired_template_fails():
    with pytest.raises(InvalidTemplateError):
        expand(template(end_date=MONDAY - timedelta(days=1)), MONDAY)


@pytest.mark.parametrize("advance_days", [0, -3])
def test_non_positive_advance_fails(advance_days):
    with pytest.raises(InvalidTemplateError):
        expand(template(advance_days=advance_days), MONDAY)


def test_rule_validation():
    with pytest.raises(InvalidTemplateError):
        RecurrenceRule.from_times([], "06:00", "14:00")
    with pytest.raises(InvalidRangeError):
        RecurrenceRule.from_times([DayOfWeek.MONDAY], "14:00", "06:00")
