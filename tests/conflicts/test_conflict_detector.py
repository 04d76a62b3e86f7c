from __future__ import annotations

from datetime import date

from src.staff_scheduling.staff_scheduling.conflicts.detector import ConflictReport, find_conflicts
from src.staff_scheduling.staff_scheduling.core.enums import EntrySource, EntryStatus
from src.staff_scheduling.staff_scheduling.staff_calendar.interval import normalize, whole_day
from src.staff_scheduling.staff_scheduling.staff_calendar.model import StaffCalendarEntry

STAFF = 7
DAY = date(2024, 6, 3)


def entry(start, end, *, staff_id=STAFF, day=DAY, source=EntrySource.WORK_SHIFT, status=EntryStatus.COMMITTED, entry_id=None):
    return StaffCalendarEntry(
        staff_id=staff_id,
        interval=normalize(day, start, end),
        source=source,
        status=status,
        source_id=entry_id,
        entry_id=entry_id,
    )


def test_no_entries_means_no_conflicts():
    report = find_conflicts(STAFF, [normalize(DAY, "09:00", "10:00")], [])
    assert report == ConflictReport()
    assert not report.has_conflicts
    assert report.count == 0


def test_touching_boundary_is_not_a_conflict():
    report = find_conflicts(STAFF, [normalize(DAY, "17:00", "18:00")], [entry("09:00", "17:00")])
    assert not report.has_conflicts


def test_all_overlapping_entries_are_reported():
    committed = [
        entry("08:00", "10:00", entry_id=1),
        entry("12:00", "13:00", entry_id=2),
        entry("09:30", "11:00", entry_id=3),
    ]
    report = find_conflicts(STAFF, [normalize(DAY, "09:00", "12:30")], committed)
    assert report.count == 3
    assert [e.entry_id for e in report.for_candidate(0)] == [1, 2, 3]


def test_each_candidate_is_checked_independently():
    committed = [entry("09:00", "17:00", entry_id=1)]
    candidates = [
        normalize(DAY, "07:00", "08:00"),
        normalize(DAY, "16:00", "18:00"),
        normalize(date(2024, 6, 4), "10:00", "11:00"),
    ]
    report = find_conflicts(STAFF, candidates, committed)
    assert report.count == 1
    assert report.conflicting_indexes() == {1}


def test_other_staff_and_tentative_entries_are_ignored():
    committed = [
        entry("09:00", "17:00", staff_id=99),
        entry("09:00", "17:00", status=EntryStatus.TENTATIVE),
    ]
    report = find_conflicts(STAFF, [normalize(DAY, "10:00", "11:00")], committed)
    assert not report.has_conflicts


def test_time_off_blocks_the_whole_day():
    off = StaffCalendarEntry(staff_id=STAFF, interval=whole_day(date(2024, 6, 11)), source=EntrySource.TIME_OFF)
    report = find_conflicts(STAFF, [normalize(date(2024, 6, 11), "09:00", "17:00")], [off])
    assert report.has_conflicts
    assert report.conflicts[0].conflicting_entry.source == EntrySource.TIME_OFF


def test_report_dict_form_keeps_conflicting_entries():
    report = find_conflicts(STAFF, [normalize(DAY, "16:00", "18:00")], [entry("09:00", "17:00", entry_id=5)])
    data = report.to_dict()
    assert data["has_conflicts"] is True
    assert data["count"] == 1
    assert data["conflicts"][0]["entry_id"] == 5
    assert data["conflicts"][0]["start_minute"] == 540
    assert ConflictReport.from_dict(data) == report
