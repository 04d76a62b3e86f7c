"""Conflict detection between candidate intervals and a committed calendar.

Conflicts are a normal result, not an error: the caller decides whether a
non-empty report blocks the action or is only surfaced as a warning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from ..common.datetime_utils import parse_iso_date
from ..core.enums import EntrySource, EntryStatus
from ..staff_calendar.interval import TimeInterval, overlaps
from ..staff_calendar.model import StaffCalendarEntry


@dataclass(frozen=True)
class Conflict:
    candidate_index: int
    conflicting_entry: StaffCalendarEntry


@dataclass(frozen=True)
class ConflictReport:
    conflicts: tuple[Conflict, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def count(self) -> int:
        return len(self.conflicts)

    def for_candidate(self, index: int) -> list[StaffCalendarEntry]:
        return [c.conflicting_entry for c in self.conflicts if c.candidate_index == index]

    def conflicting_indexes(self) -> set[int]:
        return {c.candidate_index for c in self.conflicts}

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_conflicts": self.has_conflicts,
            "count": self.count,
            "conflicts": [
                {
                    "candidate_index": c.candidate_index,
                    "entry_id": c.conflicting_entry.entry_id,
                    "staff_id": c.conflicting_entry.staff_id,
                    "source": c.conflicting_entry.source.value,
                    "source_id": c.conflicting_entry.source_id,
                    "status": c.conflicting_entry.status.value,
                    "date": c.conflicting_entry.interval.day.isoformat(),
                    "start_minute": c.conflicting_entry.interval.start_minute,
                    "end_minute": c.conflicting_entry.interval.end_minute,
                }
                for c in self.conflicts
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConflictReport":
        conflicts = []
        for item in data.get("conflicts") or []:
            entry = StaffCalendarEntry(
                staff_id=int(item["staff_id"]),
                interval=TimeInterval(
                    day=parse_iso_date(item["date"]),
                    start_minute=int(item["start_minute"]),
                    end_minute=int(item["end_minute"]),
                ),
                source=EntrySource(item["source"]),
                status=EntryStatus(item.get("status", EntryStatus.COMMITTED.value)),
                source_id=item.get("source_id"),
                entry_id=item.get("entry_id"),
            )
            conflicts.append(Conflict(candidate_index=int(item["candidate_index"]), conflicting_entry=entry))
        return cls(conflicts=tuple(conflicts))


NO_CONFLICTS = ConflictReport()


def find_conflicts(
    staff_id: int,
    candidates: Sequence[TimeInterval],
    committed_entries: Iterable[StaffCalendarEntry],
) -> ConflictReport:
    """Report every committed entry of ``staff_id`` overlapping each candidate.

    Entries of other staff members and non-committed entries are ignored, so
    callers may pass an unfiltered, unordered list. All overlapping entries of
    a candidate are reported, in input order.
    """
    blocking = [e for e in committed_entries if e.staff_id == staff_id and e.is_committed]
    conflicts: list[Conflict] = []
    for index, candidate in enumerate(candidates):
        for entry in blocking:
            if entry.interval.day == candidate.day and overlaps(candidate, entry.interval):
                conflicts.append(Conflict(candidate_index=index, conflicting_entry=entry))
    return ConflictReport(conflicts=tuple(conflicts))
