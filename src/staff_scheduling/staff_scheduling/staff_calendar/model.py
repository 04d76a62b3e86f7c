from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.enums import EntrySource, EntryStatus
from .interval import TimeInterval


@dataclass(frozen=True)
class StaffCalendarEntry:
    """An interval on a staff member's calendar.

    ``source_id`` points at the shift or request that produced the entry.
    Only COMMITTED entries block new proposals.
    """

    staff_id: int
    interval: TimeInterval
    source: EntrySource
    status: EntryStatus = EntryStatus.COMMITTED
    source_id: Optional[int] = None
    entry_id: Optional[int] = None

    @property
    def is_committed(self) -> bool:
        return self.status == EntryStatus.COMMITTED


def calendar_snapshot_token(entries: Iterable[StaffCalendarEntry]) -> str:
    """Order-independent fingerprint of a set of committed entries.

    Two loads of the same calendar window give the same token only if no
    entry was added, removed or changed in between.
    """
    keys = sorted(
        (
            e.staff_id,
            e.interval.day.isoformat(),
            e.interval.start_minute,
            e.interval.end_minute,
            e.source.value,
            e.status.value,
            -1 if e.source_id is None else e.source_id,
            -1 if e.entry_id is None else e.entry_id,
        )
        for e in entries
    )
    return hashlib.sha1(repr(keys).encode("utf-8")).hexdigest()
