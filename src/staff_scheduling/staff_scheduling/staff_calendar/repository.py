from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import EntrySource
from .model import StaffCalendarEntry


class CalendarStore(Protocol):
    def load_committed_entries(
        self,
        *,
        staff_id: int,
        start: date,
        end: date,
        sources: Optional[Sequence[EntrySource]] = None,
    ) -> Sequence[StaffCalendarEntry]:
        """Committed entries of one staff member with dates in [start, end]."""

        raise NotImplementedError

    def persist(self, entries: Sequence[StaffCalendarEntry]) -> Sequence[StaffCalendarEntry]:
        """Store new entries; returns them with entry_id filled in."""

        raise NotImplementedError

    def release(self, *, source: EntrySource, source_id: int) -> int:
        """Remove the committed entries produced by one shift/request.

        Returns the number of entries removed.
        """

        raise NotImplementedError
