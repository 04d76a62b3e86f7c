"""Transactions around writes to the committed calendar.

Every change that adds or removes committed entries also changes a request
or a shift row. Both sides go through one ``CalendarTransaction`` so they
commit together or not at all.
"""

from __future__ import annotations

from datetime import date
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import EntrySource, WorkShiftStatus
from ..requests.model import ScheduleRequest
from ..shifts.model import WorkShift
from .model import StaffCalendarEntry


class CalendarTransaction(Protocol):
    def load_committed_entries(
        self,
        *,
        staff_id: int,
        start: date,
        end: date,
        sources: Optional[Sequence[EntrySource]] = None,
    ) -> Sequence[StaffCalendarEntry]:
        """Read committed entries and hold them until the transaction ends.

        Nothing else can add or remove entries in the range meanwhile.
        """

        raise NotImplementedError

    def persist(self, entries: Sequence[StaffCalendarEntry]) -> Sequence[StaffCalendarEntry]:
        raise NotImplementedError

    def release(self, *, source: EntrySource, source_id: int) -> int:
        raise NotImplementedError

    def save_decision(self, request: ScheduleRequest, *, expected_status: str) -> bool:
        raise NotImplementedError

    def add_shift(self, shift: WorkShift) -> int:
        raise NotImplementedError

    def update_shift_status(self, *, shift_id: int, status: WorkShiftStatus, expected_status: WorkShiftStatus) -> bool:
        raise NotImplementedError


class UnitOfWork(Protocol):
    def transaction(self) -> ContextManager[CalendarTransaction]:
        """Commit on normal exit, roll everything back if the block raises."""

        raise NotImplementedError
