from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional, Sequence

from ..core.enums import EntrySource, WorkShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from ..requests.model import ScheduleRequest
from ..requests.mysql_request_repository import update_decision
from ..shifts.model import WorkShift
from ..shifts.mysql_shift_repository import insert_shift, set_shift_status
from .model import StaffCalendarEntry
from .mysql_calendar_repository import delete_entries, insert_entries, select_committed
from .unit_of_work import CalendarTransaction, UnitOfWork


class MySQLCalendarTransaction(CalendarTransaction):
    """All calls share one cursor, so one connection and one transaction."""

    def __init__(self, cur):
        self._cur = cur

    def load_committed_entries(
        self,
        *,
        staff_id: int,
        start: date,
        end: date,
        sources: Optional[Sequence[EntrySource]] = None,
    ) -> Sequence[StaffCalendarEntry]:
        # FOR UPDATE takes next-key locks on (staff_id, work_date), which also
        # blocks inserts into the range until commit.
        return select_committed(self._cur, staff_id=staff_id, start=start, end=end, sources=sources, for_update=True)

    def persist(self, entries: Sequence[StaffCalendarEntry]) -> Sequence[StaffCalendarEntry]:
        return insert_entries(self._cur, entries)

    def release(self, *, source: EntrySource, source_id: int) -> int:
        return delete_entries(self._cur, source=source, source_id=source_id)

    def save_decision(self, request: ScheduleRequest, *, expected_status: str) -> bool:
        return update_decision(self._cur, request, expected_status=expected_status)

    def add_shift(self, shift: WorkShift) -> int:
        return insert_shift(self._cur, shift)

    def update_shift_status(self, *, shift_id: int, status: WorkShiftStatus, expected_status: WorkShiftStatus) -> bool:
        return set_shift_status(self._cur, shift_id=shift_id, status=status, expected_status=expected_status)


class MySQLUnitOfWork(UnitOfWork):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[MySQLCalendarTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield MySQLCalendarTransaction(cur)
