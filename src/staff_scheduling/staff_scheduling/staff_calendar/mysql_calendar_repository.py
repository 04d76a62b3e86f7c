from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..core.enums import EntrySource, EntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause, interval_from_row, interval_params, optional_int
from .model import StaffCalendarEntry
from .repository import CalendarStore


def select_committed(
    cur,
    *,
    staff_id: int,
    start: date,
    end: date,
    sources: Optional[Sequence[EntrySource]] = None,
    for_update: bool = False,
) -> list[StaffCalendarEntry]:
    """Committed entries of one staff member; ``for_update`` locks the scanned range."""
    clauses = ["staff_id=%s", "status=%s", "work_date BETWEEN %s AND %s"]
    params: list[object] = [int(staff_id), EntryStatus.COMMITTED.value, start, end]
    if sources:
        clauses.append(in_clause("source", sources))
        params.extend(s.value for s in sources)

    cur.execute(
        f"""
        SELECT entry_id, staff_id, work_date, start_minute, end_minute, source, source_id, status
        FROM staff_calendar_entries
        WHERE {" AND ".join(clauses)}
        ORDER BY work_date, start_minute
        {"FOR UPDATE" if for_update else ""}
        """,
        tuple(params),
    )
    return [
        StaffCalendarEntry(
            staff_id=int(r["staff_id"]),
            interval=interval_from_row(r),
            source=EntrySource(r["source"]),
            status=EntryStatus(r["status"]),
            source_id=optional_int(r.get("source_id")),
            entry_id=int(r["entry_id"]),
        )
        for r in fetchall(cur)
    ]


def insert_entries(cur, entries: Sequence[StaffCalendarEntry]) -> list[StaffCalendarEntry]:
    out: list[StaffCalendarEntry] = []
    for e in entries:
        cur.execute(
            """
            INSERT INTO staff_calendar_entries(
                staff_id, work_date, start_minute, end_minute, source, source_id, status
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(e.staff_id),
                *interval_params(e.interval),
                e.source.value,
                e.source_id,
                e.status.value,
            ),
        )
        out.append(replace(e, entry_id=int(cur.lastrowid)))
    return out


def delete_entries(cur, *, source: EntrySource, source_id: int) -> int:
    cur.execute(
        "DELETE FROM staff_calendar_entries WHERE source=%s AND source_id=%s",
        (source.value, int(source_id)),
    )
    return int(cur.rowcount or 0)


class MySQLCalendarStore(CalendarStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load_committed_entries(
        self,
        *,
        staff_id: int,
        start: date,
        end: date,
        sources: Optional[Sequence[EntrySource]] = None,
    ) -> Sequence[StaffCalendarEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            return select_committed(cur, staff_id=staff_id, start=start, end=end, sources=sources)

    def persist(self, entries: Sequence[StaffCalendarEntry]) -> Sequence[StaffCalendarEntry]:
        if not entries:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_entries(cur, entries)

    def release(self, *, source: EntrySource, source_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return delete_entries(cur, source=source, source_id=source_id)
