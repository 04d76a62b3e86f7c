from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import WorkShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, interval_from_row, interval_params, optional_int
from .model import WorkShift
from .repository import ShiftRepository

_COLUMNS = "shift_id, staff_id, branch_id, work_date, start_minute, end_minute, status, template_id, created_at"


def _to_shift(r: dict[str, Any]) -> WorkShift:
    return WorkShift(
        shift_id=int(r["shift_id"]),
        staff_id=int(r["staff_id"]),
        branch_id=int(r["branch_id"]),
        interval=interval_from_row(r),
        status=WorkShiftStatus(r["status"]),
        template_id=optional_int(r.get("template_id")),
        created_at=r.get("created_at"),
    )


def insert_shift(cur, shift: WorkShift) -> int:
    cur.execute(
        """
        INSERT INTO work_shifts(staff_id, branch_id, work_date, start_minute, end_minute, status, template_id, created_at)
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(shift.staff_id),
            int(shift.branch_id),
            *interval_params(shift.interval),
            shift.status.value,
            shift.template_id,
            shift.created_at,
        ),
    )
    return int(cur.lastrowid)


def set_shift_status(cur, *, shift_id: int, status: WorkShiftStatus, expected_status: WorkShiftStatus) -> bool:
    cur.execute(
        "UPDATE work_shifts SET status=%s WHERE shift_id=%s AND status=%s",
        (status.value, int(shift_id), expected_status.value),
    )
    return cur.rowcount == 1


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, shift: WorkShift) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_shift(cur, shift)

    def get_by_id(self, shift_id: int) -> Optional[WorkShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def update_status(self, *, shift_id: int, status: WorkShiftStatus, expected_status: WorkShiftStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return set_shift_status(cur, shift_id=shift_id, status=status, expected_status=expected_status)

    def list_range(
        self,
        *,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
        branch_id: Optional[int] = None,
    ) -> Sequence[WorkShift]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))
        if branch_id is not None:
            clauses.append("branch_id=%s")
            params.append(int(branch_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM work_shifts
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date, start_minute, staff_id
                """,
                tuple(params),
            )
            return [_to_shift(r) for r in fetchall(cur)]
