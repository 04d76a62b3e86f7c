from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestKind, TimeOffType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .codec import request_from_row, request_to_row
from .model import RequestCount, ScheduleRequest
from .repository import RequestRepository

_COLUMNS = """
    request_id, kind, staff_id, branch_id, status, payload, conflict_report, history,
    created_at, decided_by, decided_at, decision_note
"""


def update_decision(cur, request: ScheduleRequest, *, expected_status: str) -> bool:
    """Conditional status update; the first writer to leave ``expected_status`` wins."""
    row = request_to_row(request)
    cur.execute(
        """
        UPDATE schedule_requests
        SET status=%s, conflict_report=%s, history=%s,
            decided_by=%s, decided_at=%s, decision_note=%s
        WHERE request_id=%s AND status=%s
        """,
        (
            row["status"],
            row["conflict_report"],
            row["history"],
            row["decided_by"],
            row["decided_at"],
            row["decision_note"],
            int(request.request_id),
            expected_status,
        ),
    )
    return cur.rowcount == 1


def _owner_clauses(staff_id: Optional[int], branch_id: Optional[int]) -> tuple[list[str], list[object]]:
    clauses = ["1=1"]
    params: list[object] = []
    if staff_id is not None:
        clauses.append("staff_id=%s")
        params.append(int(staff_id))
    if branch_id is not None:
        clauses.append("branch_id=%s")
        params.append(int(branch_id))
    return clauses, params


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, request: ScheduleRequest) -> int:
        row = request_to_row(request)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_requests(
                    kind, staff_id, branch_id, status, time_off_type, start_date, end_date,
                    payload, conflict_report, history, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    row["kind"],
                    row["staff_id"],
                    row["branch_id"],
                    row["status"],
                    row["time_off_type"],
                    row["start_date"],
                    row["end_date"],
                    row["payload"],
                    row["conflict_report"],
                    row["history"],
                    row["created_at"],
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, request_id: int) -> Optional[ScheduleRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedule_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return request_from_row(r) if r else None

    def save_decision(self, request: ScheduleRequest, *, expected_status: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return update_decision(cur, request, expected_status=expected_status)

    def list_requests(
        self,
        *,
        staff_id: Optional[int] = None,
        branch_id: Optional[int] = None,
        statuses: Optional[Sequence[str]] = None,
        kind: Optional[RequestKind] = None,
        time_off_type: Optional[TimeOffType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[ScheduleRequest]:
        clauses, params = _owner_clauses(staff_id, branch_id)
        if statuses:
            clauses.append(in_clause("status", statuses))
            params.extend(statuses)
        if kind is not None:
            clauses.append("kind=%s")
            params.append(kind.value)
        if time_off_type is not None:
            clauses.append("time_off_type=%s")
            params.append(time_off_type.value)
        if start_date is not None:
            clauses.append("end_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("start_date<=%s")
            params.append(end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedule_requests
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [request_from_row(r) for r in fetchall(cur)]

    def count_requests(
        self,
        *,
        staff_id: Optional[int] = None,
        branch_id: Optional[int] = None,
    ) -> Sequence[RequestCount]:
        clauses, params = _owner_clauses(staff_id, branch_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT status, time_off_type, YEAR(created_at) AS y, MONTH(created_at) AS m, COUNT(*) AS n
                FROM schedule_requests
                WHERE {" AND ".join(clauses)}
                GROUP BY status, time_off_type, YEAR(created_at), MONTH(created_at)
                """,
                tuple(params),
            )
            return [
                RequestCount(
                    status=str(r["status"]),
                    time_off_type=r.get("time_off_type"),
                    year=int(r["y"]),
                    month=int(r["m"]),
                    count=int(r["n"]),
                )
                for r in fetchall(cur)
            ]
