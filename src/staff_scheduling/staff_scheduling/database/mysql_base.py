from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..staff_calendar.interval import TimeInterval
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor) inside one transaction; commit on success."""
    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def in_clause(column: str, values: Sequence[Any]) -> str:
    """``column IN (%s,%s,...)`` placeholder text for ``values``."""
    return f"{column} IN ({','.join(['%s'] * len(values))})"


def optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


# Intervals are stored as (work_date, start_minute, end_minute) in every table.
def interval_params(interval: TimeInterval) -> Tuple[Any, int, int]:
    return interval.day, int(interval.start_minute), int(interval.end_minute)


def interval_from_row(row: Dict[str, Any]) -> TimeInterval:
    return TimeInterval(
        day=row["work_date"],
        start_minute=int(row["start_minute"]),
        end_minute=int(row["end_minute"]),
    )
