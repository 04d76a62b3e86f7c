from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import DayOfWeek
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import RecurrenceRule, ShiftTemplate, TemplateStats
from .repository import TemplateRepository

_COLUMNS = """
    template_id, staff_id, branch_id, name, days_of_week, start_minute, end_minute,
    advance_days, end_date, auto_generate, is_active
"""


def _to_template(r: dict[str, Any]) -> ShiftTemplate:
    days = [d for d in (r["days_of_week"] or "").split(",") if d]
    return ShiftTemplate(
        template_id=int(r["template_id"]),
        staff_id=int(r["staff_id"]),
        branch_id=int(r["branch_id"]),
        recurrence=RecurrenceRule(
            days_of_week=frozenset(DayOfWeek(d) for d in days),
            start_minute=int(r["start_minute"]),
            end_minute=int(r["end_minute"]),
        ),
        advance_days=int(r["advance_days"]),
        end_date=r["end_date"],
        auto_generate=bool(r["auto_generate"]),
        name=r.get("name"),
        is_active=bool(r["is_active"]),
    )


class MySQLTemplateRepository(TemplateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, template: ShiftTemplate) -> int:
        days = ",".join(d.value for d in sorted(template.recurrence.days_of_week, key=lambda d: d.weekday))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_templates(
                    staff_id, branch_id, name, days_of_week, start_minute, end_minute,
                    advance_days, end_date, auto_generate, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(template.staff_id),
                    int(template.branch_id),
                    template.name,
                    days,
                    int(template.recurrence.start_minute),
                    int(template.recurrence.end_minute),
                    int(template.advance_days),
                    template.end_date,
                    1 if template.auto_generate else 0,
                    1 if template.is_active else 0,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, template_id: int) -> Optional[ShiftTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shift_templates WHERE template_id=%s", (int(template_id),))
            r = fetchone(cur)
            return _to_template(r) if r else None

    def list_auto_generate(self) -> Sequence[ShiftTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_templates
                WHERE auto_generate=1 AND is_active=1
                ORDER BY template_id
                """
            )
            return [_to_template(r) for r in fetchall(cur)]

    def set_flags(
        self,
        *,
        template_id: int,
        is_active: Optional[bool] = None,
        auto_generate: Optional[bool] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        if is_active is not None:
            sets.append("is_active=%s")
            params.append(1 if is_active else 0)
        if auto_generate is not None:
            sets.append("auto_generate=%s")
            params.append(1 if auto_generate else 0)

        with db_cursor(self._conn_factory) as (_, cur):
            if not sets:
                cur.execute("SELECT template_id FROM shift_templates WHERE template_id=%s", (int(template_id),))
                return fetchone(cur) is not None
            cur.execute(
                f"UPDATE shift_templates SET {', '.join(sets)} WHERE template_id=%s",
                tuple(params + [int(template_id)]),
            )
            # rowcount is 0 when the values did not change, so check existence too
            if cur.rowcount == 1:
                return True
            cur.execute("SELECT template_id FROM shift_templates WHERE template_id=%s", (int(template_id),))
            return fetchone(cur) is not None

    def list_templates(
        self,
        *,
        branch_id: Optional[int] = None,
        staff_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[ShiftTemplate]:
        clauses = ["1=1"]
        params: list[object] = []
        if branch_id is not None:
            clauses.append("branch_id=%s")
            params.append(int(branch_id))
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(1 if is_active else 0)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_templates
                WHERE {" AND ".join(clauses)}
                ORDER BY template_id
                """,
                tuple(params),
            )
            return [_to_template(r) for r in fetchall(cur)]

    def count_templates(self, *, branch_id: Optional[int] = None) -> TemplateStats:
        where, params = ("WHERE branch_id=%s", (int(branch_id),)) if branch_id is not None else ("", ())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(is_active), 0) AS active,
                       COALESCE(SUM(auto_generate), 0) AS auto_generate
                FROM shift_templates
                {where}
                """,
                params,
            )
            r = fetchone(cur) or {"total": 0, "active": 0, "auto_generate": 0}
            total, active = int(r["total"]), int(r["active"])
            return TemplateStats(
                total=total,
                active=active,
                inactive=total - active,
                auto_generate=int(r["auto_generate"]),
            )
