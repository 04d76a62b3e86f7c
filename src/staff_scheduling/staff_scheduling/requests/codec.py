"""Row mapping for the ``schedule_requests`` table.

Common columns are stored as-is, with the covered date range and time-off
type copied out for filtering. Variant fields, the conflict report and the
status history are JSON text columns.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from ..common.datetime_utils import parse_iso_date
from ..conflicts.detector import ConflictReport
from ..core.enums import PTAvailabilityStatus, RequestKind, RequestStatus, TimeOffType
from ..staff_calendar.interval import TimeInterval
from .model import PTAvailabilityRequest, PTSlot, ScheduleRequest, StatusChange, TimeOffRequest

_DT_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _payload(request: ScheduleRequest) -> dict[str, Any]:
    if isinstance(request, TimeOffRequest):
        return {
            "type": request.time_off_type.value,
            "start_date": request.start_date.isoformat(),
            "end_date": request.end_date.isoformat(),
            "reason": request.reason,
        }
    return {
        "slots": [
            {
                "date": s.interval.day.isoformat(),
                "start_minute": s.interval.start_minute,
                "end_minute": s.interval.end_minute,
                "max_capacity": s.max_capacity,
            }
            for s in request.slots
        ],
        "service_contract_ids": list(request.service_contract_ids),
        "notes": request.notes,
    }


def _history_to_json(history: tuple[StatusChange, ...]) -> str:
    return json.dumps(
        [
            {
                "from_status": h.from_status,
                "to_status": h.to_status,
                "changed_by": h.changed_by,
                "changed_at": h.changed_at.strftime(_DT_FORMAT),
                "reason": h.reason,
            }
            for h in history
        ]
    )


def _history_from_json(raw: Any) -> tuple[StatusChange, ...]:
    items = json.loads(raw) if raw else []
    return tuple(
        StatusChange(
            from_status=h["from_status"],
            to_status=h["to_status"],
            changed_by=int(h["changed_by"]),
            changed_at=datetime.strptime(h["changed_at"], _DT_FORMAT),
            reason=h.get("reason"),
        )
        for h in items
    )


def request_to_row(request: ScheduleRequest) -> dict[str, Any]:
    return {
        "request_id": request.request_id,
        "kind": request.kind.value,
        "staff_id": int(request.staff_id),
        "branch_id": int(request.branch_id),
        "status": request.status.value,
        "payload": json.dumps(_payload(request)),
        "conflict_report": json.dumps(request.conflict_report.to_dict()),
        "history": _history_to_json(request.history),
        "time_off_type": request.time_off_type.value if isinstance(request, TimeOffRequest) else None,
        "start_date": request.start_date,
        "end_date": request.end_date,
        "created_at": request.created_at,
        "decided_by": request.decided_by,
        "decided_at": request.decided_at,
        "decision_note": request.decision_note,
    }


def request_from_row(row: dict[str, Any]) -> ScheduleRequest:
    kind = RequestKind(row["kind"])
    payload = json.loads(row["payload"]) if row.get("payload") else {}
    report = ConflictReport.from_dict(json.loads(row["conflict_report"])) if row.get("conflict_report") else ConflictReport()
    common = {
        "request_id": int(row["request_id"]) if row.get("request_id") is not None else None,
        "staff_id": int(row["staff_id"]),
        "branch_id": int(row["branch_id"]),
        "created_at": row["created_at"],
        "conflict_report": report,
        "decided_by": int(row["decided_by"]) if row.get("decided_by") is not None else None,
        "decided_at": row.get("decided_at"),
        "decision_note": row.get("decision_note"),
        "history": _history_from_json(row.get("history")),
    }

    if kind == RequestKind.TIME_OFF:
        return TimeOffRequest(
            time_off_type=TimeOffType(payload["type"]),
            start_date=parse_iso_date(payload["start_date"]),
            end_date=parse_iso_date(payload["end_date"]),
            reason=payload["reason"],
            status=RequestStatus(row["status"]),
            **common,
        )

    slots = tuple(
        PTSlot(
            interval=TimeInterval(
                day=parse_iso_date(s["date"]),
                start_minute=int(s["start_minute"]),
                end_minute=int(s["end_minute"]),
            ),
            max_capacity=int(s.get("max_capacity", 1)),
        )
        for s in payload.get("slots") or []
    )
    return PTAvailabilityRequest(
        slots=slots,
        service_contract_ids=tuple(int(c) for c in payload.get("service_contract_ids") or []),
        notes=payload.get("notes"),
        status=PTAvailabilityStatus(row["status"]),
        **common,
    )
