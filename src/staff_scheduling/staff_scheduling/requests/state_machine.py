"""Request lifecycle.

PENDING (or PENDING_APPROVAL) -> APPROVED | REJECTED | CANCELLED. All three
targets are terminal and nothing re-enters the pending state.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..conflicts.detector import ConflictReport
from ..core.enums import Decision, PTAvailabilityStatus, RequestStatus
from ..core.exceptions import InvalidTransitionError
from .model import ScheduleRequest, StatusChange

PENDING_STATUSES = frozenset({RequestStatus.PENDING.value, PTAvailabilityStatus.PENDING_APPROVAL.value})

_TARGET_STATUS = {
    Decision.APPROVE: "APPROVED",
    Decision.REJECT: "REJECTED",
    Decision.CANCEL: "CANCELLED",
}


def is_pending(request: ScheduleRequest) -> bool:
    return request.status.value in PENDING_STATUSES


def ensure_pending(request: ScheduleRequest, decision: Decision) -> None:
    if not is_pending(request):
        raise InvalidTransitionError(
            f"Cannot {decision.value.lower()} {request.kind.value} request {request.request_id}: "
            f"status is already {request.status.value}"
        )


def transition(
    request: ScheduleRequest,
    decision: Decision,
    *,
    actor_id: int,
    at: datetime,
    note: Optional[str] = None,
    conflict_report: Optional[ConflictReport] = None,
) -> ScheduleRequest:
    """Return a copy of ``request`` moved to the status ``decision`` leads to.

    The input is never modified; a history row is appended to the copy.
    """
    ensure_pending(request, decision)
    new_status = type(request.status)(_TARGET_STATUS[decision])
    change = StatusChange(
        from_status=request.status.value,
        to_status=new_status.value,
        changed_by=int(actor_id),
        changed_at=at,
        reason=note,
    )
    changes = {
        "status": new_status,
        "decided_by": int(actor_id),
        "decided_at": at,
        "decision_note": note,
        "history": request.history + (change,),
    }
    if conflict_report is not None:
        changes["conflict_report"] = conflict_report
    return replace(request, **changes)
