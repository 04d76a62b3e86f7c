"""Approval workflow over calendar snapshots.

The caller loads the committed entries, passes them in, and persists what
comes back. Approval re-runs the conflict check but is never blocked by it:
a request with conflicts can still be approved, and the fresh report is
returned so the override is visible.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..conflicts.detector import ConflictReport, find_conflicts
from ..core.enums import Decision, EntryStatus
from ..core.exceptions import StaleConflictCheckError
from ..requests.model import ScheduleRequest
from ..requests.state_machine import ensure_pending, transition
from ..staff_calendar.model import StaffCalendarEntry, calendar_snapshot_token


@dataclass(frozen=True)
class ApprovalOutcome:
    request: ScheduleRequest
    committed_entries: tuple[StaffCalendarEntry, ...]

    @property
    def conflict_report(self) -> ConflictReport:
        return self.request.conflict_report

    @property
    def is_override(self) -> bool:
        """True when the request was approved despite conflicts."""
        return self.conflict_report.has_conflicts


def recheck_conflicts(request: ScheduleRequest, committed_entries: Iterable[StaffCalendarEntry]) -> ConflictReport:
    blocking = [e for e in committed_entries if e.source in request.blocking_sources]
    return find_conflicts(request.staff_id, request.candidate_intervals, blocking)


def approve(
    request: ScheduleRequest,
    approver_id: int,
    committed_entries: Sequence[StaffCalendarEntry],
    *,
    at: datetime,
    notes: Optional[str] = None,
) -> ApprovalOutcome:
    ensure_pending(request, Decision.APPROVE)
    report = recheck_conflicts(request, committed_entries)
    approved = transition(
        request,
        Decision.APPROVE,
        actor_id=approver_id,
        at=at,
        note=optional_text(notes),
        conflict_report=report,
    )
    entries = tuple(
        StaffCalendarEntry(
            staff_id=approved.staff_id,
            interval=interval,
            source=approved.entry_source,
            status=EntryStatus.COMMITTED,
            source_id=approved.request_id,
        )
        for interval in approved.candidate_intervals
    )
    return ApprovalOutcome(request=approved, committed_entries=entries)


def reject(request: ScheduleRequest, approver_id: int, reason: str, *, at: datetime) -> ScheduleRequest:
    ensure_pending(request, Decision.REJECT)
    return transition(
        request,
        Decision.REJECT,
        actor_id=approver_id,
        at=at,
        note=require_non_empty(reason, "Rejection reason"),
    )


def cancel(request: ScheduleRequest, actor_id: int, *, at: datetime, reason: Optional[str] = None) -> ScheduleRequest:
    return transition(request, Decision.CANCEL, actor_id=actor_id, at=at, note=optional_text(reason))


def ensure_snapshot_current(
    checked: Iterable[StaffCalendarEntry],
    current: Iterable[StaffCalendarEntry],
) -> None:
    """Raise StaleConflictCheckError if the committed set moved under a check."""
    if calendar_snapshot_token(checked) != calendar_snapshot_token(current):
        raise StaleConflictCheckError(
            "Committed calendar changed after the conflict check; re-check and decide again"
        )
