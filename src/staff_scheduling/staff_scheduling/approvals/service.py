from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import Decision, EventType
from ..core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError, StaleConflictCheckError
from ..notifications.sink import LoggingNotificationSink, NotificationSink, ScheduleEvent
from ..requests.model import ScheduleRequest
from ..requests.repository import RequestRepository
from ..requests.state_machine import ensure_pending
from ..staff_calendar.model import StaffCalendarEntry
from ..staff_calendar.repository import CalendarStore
from ..staff_calendar.unit_of_work import UnitOfWork
from . import workflow
from .policy import ApprovalPolicy
from .workflow import ApprovalOutcome

logger = logging.getLogger(__name__)


class ApprovalService:
    """Approve or reject pending requests against the stored calendar.

    The conflict check runs on a plain read. The commit then re-reads the
    same range under lock, and in that one transaction it compares
    snapshots, saves the decision and inserts the entries. A calendar that
    moved since the check surfaces as StaleConflictCheckError and nothing
    is written.
    """

    def __init__(
        self,
        requests: RequestRepository,
        calendar: CalendarStore,
        *,
        uow: UnitOfWork,
        policy: ApprovalPolicy,
        notifier: Optional[NotificationSink] = None,
        clock: Callable = now_local,
    ):
        self._requests = requests
        self._calendar = calendar
        self._uow = uow
        self._policy = policy
        self._notifier = notifier or LoggingNotificationSink()
        self._clock = clock

    def _get(self, request_id: int) -> ScheduleRequest:
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError(f"Request {request_id} does not exist")
        return req

    def _authorize(self, approver_id: int, req: ScheduleRequest) -> None:
        if not self._policy.can_approve(approver_id=int(approver_id), staff_id=req.staff_id, branch_id=req.branch_id):
            raise AuthorizationError(f"User {approver_id} may not decide requests for staff {req.staff_id}")

    def _load_committed(self, req: ScheduleRequest, store=None) -> Sequence[StaffCalendarEntry]:
        return (store or self._calendar).load_committed_entries(
            staff_id=req.staff_id,
            start=req.start_date,
            end=req.end_date,
            sources=req.blocking_sources,
        )

    def _save(self, store, decided: ScheduleRequest, previous: ScheduleRequest, decision: Decision) -> None:
        if not store.save_decision(decided, expected_status=previous.status.value):
            raise InvalidTransitionError(
                f"Request {previous.request_id} was decided concurrently; cannot {decision.value.lower()}"
            )

    def _publish(self, event_type: EventType, req: ScheduleRequest, actor_id: int, note: Optional[str] = None) -> None:
        self._notifier.publish(
            ScheduleEvent(
                event_type=event_type,
                staff_id=req.staff_id,
                subject=req.kind.value,
                subject_id=req.request_id,
                occurred_at=self._clock(),
                actor_id=int(actor_id),
                conflict_count=req.conflict_report.count,
                note=note,
            )
        )

    def approve(self, *, request_id: int, approver_id: int, notes: Optional[str] = None) -> ApprovalOutcome:
        req = self._get(request_id)
        self._authorize(approver_id, req)
        ensure_pending(req, Decision.APPROVE)

        checked = self._load_committed(req)
        outcome = workflow.approve(req, int(approver_id), checked, at=self._clock(), notes=notes)
        try:
            with self._uow.transaction() as tx:
                workflow.ensure_snapshot_current(checked, self._load_committed(req, tx))
                self._save(tx, outcome.request, req, Decision.APPROVE)
                persisted = tx.persist(outcome.committed_entries)
        except StaleConflictCheckError:
            logger.warning("Calendar of staff %s moved during approval of request %s", req.staff_id, req.request_id)
            raise
        outcome = replace(outcome, committed_entries=tuple(persisted))

        if outcome.is_override:
            logger.warning(
                "Request %s approved by %s over %d conflict(s)",
                req.request_id,
                approver_id,
                outcome.conflict_report.count,
            )
            self._publish(EventType.CONFLICTS_DETECTED, outcome.request, approver_id)
        logger.info(
            "Request %s (%s) approved by %s, %d entries committed",
            req.request_id,
            req.kind.value,
            approver_id,
            len(outcome.committed_entries),
        )
        self._publish(EventType.REQUEST_APPROVED, outcome.request, approver_id, outcome.request.decision_note)
        return outcome

    def reject(self, *, request_id: int, approver_id: int, reason: str) -> ScheduleRequest:
        req = self._get(request_id)
        self._authorize(approver_id, req)

        rejected = workflow.reject(req, int(approver_id), reason, at=self._clock())
        self._save(self._requests, rejected, req, Decision.REJECT)

        logger.info("Request %s (%s) rejected by %s", req.request_id, req.kind.value, approver_id)
        self._publish(EventType.REQUEST_REJECTED, rejected, approver_id, rejected.decision_note)
        return rejected
