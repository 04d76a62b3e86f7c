from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from datetime import date
from typing import Callable, Optional, Sequence

from ..approvals import workflow
from ..approvals.policy import ApprovalPolicy
from ..common.datetime_utils import now_local
from ..common.validators import clamp_limit
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import EventType, RequestKind, TimeOffType
from ..core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError
from ..notifications.sink import LoggingNotificationSink, NotificationSink, ScheduleEvent
from ..staff_calendar.repository import CalendarStore
from . import factory
from .model import PTAvailabilityRequest, PTSlot, RequestStats, ScheduleRequest, TimeOffRequest
from .repository import RequestRepository
from .state_machine import PENDING_STATUSES

logger = logging.getLogger(__name__)


class RequestService:
    """Create, cancel and query time-off and PT availability requests.

    Creating a request never writes to the committed calendar.
    """

    def __init__(
        self,
        requests: RequestRepository,
        calendar: CalendarStore,
        *,
        policy: ApprovalPolicy,
        notifier: Optional[NotificationSink] = None,
        clock: Callable = now_local,
    ):
        self._requests = requests
        self._calendar = calendar
        self._policy = policy
        self._notifier = notifier or LoggingNotificationSink()
        self._clock = clock

    def _store_new(self, req: ScheduleRequest, actor_id: Optional[int]) -> ScheduleRequest:
        request_id = self._requests.add(req)
        req = replace(req, request_id=int(request_id))
        logger.info(
            "%s request %s created for staff %s (%d candidate intervals, %d conflicts)",
            req.kind.value,
            req.request_id,
            req.staff_id,
            len(req.candidate_intervals),
            req.conflict_report.count,
        )
        self._publish(EventType.REQUEST_CREATED, req, actor_id)
        if req.conflict_report.has_conflicts:
            logger.warning("%s request %s conflicts with %d committed entries", req.kind.value, req.request_id, req.conflict_report.count)
            self._publish(EventType.CONFLICTS_DETECTED, req, actor_id)
        return req

    def _publish(self, event_type: EventType, req: ScheduleRequest, actor_id: Optional[int], note: Optional[str] = None) -> None:
        self._notifier.publish(
            ScheduleEvent(
                event_type=event_type,
                staff_id=req.staff_id,
                subject=req.kind.value,
                subject_id=req.request_id,
                occurred_at=self._clock(),
                actor_id=actor_id,
                conflict_count=req.conflict_report.count,
                note=note,
            )
        )

    def create_time_off(
        self,
        *,
        staff_id: int,
        branch_id: int,
        time_off_type: TimeOffType,
        start_date: date,
        end_date: date,
        reason: str,
        requested_by: Optional[int] = None,
    ) -> TimeOffRequest:
        committed = self._calendar.load_committed_entries(
            staff_id=int(staff_id),
            start=start_date,
            end=end_date,
            sources=TimeOffRequest.blocking_sources,
        )
        req = factory.new_time_off_request(
            staff_id=staff_id,
            branch_id=branch_id,
            time_off_type=time_off_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            committed_entries=committed,
            created_at=self._clock(),
        )
        return self._store_new(req, requested_by if requested_by is not None else int(staff_id))

    def create_pt_availability(
        self,
        *,
        staff_id: int,
        branch_id: int,
        slots: Sequence[PTSlot],
        service_contract_ids: Sequence[int] = (),
        notes: Optional[str] = None,
        requested_by: Optional[int] = None,
    ) -> PTAvailabilityRequest:
        committed = []
        if slots:
            committed = self._calendar.load_committed_entries(
                staff_id=int(staff_id),
                start=min(s.interval.day for s in slots),
                end=max(s.interval.day for s in slots),
                sources=PTAvailabilityRequest.blocking_sources,
            )
        req = factory.new_pt_availability_request(
            staff_id=staff_id,
            branch_id=branch_id,
            slots=slots,
            committed_entries=committed,
            created_at=self._clock(),
            service_contract_ids=service_contract_ids,
            notes=notes,
        )
        return self._store_new(req, requested_by if requested_by is not None else int(staff_id))

    def cancel(self, *, request_id: int, actor_id: int, reason: Optional[str] = None) -> ScheduleRequest:
        """Cancel a pending request. Allowed for the requester or an approver."""

        req = self.get(request_id=request_id)
        is_requester = int(actor_id) == req.staff_id
        if not is_requester and not self._policy.can_approve(
            approver_id=int(actor_id), staff_id=req.staff_id, branch_id=req.branch_id
        ):
            raise AuthorizationError(f"User {actor_id} may not cancel request {request_id}")

        cancelled = workflow.cancel(req, int(actor_id), at=self._clock(), reason=reason)
        if not self._requests.save_decision(cancelled, expected_status=req.status.value):
            raise InvalidTransitionError(f"Request {request_id} was decided concurrently; cannot cancel")

        logger.info("Request %s cancelled by %s", req.request_id, actor_id)
        self._publish(EventType.REQUEST_CANCELLED, cancelled, int(actor_id), cancelled.decision_note)
        return cancelled

    def get(self, *, request_id: int) -> ScheduleRequest:
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError(f"Request {request_id} does not exist")
        return req

    def list_requests(
        self,
        *,
        staff_id: Optional[int] = None,
        branch_id: Optional[int] = None,
        status: Optional[str] = None,
        kind: Optional[RequestKind] = None,
        time_off_type: Optional[TimeOffType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[ScheduleRequest]:
        """Newest first; a date window keeps requests that overlap it."""
        return self._requests.list_requests(
            staff_id=staff_id,
            branch_id=branch_id,
            statuses=[status] if status else None,
            kind=kind,
            time_off_type=time_off_type,
            start_date=start_date,
            end_date=end_date,
            limit=clamp_limit(limit),
        )

    def list_pending(self, *, branch_id: Optional[int] = None, limit: int = DEFAULT_LIST_LIMIT) -> list[ScheduleRequest]:
        return list(
            self._requests.list_requests(
                branch_id=branch_id,
                statuses=sorted(PENDING_STATUSES),
                limit=clamp_limit(limit),
            )
        )

    def stats(self, *, branch_id: Optional[int] = None, staff_id: Optional[int] = None) -> RequestStats:
        by_status: Counter = Counter()
        by_type: Counter = Counter()
        by_month: Counter = Counter()
        for group in self._requests.count_requests(branch_id=branch_id, staff_id=staff_id):
            by_status["PENDING" if group.status in PENDING_STATUSES else group.status] += group.count
            if group.time_off_type:
                by_type[group.time_off_type] += group.count
            by_month[f"{group.year:04d}-{group.month:02d}"] += group.count
        return RequestStats(
            total=sum(by_status.values()),
            pending=by_status.get("PENDING", 0),
            approved=by_status.get("APPROVED", 0),
            rejected=by_status.get("REJECTED", 0),
            cancelled=by_status.get("CANCELLED", 0),
            by_time_off_type=dict(by_type),
            by_month=dict(sorted(by_month.items())),
        )
