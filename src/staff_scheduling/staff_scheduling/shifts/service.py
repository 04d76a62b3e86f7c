from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id
from ..conflicts.detector import find_conflicts
from ..core.enums import EntrySource, EntryStatus, EventType, WorkShiftStatus
from ..core.exceptions import InvalidTransitionError, NotFoundError
from ..notifications.sink import LoggingNotificationSink, NotificationSink, ScheduleEvent
from ..staff_calendar.interval import TimeInterval, normalize
from ..staff_calendar.model import StaffCalendarEntry
from ..staff_calendar.unit_of_work import UnitOfWork
from .lifecycle import move_shift
from .model import ShiftAssignment, WorkShift
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


class ShiftService:
    """Manager-assigned shifts.

    A shift row and its committed calendar entry are always written or
    removed in the same transaction.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        *,
        uow: UnitOfWork,
        notifier: Optional[NotificationSink] = None,
        clock: Callable = now_local,
        block_conflicts: bool = True,
    ):
        self._shifts = shifts
        self._uow = uow
        self._notifier = notifier or LoggingNotificationSink()
        self._clock = clock
        self._block_conflicts = block_conflicts

    def assign(
        self,
        *,
        staff_id: int,
        branch_id: int,
        work_date: date,
        start_time: str,
        end_time: str,
        template_id: Optional[int] = None,
        allow_conflicts: Optional[bool] = None,
    ) -> ShiftAssignment:
        interval = normalize(work_date, start_time, end_time)
        return self.propose(
            staff_id=staff_id,
            branch_id=branch_id,
            interval=interval,
            template_id=template_id,
            allow_conflicts=allow_conflicts,
        )

    def propose(
        self,
        *,
        staff_id: int,
        branch_id: int,
        interval: TimeInterval,
        template_id: Optional[int] = None,
        allow_conflicts: Optional[bool] = None,
    ) -> ShiftAssignment:
        """Commit a shift unless it conflicts and overriding is not allowed.

        ``allow_conflicts=None`` falls back to the service-wide setting.
        """
        staff_id = require_positive_id(staff_id, "Staff")
        branch_id = require_positive_id(branch_id, "Branch")
        if allow_conflicts is None:
            allow_conflicts = not self._block_conflicts

        with self._uow.transaction() as tx:
            committed = tx.load_committed_entries(staff_id=staff_id, start=interval.day, end=interval.day)
            report = find_conflicts(staff_id, [interval], committed)
            if report.has_conflicts and not allow_conflicts:
                logger.warning("Shift %s for staff %s not assigned: %d conflict(s)", interval, staff_id, report.count)
                return ShiftAssignment(interval=interval, conflict_report=report)

            shift = WorkShift(
                shift_id=None,
                staff_id=staff_id,
                branch_id=branch_id,
                interval=interval,
                template_id=template_id,
                created_at=self._clock(),
            )
            shift = replace(shift, shift_id=int(tx.add_shift(shift)))
            tx.persist(
                [
                    StaffCalendarEntry(
                        staff_id=staff_id,
                        interval=interval,
                        source=EntrySource.WORK_SHIFT,
                        status=EntryStatus.COMMITTED,
                        source_id=shift.shift_id,
                    )
                ]
            )

        if report.has_conflicts:
            logger.warning("Shift %s assigned to staff %s over %d conflict(s)", shift.shift_id, staff_id, report.count)
        logger.info("Shift %s assigned to staff %s on %s", shift.shift_id, staff_id, interval)
        self._publish(EventType.SHIFT_ASSIGNED, shift, conflict_count=report.count)
        return ShiftAssignment(interval=interval, conflict_report=report, shift=shift)

    def _get(self, shift_id: int) -> WorkShift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError(f"Shift {shift_id} does not exist")
        return shift

    def _move(self, shift_id: int, target: WorkShiftStatus) -> WorkShift:
        shift = self._get(shift_id)
        moved = move_shift(shift, target)
        if not self._shifts.update_status(shift_id=int(shift_id), status=target, expected_status=shift.status):
            raise InvalidTransitionError(f"Shift {shift_id} changed concurrently; cannot move to {target.value}")
        logger.info("Shift %s %s -> %s", shift_id, shift.status.value, target.value)
        return moved

    def start(self, *, shift_id: int) -> WorkShift:
        return self._move(shift_id, WorkShiftStatus.IN_PROGRESS)

    def complete(self, *, shift_id: int) -> WorkShift:
        return self._move(shift_id, WorkShiftStatus.COMPLETED)

    def cancel(self, *, shift_id: int, actor_id: Optional[int] = None) -> WorkShift:
        """Cancel a shift and free its slot on the staff calendar."""

        shift = self._get(shift_id)
        cancelled = move_shift(shift, WorkShiftStatus.CANCELLED)
        with self._uow.transaction() as tx:
            if not tx.update_shift_status(
                shift_id=int(shift_id), status=WorkShiftStatus.CANCELLED, expected_status=shift.status
            ):
                raise InvalidTransitionError(f"Shift {shift_id} changed concurrently; cannot cancel")
            released = tx.release(source=EntrySource.WORK_SHIFT, source_id=int(shift_id))
        logger.info("Shift %s cancelled, %d calendar entries released", shift_id, released)
        self._publish(EventType.SHIFT_CANCELLED, cancelled, actor_id=actor_id)
        return cancelled

    def list_range(
        self,
        *,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
        branch_id: Optional[int] = None,
    ) -> Sequence[WorkShift]:
        return self._shifts.list_range(start=start, end=end, staff_id=staff_id, branch_id=branch_id)

    def _publish(self, event_type: EventType, shift: WorkShift, *, actor_id: Optional[int] = None, conflict_count: int = 0) -> None:
        self._notifier.publish(
            ScheduleEvent(
                event_type=event_type,
                staff_id=shift.staff_id,
                subject="WORK_SHIFT",
                subject_id=shift.shift_id,
                occurred_at=self._clock(),
                actor_id=actor_id,
                conflict_count=conflict_count,
            )
        )
