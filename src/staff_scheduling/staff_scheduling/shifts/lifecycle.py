from __future__ import annotations

from dataclasses import replace

from ..core.enums import WorkShiftStatus
from ..core.exceptions import InvalidTransitionError
from .model import WorkShift

ALLOWED_TRANSITIONS: dict[WorkShiftStatus, frozenset[WorkShiftStatus]] = {
    WorkShiftStatus.SCHEDULED: frozenset({WorkShiftStatus.IN_PROGRESS, WorkShiftStatus.CANCELLED}),
    WorkShiftStatus.IN_PROGRESS: frozenset({WorkShiftStatus.COMPLETED, WorkShiftStatus.CANCELLED}),
    WorkShiftStatus.COMPLETED: frozenset(),
    WorkShiftStatus.CANCELLED: frozenset(),
}


def move_shift(shift: WorkShift, target: WorkShiftStatus) -> WorkShift:
    if target not in ALLOWED_TRANSITIONS[shift.status]:
        raise InvalidTransitionError(
            f"Shift {shift.shift_id} cannot move from {shift.status.value} to {target.value}"
        )
    return replace(shift, status=target)
