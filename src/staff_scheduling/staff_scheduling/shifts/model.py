from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Optional

from ..conflicts.detector import ConflictReport
from ..core.enums import EntrySource, WorkShiftStatus
from ..staff_calendar.interval import TimeInterval


@dataclass(frozen=True)
class WorkShift:
    """Domain entity: a manager-assigned shift.

    Shifts are authoritative and committed on creation; they do not go
    through approval.
    """

    shift_id: Optional[int]
    staff_id: int
    branch_id: int
    interval: TimeInterval
    status: WorkShiftStatus = WorkShiftStatus.SCHEDULED
    template_id: Optional[int] = None
    created_at: Optional[datetime] = None

    entry_source: ClassVar[EntrySource] = EntrySource.WORK_SHIFT

    @property
    def candidate_intervals(self) -> tuple[TimeInterval, ...]:
        return (self.interval,)


@dataclass(frozen=True)
class ShiftAssignment:
    """Result of proposing a shift: the shift if it was committed, and the report."""

    interval: TimeInterval
    conflict_report: ConflictReport
    shift: Optional[WorkShift] = None

    @property
    def committed(self) -> bool:
        return self.shift is not None
