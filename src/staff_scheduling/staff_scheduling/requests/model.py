from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar, Optional, Union

from ..common.datetime_utils import iter_dates
from ..conflicts.detector import NO_CONFLICTS, ConflictReport
from ..core.enums import EntrySource, PTAvailabilityStatus, RequestKind, RequestStatus, TimeOffType
from ..staff_calendar.interval import TimeInterval, normalize, whole_day


@dataclass(frozen=True)
class StatusChange:
    """One audit row of a request's status history."""

    from_status: str
    to_status: str
    changed_by: int
    changed_at: datetime
    reason: Optional[str] = None


@dataclass(frozen=True)
class PTSlot:
    interval: TimeInterval
    max_capacity: int = 1

    @classmethod
    def from_times(cls, day: date, start: str, end: str, max_capacity: int = 1) -> "PTSlot":
        return cls(interval=normalize(day, start, end), max_capacity=int(max_capacity))


@dataclass(frozen=True)
class TimeOffRequest:
    request_id: Optional[int]
    staff_id: int
    branch_id: int
    time_off_type: TimeOffType
    start_date: date
    end_date: date
    reason: str
    created_at: datetime
    status: RequestStatus = RequestStatus.PENDING
    conflict_report: ConflictReport = NO_CONFLICTS
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_note: Optional[str] = None
    history: tuple[StatusChange, ...] = ()

    kind: ClassVar[RequestKind] = RequestKind.TIME_OFF
    entry_source: ClassVar[EntrySource] = EntrySource.TIME_OFF
    # Time off only competes with assigned work shifts.
    blocking_sources: ClassVar[tuple[EntrySource, ...]] = (EntrySource.WORK_SHIFT,)

    @property
    def candidate_intervals(self) -> tuple[TimeInterval, ...]:
        return tuple(whole_day(d) for d in iter_dates(self.start_date, self.end_date))

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def approved_by(self) -> Optional[int]:
        return self.decided_by if self.status == RequestStatus.APPROVED else None

    @property
    def rejection_reason(self) -> Optional[str]:
        return self.decision_note if self.status == RequestStatus.REJECTED else None


@dataclass(frozen=True)
class PTAvailabilityRequest:
    request_id: Optional[int]
    staff_id: int
    branch_id: int
    slots: tuple[PTSlot, ...]
    created_at: datetime
    service_contract_ids: tuple[int, ...] = ()
    notes: Optional[str] = None
    status: PTAvailabilityStatus = PTAvailabilityStatus.PENDING_APPROVAL
    conflict_report: ConflictReport = NO_CONFLICTS
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_note: Optional[str] = None
    history: tuple[StatusChange, ...] = ()

    kind: ClassVar[RequestKind] = RequestKind.PT_AVAILABILITY
    entry_source: ClassVar[EntrySource] = EntrySource.PT_SLOT
    blocking_sources: ClassVar[tuple[EntrySource, ...]] = tuple(EntrySource)

    @property
    def candidate_intervals(self) -> tuple[TimeInterval, ...]:
        return tuple(s.interval for s in self.slots)

    @property
    def start_date(self) -> date:
        return min(s.interval.day for s in self.slots)

    @property
    def end_date(self) -> date:
        return max(s.interval.day for s in self.slots)

    @property
    def approved_by(self) -> Optional[int]:
        return self.decided_by if self.status == PTAvailabilityStatus.APPROVED else None

    @property
    def approval_notes(self) -> Optional[str]:
        return self.decision_note if self.status == PTAvailabilityStatus.APPROVED else None

    @property
    def rejection_reason(self) -> Optional[str]:
        return self.decision_note if self.status == PTAvailabilityStatus.REJECTED else None


ScheduleRequest = Union[TimeOffRequest, PTAvailabilityRequest]


@dataclass(frozen=True)
class RequestStats:
    total: int
    pending: int
    approved: int
    rejected: int
    cancelled: int
    by_time_off_type: dict[str, int]
    by_month: dict[str, int]


@dataclass(frozen=True)
class RequestCount:
    """One group of a stored-request count (status, time-off type, creation month)."""

    status: str
    time_off_type: Optional[str]
    year: int
    month: int
    count: int
