from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Job roles used by the default approval policy."""

    OWNER = "owner"
    MANAGER = "manager"
    PERSONAL_TRAINER = "personal_trainer"
    STAFF = "staff"


class RequestStatus(str, Enum):
    """Time-off request lifecycle."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class PTAvailabilityStatus(str, Enum):
    """PT availability request lifecycle."""

    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class RequestKind(str, Enum):
    TIME_OFF = "TIME_OFF"
    PT_AVAILABILITY = "PT_AVAILABILITY"


class Decision(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"


class WorkShiftStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TimeOffType(str, Enum):
    VACATION = "VACATION"
    SICK_LEAVE = "SICK_LEAVE"
    PERSONAL_LEAVE = "PERSONAL_LEAVE"
    UNPAID_LEAVE = "UNPAID_LEAVE"
    EMERGENCY = "EMERGENCY"
    OTHER = "OTHER"


class EntrySource(str, Enum):
    """What put an interval on a staff member's calendar."""

    WORK_SHIFT = "WORK_SHIFT"
    TIME_OFF = "TIME_OFF"
    PT_SLOT = "PT_SLOT"


class EntryStatus(str, Enum):
    COMMITTED = "COMMITTED"
    TENTATIVE = "TENTATIVE"


class DayOfWeek(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def weekday(self) -> int:
        """Index matching ``date.weekday()`` (Monday == 0)."""
        return list(DayOfWeek).index(self)

    @classmethod
    def from_date(cls, value) -> "DayOfWeek":
        return list(cls)[value.weekday()]


class EventType(str, Enum):
    REQUEST_CREATED = "REQUEST_CREATED"
    CONFLICTS_DETECTED = "CONFLICTS_DETECTED"
    REQUEST_APPROVED = "REQUEST_APPROVED"
    REQUEST_REJECTED = "REQUEST_REJECTED"
    REQUEST_CANCELLED = "REQUEST_CANCELLED"
    SHIFT_ASSIGNED = "SHIFT_ASSIGNED"
    SHIFT_CANCELLED = "SHIFT_CANCELLED"
