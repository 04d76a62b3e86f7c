"""Pure constructors for pending requests.

Each constructor validates its input, runs the conflict detector against the
committed entries it is given and attaches the report as a snapshot. Nothing
here touches the committed calendar.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from itertools import combinations
from typing import Iterable, Optional, Sequence

from ..common.validators import optional_text, require_non_empty, require_positive_id
from ..conflicts.detector import find_conflicts
from ..core.enums import TimeOffType
from ..core.exceptions import ValidationError
from ..staff_calendar.interval import overlaps
from ..staff_calendar.model import StaffCalendarEntry
from .model import PTAvailabilityRequest, PTSlot, TimeOffRequest


def _blocking(entries: Iterable[StaffCalendarEntry], sources) -> list[StaffCalendarEntry]:
    return [e for e in entries if e.source in sources]


def new_time_off_request(
    *,
    staff_id: int,
    branch_id: int,
    time_off_type: TimeOffType,
    start_date: date,
    end_date: date,
    reason: str,
    committed_entries: Iterable[StaffCalendarEntry],
    created_at: datetime,
) -> TimeOffRequest:
    if end_date < start_date:
        raise ValidationError("End date must be on or after start date")

    request = TimeOffRequest(
        request_id=None,
        staff_id=require_positive_id(staff_id, "Staff"),
        branch_id=require_positive_id(branch_id, "Branch"),
        time_off_type=TimeOffType(time_off_type),
        start_date=start_date,
        end_date=end_date,
        reason=require_non_empty(reason, "Reason"),
        created_at=created_at,
    )
    report = find_conflicts(
        request.staff_id,
        request.candidate_intervals,
        _blocking(committed_entries, TimeOffRequest.blocking_sources),
    )
    return replace(request, conflict_report=report)


def new_pt_availability_request(
    *,
    staff_id: int,
    branch_id: int,
    slots: Sequence[PTSlot],
    committed_entries: Iterable[StaffCalendarEntry],
    created_at: datetime,
    service_contract_ids: Sequence[int] = (),
    notes: Optional[str] = None,
) -> PTAvailabilityRequest:
    if not slots:
        raise ValidationError("At least one availability slot is required")
    for slot in slots:
        if int(slot.max_capacity) < 1:
            raise ValidationError(f"Slot {slot.interval} must allow at least one client")
    for a, b in combinations(slots, 2):
        if overlaps(a.interval, b.interval):
            raise ValidationError(f"Slots {a.interval} and {b.interval} overlap")

    request = PTAvailabilityRequest(
        request_id=None,
        staff_id=require_positive_id(staff_id, "Staff"),
        branch_id=require_positive_id(branch_id, "Branch"),
        slots=tuple(sorted(slots, key=lambda s: s.interval)),
        created_at=created_at,
        service_contract_ids=tuple(int(c) for c in service_contract_ids),
        notes=optional_text(notes),
    )
    report = find_conflicts(
        request.staff_id,
        request.candidate_intervals,
        _blocking(committed_entries, PTAvailabilityRequest.blocking_sources),
    )
    return replace(request, conflict_report=report)
