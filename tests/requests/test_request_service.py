from __future__ import annotations

from datetime import date, datetime

import pytest

from src.staff_scheduling.staff_scheduling.core.enums import (
    EventType,
    PTAvailabilityStatus,
    RequestKind,
    RequestStatus,
    TimeOffType,
)
from src.staff_scheduling.staff_scheduling.core.exceptions import (
    AuthorizationError,
    InvalidRangeError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.staff_scheduling.staff_scheduling.requests.model import PTSlot

MANAGER = 1
STAFF = 7
OTHER_STAFF = 8
BRANCH = 3


def time_off(request_service, **overrides):
    data = dict(
        staff_id=STAFF,
        branch_id=BRANCH,
        time_off_type=TimeOffType.VACATION,
        start_date=date(2024, 6, 10),
        end_date=date(2024, 6, 12),
        reason="Family trip",
    )
    data.update(overrides)
    return request_service.create_time_off(**data)


def test_time_off_without_shifts_has_empty_report(request_service, calendar, sink):
    req = time_off(request_service)
    assert req.request_id == 1
    assert req.status == RequestStatus.PENDING
    assert not req.conflict_report.has_conflicts
    assert calendar.entries == []
    assert sink.types() == [EventType.REQUEST_CREATED]


def test_time_off_reports_work_shifts_in_range(request_service, shift_service, calendar, sink):
    shift_service.assign(staff_id=STAFF, branch_id=BRANCH, work_date=date(2024, 6, 11), start_time="09:00", end_time="17:00")
    shift_service.assign(staff_id=STAFF, branch_id=BRANCH, work_date=date(2024, 6, 14), start_time="09:00", end_time="17:00")
    before = list(calendar.entries)

    req = time_off(request_service)

    assert req.conflict_report.count == 1
    assert req.conflict_report.conflicts[0].conflicting_entry.interval.day == date(2024, 6, 11)
    assert calendar.entries == before
    assert EventType.CONFLICTS_DETECTED in sink.types()


def test_time_off_validation(request_service):
    with pytest.raises(ValidationError):
        time_off(request_service, start_date=date(2024, 6, 12), end_date=date(2024, 6, 10))
    with pytest.raises(ValidationError):
        time_off(request_service, reason="   ")


def test_pt_request_reports_each_conflicting_slot(request_service, shift_service):
    shift_service.assign(staff_id=STAFF, branch_id=BRANCH, work_date=date(2024, 6, 3), start_time="09:00", end_time="17:00")

    req = request_service.create_pt_availability(
        staff_id=STAFF,
        branch_id=BRANCH,
        slots=[
            PTSlot.from_times(date(2024, 6, 4), "10:00", "11:00", 3),
            PTSlot.from_times(date(2024, 6, 3), "16:00", "18:00", 1),
        ],
        service_contract_ids=[55, 56],
        notes="  evening slots ",
    )

    assert req.status == PTAvailabilityStatus.PENDING_APPROVAL
    assert req.conflict_report.has_conflicts
    assert req.conflict_report.count == 1
    # slots are kept in chronological order, so the conflicting one is first
    assert req.conflict_report.conflicting_indexes() == {0}
    assert req.service_contract_ids == (55, 56)
    assert req.notes == "evening slots"


def test_pt_request_validation(request_service):
    with pytest.raises(ValidationError):
        request_service.create_pt_availability(staff_id=STAFF, branch_id=BRANCH, slots=[])
    with pytest.raises(ValidationError):
        request_service.create_pt_availability(
            staff_id=STAFF,
            branch_id=BRANCH,
            slots=[PTSlot.from_times(date(2024, 6, 3), "10:00", "11:00", 0)],
        )
    with pytest.raises(ValidationError):
        request_service.create_pt_availability(
            staff_id=STAFF,
            branch_id=BRANCH,
            slots=[
                PTSlot.from_times(date(2024, 6, 3), "10:00", "12:00"),
                PTSlot.from_times(date(2024, 6, 3), "11:00", "13:00"),
            ],
        )
    with pytest.raises(InvalidRangeError):
        PTSlot.from_times(date(2024, 6, 3), "12:00", "11:00")


def test_requester_can_cancel_pending_request(request_service, calendar, sink):
    req = time_off(request_service)
    cancelled = request_service.cancel(request_id=req.request_id, actor_id=STAFF, reason="Plans changed")
    assert cancelled.status == RequestStatus.CANCELLED
    assert cancelled.history[-1].reason == "Plans changed"
    assert request_service.get(request_id=req.request_id).status == RequestStatus.CANCELLED
    assert calendar.entries == []
    assert sink.types()[-1] == EventType.REQUEST_CANCELLED


def test_manager_can_cancel_but_other_staff_cannot(request_service):
    req = time_off(request_service)
    with pytest.raises(AuthorizationError):
        request_service.cancel(request_id=req.request_id, actor_id=OTHER_STAFF)
    assert request_service.cancel(request_id=req.request_id, actor_id=MANAGER).status == RequestStatus.CANCELLED


def test_cancel_after_decision_fails(request_service, approval_service):
    req = time_off(request_service)
    approval_service.approve(request_id=req.request_id, approver_id=MANAGER)
    with pytest.raises(InvalidTransitionError):
        request_service.cancel(request_id=req.request_id, actor_id=STAFF)


def test_unknown_request(request_service):
    with pytest.raises(NotFoundError):
        request_service.get(request_id=404)


def test_listing_and_stats(request_service, approval_service, clock):
    first = time_off(request_service, time_off_type=TimeOffType.SICK_LEAVE)
    clock.now = datetime(2024, 7, 2, 9, 0)
    second = time_off(request_service, start_date=date(2024, 7, 10), end_date=date(2024, 7, 10))
    request_service.create_pt_availability(
        staff_id=OTHER_STAFF,
        branch_id=BRANCH,
        slots=[PTSlot.from_times(date(2024, 7, 3), "06:00", "08:00")],
    )
    approval_service.reject(request_id=first.request_id, approver_id=MANAGER, reason="Need cover")

    mine = request_service.list_requests(staff_id=STAFF)
    assert [r.request_id for r in mine] == [second.request_id, first.request_id]
    assert [r.request_id for r in request_service.list_requests(kind=RequestKind.PT_AVAILABILITY)] == [3]
    assert {r.request_id for r in request_service.list_pending(branch_id=BRANCH)} == {2, 3}

    stats = request_service.stats(branch_id=BRANCH)
    assert stats.total == 3
    assert stats.pending == 2
    assert stats.rejected == 1
    assert stats.approved == 0
    assert stats.by_time_off_type == {"SICK_LEAVE": 1, "VACATION": 1}
    assert stats.by_month == {"2024-06": 1, "2024-07": 2}


def test_stats_count_every_stored_request(request_service, requests_repo):
    for i in range(1005):
        request_service.create_pt_availability(
            staff_id=STAFF,
            branch_id=BRANCH,
            slots=[PTSlot.from_times(date(2024, 6, 3 + i % 20), "06:00", "07:00")],
        )

    stats = request_service.stats(branch_id=BRANCH)

    assert stats.total == 1005
    assert stats.pending == 1005
    assert stats.by_month == {"2024-06": 1005}
    assert len(request_service.list_requests(branch_id=BRANCH, limit=5000)) == 1000


def test_list_filters_by_time_off_type_and_dates(request_service):
    vacation = time_off(request_service)
    sick = time_off(
        request_service,
        time_off_type=TimeOffType.SICK_LEAVE,
        start_date=date(2024, 6, 20),
        end_date=date(2024, 6, 21),
    )
    pt = request_service.create_pt_availability(
        staff_id=STAFF,
        branch_id=BRANCH,
        slots=[PTSlot.from_times(date(2024, 6, 11), "06:00", "07:00")],
    )

    by_type = request_service.list_requests(time_off_type=TimeOffType.SICK_LEAVE)
    assert [r.request_id for r in by_type] == [sick.request_id]

    window = request_service.list_requests(start_date=date(2024, 6, 12), end_date=date(2024, 6, 19))
    assert [r.request_id for r in window] == [vacation.request_id]

    touching = request_service.list_requests(start_date=date(2024, 6, 11), end_date=date(2024, 6, 11))
    assert {r.request_id for r in touching} == {vacation.request_id, pt.request_id}

    later = request_service.list_requests(start_date=date(2024, 6, 21))
    assert [r.request_id for r in later] == [sick.request_id]
