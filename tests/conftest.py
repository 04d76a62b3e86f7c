from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.staff_scheduling.staff_scheduling.approvals.policy import RoleApprovalPolicy
from src.staff_scheduling.staff_scheduling.approvals.service import ApprovalService
from src.staff_scheduling.staff_scheduling.core.enums import Role, WorkShiftStatus
from src.staff_scheduling.staff_scheduling.requests.model import RequestCount, TimeOffRequest
from src.staff_scheduling.staff_scheduling.requests.service import RequestService
from src.staff_scheduling.staff_scheduling.shifts.service import ShiftService
from src.staff_scheduling.staff_scheduling.templates.model import TemplateStats
from src.staff_scheduling.staff_scheduling.templates.service import TemplateService

MANAGER_ID = 1
OWNER_ID = 2
STAFF_ID = 7
OTHER_STAFF_ID = 8
BRANCH_ID = 3

ROLES = {
    MANAGER_ID: Role.MANAGER,
    OWNER_ID: Role.OWNER,
    STAFF_ID: Role.PERSONAL_TRAINER,
    OTHER_STAFF_ID: Role.STAFF,
}


class InMemoryCalendarStore:
    """Calendar fake.

    ``failures`` maps a method name to an exception raised on its next call.
    ``after_load`` is called with the load count after each read.
    """

    def __init__(self, entries=()):
        self._next_id = 1
        self.entries = []
        self.load_calls = 0
        self.persist_calls = 0
        self.failures = {}
        self.after_load = None
        if entries:
            self.persist(list(entries))
            self.persist_calls = 0

    def _maybe_fail(self, name):
        if name in self.failures:
            raise self.failures.pop(name)

    def load_committed_entries(self, *, staff_id, start, end, sources=None):
        self.load_calls += 1
        found = [
            e
            for e in self.entries
            if e.staff_id == staff_id
            and e.is_committed
            and start <= e.interval.day <= end
            and (not sources or e.source in sources)
        ]
        if self.after_load:
            self.after_load(self.load_calls)
        return found

    def persist(self, entries):
        self._maybe_fail("persist")
        self.persist_calls += 1
        out = []
        for e in entries:
            stored = replace(e, entry_id=self._next_id)
            self._next_id += 1
            self.entries.append(stored)
            out.append(stored)
        return out

    def release(self, *, source, source_id):
        self._maybe_fail("release")
        before = len(self.entries)
        self.entries = [e for e in self.entries if not (e.source == source and e.source_id == source_id)]
        return before - len(self.entries)


class InMemoryRequestRepository:
    def __init__(self):
        self._next_id = 1
        self.rows = {}

    def add(self, request):
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = replace(request, request_id=rid)
        return rid

    def get(self, *, request_id):
        return self.rows.get(int(request_id))

    def save_decision(self, request, *, expected_status):
        current = self.rows.get(int(request.request_id))
        if not current or current.status.value != expected_status:
            return False
        self.rows[int(request.request_id)] = request
        return True

    def list_requests(
        self,
        *,
        staff_id=None,
        branch_id=None,
        statuses=None,
        kind=None,
        time_off_type=None,
        start_date=None,
        end_date=None,
        limit=200,
    ):
        items = [
            r
            for r in self.rows.values()
            if (staff_id is None or r.staff_id == staff_id)
            and (branch_id is None or r.branch_id == branch_id)
            and (not statuses or r.status.value in statuses)
            and (kind is None or r.kind == kind)
            and (time_off_type is None or getattr(r, "time_off_type", None) == time_off_type)
            and (start_date is None or r.end_date >= start_date)
            and (end_date is None or r.start_date <= end_date)
        ]
        items.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return items[:limit]

    def count_requests(self, *, staff_id=None, branch_id=None):
        groups = Counter(
            (
                r.status.value,
                r.time_off_type.value if isinstance(r, TimeOffRequest) else None,
                r.created_at.year,
                r.created_at.month,
            )
            for r in self.rows.values()
            if (staff_id is None or r.staff_id == staff_id) and (branch_id is None or r.branch_id == branch_id)
        )
        return [
            RequestCount(status=s, time_off_type=t, year=y, month=m, count=n) for (s, t, y, m), n in groups.items()
        ]


class InMemoryShiftRepository:
    def __init__(self):
        self._next_id = 100
        self.shifts = {}

    def add(self, shift):
        sid = self._next_id
        self._next_id += 1
        self.shifts[sid] = replace(shift, shift_id=sid)
        return sid

    def get_by_id(self, shift_id):
        return self.shifts.get(int(shift_id))

    def update_status(self, *, shift_id, status: WorkShiftStatus, expected_status: WorkShiftStatus):
        shift = self.shifts.get(int(shift_id))
        if not shift or shift.status != expected_status:
            return False
        self.shifts[int(shift_id)] = replace(shift, status=status)
        return True

    def list_range(self, *, start, end, staff_id=None, branch_id=None):
        return sorted(
            (
                s
                for s in self.shifts.values()
                if start <= s.interval.day <= end
                and (staff_id is None or s.staff_id == staff_id)
                and (branch_id is None or s.branch_id == branch_id)
            ),
            key=lambda s: s.interval,
        )


class InMemoryTemplateRepository:
    def __init__(self):
        self._next_id = 1
        self.templates = {}

    def add(self, template):
        tid = self._next_id
        self._next_id += 1
        self.templates[tid] = replace(template, template_id=tid)
        return tid

    def get_by_id(self, template_id):
        return self.templates.get(int(template_id))

    def set_flags(self, *, template_id, is_active=None, auto_generate=None):
        template = self.templates.get(int(template_id))
        if not template:
            return False
        if is_active is not None:
            template = replace(template, is_active=is_active)
        if auto_generate is not None:
            template = replace(template, auto_generate=auto_generate)
        self.templates[int(template_id)] = template
        return True

    def list_templates(self, *, branch_id=None, staff_id=None, is_active=None):
        return [
            t
            for t in sorted(self.templates.values(), key=lambda t: t.template_id)
            if (branch_id is None or t.branch_id == branch_id)
            and (staff_id is None or t.staff_id == staff_id)
            and (is_active is None or t.is_active == is_active)
        ]

    def list_auto_generate(self):
        return [t for t in self.templates.values() if t.auto_generate and t.is_active]

    def count_templates(self, *, branch_id=None):
        items = self.list_templates(branch_id=branch_id)
        active = sum(1 for t in items if t.is_active)
        return TemplateStats(
            total=len(items),
            active=active,
            inactive=len(items) - active,
            auto_generate=sum(1 for t in items if t.auto_generate),
        )


class InMemoryTransaction:
    def __init__(self, calendar, requests, shifts):
        self._calendar = calendar
        self._requests = requests
        self._shifts = shifts

    def load_committed_entries(self, **kwargs):
        return self._calendar.load_committed_entries(**kwargs)

    def persist(self, entries):
        return self._calendar.persist(entries)

    def release(self, *, source, source_id):
        return self._calendar.release(source=source, source_id=source_id)

    def save_decision(self, request, *, expected_status):
        return self._requests.save_decision(request, expected_status=expected_status)

    def add_shift(self, shift):
        return self._shifts.add(shift)

    def update_shift_status(self, *, shift_id, status, expected_status):
        return self._shifts.update_status(shift_id=shift_id, status=status, expected_status=expected_status)


class InMemoryUnitOfWork:
    """Restores all three fakes if the transaction block raises."""

    def __init__(self, calendar, requests, shifts):
        self._calendar = calendar
        self._requests = requests
        self._shifts = shifts
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self):
        saved = (
            list(self._calendar.entries),
            self._calendar._next_id,
            dict(self._requests.rows),
            dict(self._shifts.shifts),
            self._shifts._next_id,
        )
        try:
            yield InMemoryTransaction(self._calendar, self._requests, self._shifts)
        except Exception:
            (
                self._calendar.entries,
                self._calendar._next_id,
                self._requests.rows,
                self._shifts.shifts,
                self._shifts._next_id,
            ) = saved
            self.rollbacks += 1
            raise
        self.commits += 1


class RecordingSink:
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)

    def types(self):
        return [e.event_type for e in self.events]


class FixedClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 6, 1, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def calendar():
    return InMemoryCalendarStore()


@pytest.fixture
def requests_repo():
    return InMemoryRequestRepository()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def policy():
    return RoleApprovalPolicy(ROLES.get)


@pytest.fixture
def request_service(requests_repo, calendar, policy, sink, clock):
    return RequestService(requests_repo, calendar, policy=policy, notifier=sink, clock=clock)


@pytest.fixture
def shifts_repo():
    return InMemoryShiftRepository()


@pytest.fixture
def uow(calendar, requests_repo, shifts_repo):
    return InMemoryUnitOfWork(calendar, requests_repo, shifts_repo)


@pytest.fixture
def approval_service(requests_repo, calendar, uow, policy, sink, clock):
    return ApprovalService(requests_repo, calendar, uow=uow, policy=policy, notifier=sink, clock=clock)


@pytest.fixture
def shift_service(shifts_repo, uow, sink, clock):
    return ShiftService(shifts_repo, uow=uow, notifier=sink, clock=clock)


@pytest.fixture
def templates_repo():
    return InMemoryTemplateRepository()


@pytest.fixture
def template_service(templates_repo, shift_service, clock):
    return TemplateService(templates_repo, shift_service, clock=clock, default_advance_days=7)


def d(iso: str) -> date:
    return date.fromisoformat(iso)
