from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestKind, TimeOffType
from .model import RequestCount, ScheduleRequest


class RequestRepository(Protocol):
    def add(self, request: ScheduleRequest) -> int:
        """Insert a new pending request. Returns request_id."""

        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[ScheduleRequest]:
        raise NotImplementedError

    def save_decision(self, request: ScheduleRequest, *, expected_status: str) -> bool:
        """Persist a decided request only if the stored status is still ``expected_status``.

        Returns False when another transition got there first.
        """

        raise NotImplementedError

    def list_requests(
        self,
        *,
        staff_id: Optional[int] = None,
        branch_id: Optional[int] = None,
        statuses: Optional[Sequence[str]] = None,
        kind: Optional[RequestKind] = None,
        time_off_type: Optional[TimeOffType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[ScheduleRequest]:
        """Newest first.

        ``start_date``/``end_date`` keep requests whose date range touches
        the given window.
        """

        raise NotImplementedError

    def count_requests(
        self,
        *,
        staff_id: Optional[int] = None,
        branch_id: Optional[int] = None,
    ) -> Sequence[RequestCount]:
        """Counts over every stored request, grouped by status, type and month."""

        raise NotImplementedError
