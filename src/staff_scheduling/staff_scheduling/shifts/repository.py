from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import WorkShiftStatus
from .model import WorkShift


class ShiftRepository(Protocol):
    def add(self, shift: WorkShift) -> int:
        """Returns shift_id."""

        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[WorkShift]:
        raise NotImplementedError

    def update_status(self, *, shift_id: int, status: WorkShiftStatus, expected_status: WorkShiftStatus) -> bool:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
        branch_id: Optional[int] = None,
    ) -> Sequence[WorkShift]:
        raise NotImplementedError
