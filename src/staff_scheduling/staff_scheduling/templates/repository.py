from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ShiftTemplate, TemplateStats


class TemplateRepository(Protocol):
    def add(self, template: ShiftTemplate) -> int:
        raise NotImplementedError

    def get_by_id(self, template_id: int) -> Optional[ShiftTemplate]:
        raise NotImplementedError

    def set_flags(
        self,
        *,
        template_id: int,
        is_active: Optional[bool] = None,
        auto_generate: Optional[bool] = None,
    ) -> bool:
        """Update the given flags; ``None`` leaves a flag unchanged. False if no such template."""

        raise NotImplementedError

    def list_templates(
        self,
        *,
        branch_id: Optional[int] = None,
        staff_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[ShiftTemplate]:
        raise NotImplementedError

    def list_auto_generate(self) -> Sequence[ShiftTemplate]:
        """Active templates with auto_generate enabled."""

        raise NotImplementedError

    def count_templates(self, *, branch_id: Optional[int] = None) -> TemplateStats:
        raise NotImplementedError
