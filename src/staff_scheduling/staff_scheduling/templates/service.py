from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_positive_id
from ..core.constants import DEFAULT_ADVANCE_DAYS
from ..core.enums import DayOfWeek
from ..core.exceptions import InvalidTemplateError, NotFoundError
from ..shifts.model import ShiftAssignment, WorkShift
from ..shifts.service import ShiftService
from .generator import expand
from .model import RecurrenceRule, ShiftTemplate, TemplateStats
from .repository import TemplateRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRun:
    template_id: Optional[int]
    created: tuple[WorkShift, ...]
    skipped: tuple[ShiftAssignment, ...]


class TemplateService:
    def __init__(
        self,
        templates: TemplateRepository,
        shifts: ShiftService,
        *,
        clock: Callable = now_local,
        default_advance_days: int = DEFAULT_ADVANCE_DAYS,
    ):
        self._templates = templates
        self._shifts = shifts
        self._clock = clock
        self._default_advance_days = int(default_advance_days)

    def create_template(
        self,
        *,
        staff_id: int,
        branch_id: int,
        days_of_week: Iterable[DayOfWeek],
        start_time: str,
        end_time: str,
        end_date: date,
        advance_days: Optional[int] = None,
        auto_generate: bool = False,
        name: Optional[str] = None,
    ) -> ShiftTemplate:
        advance = self._default_advance_days if advance_days is None else int(advance_days)
        if advance <= 0:
            raise InvalidTemplateError(f"advance_days must be positive, got {advance}")

        template = ShiftTemplate(
            template_id=None,
            staff_id=require_positive_id(staff_id, "Staff"),
            branch_id=require_positive_id(branch_id, "Branch"),
            recurrence=RecurrenceRule.from_times(days_of_week, start_time, end_time),
            advance_days=advance,
            end_date=end_date,
            auto_generate=bool(auto_generate),
            name=optional_text(name),
        )
        template = replace(template, template_id=int(self._templates.add(template)))
        logger.info("Shift template %s created for staff %s", template.template_id, template.staff_id)
        return template

    def get(self, *, template_id: int) -> ShiftTemplate:
        template = self._templates.get_by_id(int(template_id))
        if not template:
            raise NotFoundError(f"Template {template_id} does not exist")
        return template

    def update_template(
        self,
        *,
        template_id: int,
        is_active: Optional[bool] = None,
        auto_generate: Optional[bool] = None,
    ) -> ShiftTemplate:
        if not self._templates.set_flags(template_id=int(template_id), is_active=is_active, auto_generate=auto_generate):
            raise NotFoundError(f"Template {template_id} does not exist")
        template = self.get(template_id=template_id)
        logger.info(
            "Template %s updated (active=%s, auto_generate=%s)",
            template.template_id,
            template.is_active,
            template.auto_generate,
        )
        return template

    def activate(self, *, template_id: int) -> ShiftTemplate:
        return self.update_template(template_id=template_id, is_active=True)

    def deactivate(self, *, template_id: int) -> ShiftTemplate:
        """Stop a template from generating. Shifts it already created are kept."""
        return self.update_template(template_id=template_id, is_active=False)

    def set_auto_generate(self, *, template_id: int, enabled: bool) -> ShiftTemplate:
        return self.update_template(template_id=template_id, auto_generate=bool(enabled))

    def list_templates(
        self,
        *,
        branch_id: Optional[int] = None,
        staff_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[ShiftTemplate]:
        return self._templates.list_templates(branch_id=branch_id, staff_id=staff_id, is_active=is_active)

    def stats(self, *, branch_id: Optional[int] = None) -> TemplateStats:
        return self._templates.count_templates(branch_id=branch_id)

    def generate(self, *, template_id: int, today: Optional[date] = None) -> GenerationRun:
        template = self.get(template_id=template_id)
        if not template.is_active:
            raise InvalidTemplateError(f"Template {template_id} is inactive")
        return self.generate_for(template, today=today)

    def generate_for(self, template: ShiftTemplate, *, today: Optional[date] = None) -> GenerationRun:
        """Assign a shift for every expanded date that is still free.

        Dates with a conflicting committed entry (including a shift produced
        by an earlier run) are skipped and reported, so re-running is safe.
        """
        today = today or self._clock().date()
        created: list[WorkShift] = []
        skipped: list[ShiftAssignment] = []
        for interval in expand(template, today):
            result = self._shifts.propose(
                staff_id=template.staff_id,
                branch_id=template.branch_id,
                interval=interval,
                template_id=template.template_id,
                allow_conflicts=False,
            )
            if result.committed:
                created.append(result.shift)
            else:
                skipped.append(result)

        logger.info(
            "Template %s expanded on %s: %d shifts created, %d skipped",
            template.template_id,
            today.isoformat(),
            len(created),
            len(skipped),
        )
        return GenerationRun(template_id=template.template_id, created=tuple(created), skipped=tuple(skipped))

    def run_auto_generation(self, *, today: Optional[date] = None) -> list[GenerationRun]:
        today = today or self._clock().date()
        runs: list[GenerationRun] = []
        for template in self._templates.list_auto_generate():
            if template.end_date < today:
                logger.info("Template %s ended on %s, skipping", template.template_id, template.end_date.isoformat())
                continue
            runs.append(self.generate_for(template, today=today))
        return runs
