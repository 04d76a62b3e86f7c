from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import EventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleEvent:
    event_type: EventType
    staff_id: int
    subject: str
    subject_id: Optional[int]
    occurred_at: datetime
    actor_id: Optional[int] = None
    conflict_count: int = 0
    note: Optional[str] = None


class NotificationSink(Protocol):
    """One-way consumer of scheduling events; no response is expected."""

    def publish(self, event: ScheduleEvent) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    """Default sink: writes each event to the application log."""

    def publish(self, event: ScheduleEvent) -> None:
        level = logging.WARNING if event.event_type == EventType.CONFLICTS_DETECTED else logging.INFO
        logger.log(
            level,
            "%s %s#%s staff=%s actor=%s conflicts=%d",
            event.event_type.value,
            event.subject,
            event.subject_id,
            event.staff_id,
            event.actor_id,
            event.conflict_count,
        )
