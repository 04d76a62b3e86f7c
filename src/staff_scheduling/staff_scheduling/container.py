from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .approvals.policy import ApprovalPolicy
from .approvals.service import ApprovalService
from .core.constants import DEFAULT_ADVANCE_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .notifications.sink import LoggingNotificationSink, NotificationSink
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.service import RequestService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftService
from .staff_calendar.mysql_calendar_repository import MySQLCalendarStore
from .staff_calendar.mysql_unit_of_work import MySQLUnitOfWork
from .templates.mysql_template_repository import MySQLTemplateRepository
from .templates.service import TemplateService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    calendar_store: MySQLCalendarStore
    requests_repo: MySQLRequestRepository
    shifts_repo: MySQLShiftRepository
    templates_repo: MySQLTemplateRepository
    uow: MySQLUnitOfWork

    request_service: RequestService
    approval_service: ApprovalService
    shift_service: ShiftService
    template_service: TemplateService


def build_container(
    *,
    db_config: dict,
    policy: ApprovalPolicy,
    notifier: Optional[NotificationSink] = None,
    scheduling: Optional[dict] = None,
) -> Container:
    scheduling = scheduling or {}
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    notifier = notifier or LoggingNotificationSink()

    calendar_store = MySQLCalendarStore(conn)
    requests_repo = MySQLRequestRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    templates_repo = MySQLTemplateRepository(conn)
    uow = MySQLUnitOfWork(conn)

    request_service = RequestService(requests_repo, calendar_store, policy=policy, notifier=notifier)
    approval_service = ApprovalService(requests_repo, calendar_store, uow=uow, policy=policy, notifier=notifier)
    shift_service = ShiftService(
        shifts_repo,
        uow=uow,
        notifier=notifier,
        block_conflicts=bool(scheduling.get("block_conflicting_shifts", True)),
    )
    template_service = TemplateService(
        templates_repo,
        shift_service,
        default_advance_days=int(scheduling.get("default_advance_days", DEFAULT_ADVANCE_DAYS)),
    )

    return Container(
        conn=conn,
        calendar_store=calendar_store,
        requests_repo=requests_repo,
        shifts_repo=shifts_repo,
        templates_repo=templates_repo,
        uow=uow,
        request_service=request_service,
        approval_service=approval_service,
        shift_service=shift_service,
        template_service=template_service,
    )
