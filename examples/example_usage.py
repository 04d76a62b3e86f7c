"""Example: run the scheduling services without any web layer.

Assigns a shift, files a time-off request over it, then approves the
request as a manager to show the override report.
"""

from datetime import date

from src.staff_scheduling.staff_scheduling.approvals.policy import RoleApprovalPolicy
from src.staff_scheduling.staff_scheduling.core.enums import Role, TimeOffType
from src.staff_scheduling.staff_scheduling.main import bootstrap

ROLES = {1: Role.MANAGER, 2: Role.STAFF}


def main():
    container = bootstrap(policy=RoleApprovalPolicy(ROLES.get))
    container.shift_service.assign(
        staff_id=2, branch_id=1, work_date=date(2024, 6, 11), start_time="09:00", end_time="17:00"
    )
    req = container.request_service.create_time_off(
        staff_id=2,
        branch_id=1,
        time_off_type=TimeOffType.VACATION,
        start_date=date(2024, 6, 10),
        end_date=date(2024, 6, 12),
        reason="Family trip",
    )
    print("conflicts at creation:", req.conflict_report.count)
    outcome = container.approval_service.approve(request_id=req.request_id, approver_id=1, notes="Covered by Lan")
    print("approved over conflicts:", outcome.is_override, "entries:", len(outcome.committed_entries))


if __name__ == "__main__":
    main()
