from __future__ import annotations

from typing import Callable, Optional, Protocol

from ..core.enums import Role


class ApprovalPolicy(Protocol):
    """Identity/policy collaborator: may ``approver_id`` decide for this staff/branch?"""

    def can_approve(self, *, approver_id: int, staff_id: int, branch_id: int) -> bool:
        raise NotImplementedError


class RoleApprovalPolicy(ApprovalPolicy):
    """Owners and managers approve; nobody approves their own requests.

    ``role_of`` is supplied by the identity provider and returns None for
    unknown users.
    """

    APPROVER_ROLES = frozenset({Role.OWNER, Role.MANAGER})

    def __init__(self, role_of: Callable[[int], Optional[Role]], *, allow_self_approval: bool = False):
        self._role_of = role_of
        self._allow_self_approval = allow_self_approval

    def can_approve(self, *, approver_id: int, staff_id: int, branch_id: int) -> bool:
        if int(approver_id) == int(staff_id) and not self._allow_self_approval:
            return False
        return self._role_of(int(approver_id)) in self.APPROVER_ROLES
