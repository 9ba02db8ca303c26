"""Explicit acting-user context passed into every POS service.

Views build an ``ActorContext`` from ``request.user`` so services never reach
for the request or session themselves and can be exercised directly in tests.
"""

from dataclasses import dataclass
from typing import Optional

from common.choices import UserRole
from common.exceptions import NoBranchAssigned, NotFound, Unauthorized


@dataclass(frozen=True)
class ActorContext:
    user_id: int
    role: str
    branch_id: Optional[int] = None

    @classmethod
    def from_user(cls, user) -> "ActorContext":
        if user is None or not getattr(user, "is_authenticated", False):
            raise Unauthorized("Authentication is required.")
        return cls(user_id=user.id, role=user.role, branch_id=user.branch_id)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def require_admin(self) -> None:
        if not self.is_admin:
            raise Unauthorized("Only administrators can perform this action.")

    def require_branch(self) -> int:
        if self.branch_id is None:
            raise NoBranchAssigned("The user has no branch assigned.")
        return self.branch_id

    def resolve_branch(self, branch_id: Optional[int] = None) -> int:
        """Return the branch a stock mutation should target.

        Sellers always work on their own branch. Admins may name any existing
        branch and fall back to their own.
        """

        from branches.models import Branch

        if branch_id is None or (self.branch_id is not None and int(branch_id) == self.branch_id):
            return self.require_branch()
        if not self.is_admin:
            raise Unauthorized("You can only operate on your assigned branch.")
        if not Branch.objects.filter(id=branch_id).exists():
            raise NotFound("Branch not found.")
        return int(branch_id)
