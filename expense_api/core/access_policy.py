"""Access policy for expense records."""

from dataclasses import dataclass
from enum import Enum as PyEnum

import structlog

from expense_api.core.exceptions import ForbiddenException
from expense_api.models.expense import Expense
from expense_api.repositories.group_membership_repository import GroupMembershipRepository

logger = structlog.get_logger()

NOT_OWNER = "not the owner"
NOT_GROUP_MEMBER = "not a group member"


class ExpenseAction(str, PyEnum):
    """Actions the policy decides on for an existing expense"""

    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of an authorization check.

    Attributes:
        allowed: True if the actor may perform the action
        reason: Why access was denied (None when allowed)
    """

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "AccessDecision":
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


class AccessPolicy:
    """
    Decides whether a user may act on an expense.

    Rules:
    - Personal expense (no group): only the owner, for every action.
    - Group expense: any current member of the group, for every action.
      Who created the expense does not matter once it belongs to a group.

    Membership is read from the store on every call, never cached.
    """

    def __init__(self, membership_repo: GroupMembershipRepository):
        self.membership_repo = membership_repo

    def authorize(self, actor_id: int, expense: Expense, action: ExpenseAction) -> AccessDecision:
        """
        Decide whether actor_id may perform action on expense.

        Args:
            actor_id: Authenticated user ID
            expense: Expense in its current (pre-mutation) state
            action: Requested action

        Returns:
            AccessDecision with a denial reason when not allowed
        """
        if expense.group_id is None:
            if actor_id == expense.user_id:
                return AccessDecision.allow()
            return AccessDecision.deny(NOT_OWNER)

        if self.membership_repo.is_member(actor_id, expense.group_id):
            return AccessDecision.allow()
        return AccessDecision.deny(NOT_GROUP_MEMBER)

    def ensure(self, actor_id: int, expense: Expense, action: ExpenseAction) -> None:
        """
        Raise if the policy denies the action.

        Raises:
            ForbiddenException: With the denial reason
        """
        decision = self.authorize(actor_id, expense, action)
        if not decision.allowed:
            logger.warning(
                "expense_access_denied",
                actor_id=actor_id,
                expense_id=expense.id,
                group_id=expense.group_id,
                action=action.value,
                reason=decision.reason,
            )
            raise ForbiddenException(f"Access denied: {decision.reason}")

    def can_create(self, actor_id: int, group_id: int | None) -> AccessDecision:
        """
        Decide whether actor_id may create an expense.

        Personal expenses need nothing beyond authentication; group
        expenses need current membership in the target group. The
        membership row stays locked until the caller commits the insert.
        """
        if group_id is None:
            return AccessDecision.allow()
        if self.membership_repo.is_member(actor_id, group_id, for_update=True):
            return AccessDecision.allow()
        return AccessDecision.deny(NOT_GROUP_MEMBER)
