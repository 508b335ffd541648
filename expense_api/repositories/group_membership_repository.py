"""Repository for GroupMembership model operations."""

from sqlalchemy.orm import Session
from expense_api.models.group_membership import GroupMembership
from expense_api.models.user import User


class GroupMembershipRepository:
    """Repository for GroupMembership model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_membership(
        self, user_id: int, group_id: int, for_update: bool = False
    ) -> GroupMembership | None:
        """
        Get membership for a specific user in a specific group.

        Args:
            user_id: User ID
            group_id: Group ID
            for_update: Lock the row (SELECT ... FOR UPDATE) until commit

        Returns:
            GroupMembership object or None if not found
        """
        query = self.db.query(GroupMembership).filter(
            GroupMembership.user_id == user_id,
            GroupMembership.group_id == group_id,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def is_member(self, user_id: int, group_id: int, for_update: bool = False) -> bool:
        """Check whether the user currently belongs to the group"""
        return self.get_membership(user_id, group_id, for_update=for_update) is not None

    def get_group_members(self, group_id: int) -> list[tuple[GroupMembership, User]]:
        """
        Get all memberships for a group joined with their users.

        Args:
            group_id: Group ID

        Returns:
            List of (GroupMembership, User) tuples in join order
        """
        return (
            self.db.query(GroupMembership, User)
            .join(User, GroupMembership.user_id == User.id)
            .filter(GroupMembership.group_id == group_id)
            .order_by(GroupMembership.joined_at, GroupMembership.id)
            .all()
        )

    def create_no_commit(self, membership: GroupMembership) -> GroupMembership:
        """
        Add a membership without committing (for atomic ops).

        Raises:
            IntegrityError: On flush, if (group_id, user_id) already exists
        """
        self.db.add(membership)
        self.db.flush()
        return membership
