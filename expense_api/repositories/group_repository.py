"""Repository for Group model operations."""

from sqlalchemy import func
from sqlalchemy.orm import Session
from expense_api.models.group import Group
from expense_api.models.group_membership import GroupMembership


class GroupRepository:
    """Repository for Group model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, group_id: int) -> Group | None:
        """
        Get group by ID.

        Args:
            group_id: Group ID

        Returns:
            Group object or None if not found
        """
        return self.db.query(Group).filter(Group.id == group_id).first()

    def get_for_user_with_counts(self, user_id: int) -> list[tuple[Group, int]]:
        """
        Get every group the user belongs to with its member count.

        Args:
            user_id: User ID

        Returns:
            List of (Group, member_count) tuples ordered by group ID
        """
        member_count = (
            self.db.query(func.count(GroupMembership.id))
            .filter(GroupMembership.group_id == Group.id)
            .correlate(Group)
            .scalar_subquery()
        )
        rows = (
            self.db.query(Group, member_count)
            .join(GroupMembership, GroupMembership.group_id == Group.id)
            .filter(GroupMembership.user_id == user_id)
            .order_by(Group.id)
            .all()
        )
        return [(group, int(count)) for group, count in rows]

    def create_no_commit(self, group: Group) -> Group:
        """
        Add a group and flush to obtain its ID without committing.

        Caller responsible for commit, so the creator's membership can be
        written in the same transaction.
        """
        self.db.add(group)
        self.db.flush()
        return group
