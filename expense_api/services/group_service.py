import structlog
from sqlalchemy.orm import Session

from expense_api.models.group import Group
from expense_api.models.group_membership import GroupMembership
from expense_api.models.user import User
from expense_api.repositories.group_repository import GroupRepository
from expense_api.repositories.group_membership_repository import GroupMembershipRepository
from expense_api.core.exceptions import NotFoundException, ForbiddenException

logger = structlog.get_logger()


class GroupService:
    """Service layer for group management business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.group_repo = GroupRepository(db)
        self.membership_repo = GroupMembershipRepository(db)

    def create_group(self, name: str, user: User) -> Group:
        """
        Create a group and add the creator as its first member.

        Both rows are written in one transaction.

        Args:
            name: Group display name
            user: Creator

        Returns:
            Created group
        """
        try:
            group = self.group_repo.create_no_commit(Group(name=name, created_by=user.id))
            self.membership_repo.create_no_commit(
                GroupMembership(group_id=group.id, user_id=user.id)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(group)
        logger.info("group_created", group_id=group.id, user_id=user.id)
        return group

    def list_user_groups(self, user: User) -> list[dict]:
        """
        List all groups that a user belongs to.

        Returns:
            List of groups with their member count
        """
        return [
            {
                "id": group.id,
                "name": group.name,
                "created_by": group.created_by,
                "created_at": group.created_at,
                "member_count": count,
            }
            for group, count in self.group_repo.get_for_user_with_counts(user.id)
        ]

    def get_group(self, group_id: int) -> Group:
        """
        Raises:
            NotFoundException: If group doesn't exist
        """
        group = self.group_repo.get_by_id(group_id)
        if not group:
            raise NotFoundException(f"Group {group_id} not found")
        return group

    def require_member(self, group_id: int, user: User) -> Group:
        """
        Get group, requiring the user to be a current member.

        Raises:
            NotFoundException: If group doesn't exist
            ForbiddenException: If user is not a member
        """
        group = self.get_group(group_id)
        if not self.is_group_member(group_id, user.id):
            raise ForbiddenException("You are not a member of this group")
        return group

    def get_group_details(self, group_id: int, user: User) -> dict:
        """
        Get group details including members.

        Args:
            group_id: Group ID
            user: Requesting user (must be a member)

        Returns:
            Group fields plus a members list
        """
        group = self.require_member(group_id, user)

        members = [
            {
                "id": member.id,
                "username": member.username,
                "email": member.email,
                "joined_at": membership.joined_at,
            }
            for membership, member in self.membership_repo.get_group_members(group_id)
        ]
        return {
            "id": group.id,
            "name": group.name,
            "created_by": group.created_by,
            "created_at": group.created_at,
            "members": members,
        }

    def is_group_member(self, group_id: int, user_id: int) -> bool:
        """Check if user is a member of a group"""
        return self.membership_repo.is_member(user_id, group_id)
