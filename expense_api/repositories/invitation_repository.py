"""Repository for GroupInvitation model operations."""

from sqlalchemy.orm import Session
from expense_api.models.group_invitation import GroupInvitation


class InvitationRepository:
    """Repository for GroupInvitation model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_unused_by_token(self, token: str) -> GroupInvitation | None:
        """
        Get an invitation by token, only while it has not been consumed.

        Used invitations are invisible here, which is what rejects a second
        acceptance of the same token.
        """
        return (
            self.db.query(GroupInvitation)
            .filter(GroupInvitation.token == token, GroupInvitation.used.is_(False))
            .first()
        )

    def get_by_group(self, group_id: int) -> list[GroupInvitation]:
        """Get all invitations issued for a group, newest first"""
        return (
            self.db.query(GroupInvitation)
            .filter(GroupInvitation.group_id == group_id)
            .order_by(GroupInvitation.created_at.desc(), GroupInvitation.id.desc())
            .all()
        )

    def create(self, invitation: GroupInvitation) -> GroupInvitation:
        """
        Create a new invitation.

        Raises:
            IntegrityError: If the token collides with an existing one
        """
        self.db.add(invitation)
        self.db.commit()
        self.db.refresh(invitation)
        return invitation

    def mark_used_no_commit(self, invitation_id: int) -> bool:
        """
        Flip used to True only if it is still False.

        Caller responsible for commit. Returns False when another request
        consumed the invitation first (zero rows matched).
        """
        updated = (
            self.db.query(GroupInvitation)
            .filter(GroupInvitation.id == invitation_id, GroupInvitation.used.is_(False))
            .update({GroupInvitation.used: True}, synchronize_session="fetch")
        )
        return updated == 1
