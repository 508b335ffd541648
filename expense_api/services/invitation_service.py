import secrets
from datetime import datetime, timedelta

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expense_api.config import settings
from expense_api.models.base import utcnow
from expense_api.models.group_invitation import GroupInvitation
from expense_api.models.group_membership import GroupMembership
from expense_api.models.user import User
from expense_api.repositories.invitation_repository import InvitationRepository
from expense_api.repositories.group_membership_repository import GroupMembershipRepository
from expense_api.repositories.user_repository import UserRepository
from expense_api.services.group_service import GroupService
from expense_api.core.exceptions import (
    ConflictException,
    ExpiredException,
    ValidationException,
)

logger = structlog.get_logger()


def generate_token() -> str:
    """Unguessable URL-safe invitation token (43 chars)"""
    return secrets.token_urlsafe(32)


class InvitationService:
    """
    Issues and consumes group invitations.

    Lifecycle: pending -> accepted (used=True), or pending -> expired once
    expires_at passes. Expiry is evaluated lazily when a token is presented.
    """

    def __init__(self, db: Session, ttl: timedelta | None = None):
        self.db = db
        self.ttl = ttl or timedelta(days=settings.INVITATION_TTL_DAYS)
        self.invitation_repo = InvitationRepository(db)
        self.membership_repo = GroupMembershipRepository(db)
        self.user_repo = UserRepository(db)
        self.group_service = GroupService(db)

    def issue(self, group_id: int, email: str, inviter: User) -> GroupInvitation:
        """
        Invite an email address to a group.

        Args:
            group_id: Target group
            email: Address to invite (need not be registered yet)
            inviter: Current member issuing the invitation

        Returns:
            Created invitation carrying the token

        Raises:
            NotFoundException: If group doesn't exist
            ForbiddenException: If inviter is not a member
            ConflictException: If the email belongs to an existing member
        """
        self.group_service.require_member(group_id, inviter)

        email = email.lower()
        existing_user = self.user_repo.get_by_email(email)
        if existing_user and self.membership_repo.is_member(existing_user.id, group_id):
            raise ConflictException("User is already a member of this group")

        now = utcnow()
        invitation = GroupInvitation(
            group_id=group_id,
            invited_email=email,
            invited_by=inviter.id,
            token=generate_token(),
            created_at=now,
            expires_at=now + self.ttl,
            used=False,
        )
        invitation = self.invitation_repo.create(invitation)

        logger.info(
            "invitation_issued",
            invitation_id=invitation.id,
            group_id=group_id,
            invited_by=inviter.id,
        )
        return invitation

    def accept(self, token: str, user: User, now: datetime | None = None) -> GroupMembership:
        """
        Accept an invitation and join its group.

        Consuming the token and inserting the membership are committed
        together; if either step fails, neither is persisted.

        Args:
            token: Invitation token
            user: Accepting user
            now: Evaluation time (defaults to current UTC time)

        Returns:
            Created membership

        Raises:
            ValidationException: If the token is unknown or already used
            ExpiredException: If the invitation is past its window
            ConflictException: If the user is already a member
        """
        invitation = self.invitation_repo.get_unused_by_token(token)
        if not invitation:
            logger.info("invitation_rejected", reason="invalid", user_id=user.id)
            raise ValidationException("Invalid or expired invitation")

        if invitation.is_expired(now):
            logger.info(
                "invitation_rejected",
                reason="expired",
                invitation_id=invitation.id,
                user_id=user.id,
            )
            raise ExpiredException("Invitation has expired")

        if self.membership_repo.is_member(user.id, invitation.group_id):
            raise ConflictException("You are already a member of this group")

        try:
            if not self.invitation_repo.mark_used_no_commit(invitation.id):
                # Consumed by a concurrent request between lookup and update
                raise ValidationException("Invalid or expired invitation")
            membership = self.membership_repo.create_no_commit(
                GroupMembership(group_id=invitation.group_id, user_id=user.id)
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictException("You are already a member of this group")
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(membership)
        logger.info(
            "invitation_accepted",
            invitation_id=invitation.id,
            group_id=membership.group_id,
            user_id=user.id,
        )
        return membership

    def list_for_group(self, group_id: int, user: User) -> list[dict]:
        """
        List a group's invitations with their derived status.

        Raises:
            NotFoundException: If group doesn't exist
            ForbiddenException: If user is not a member
        """
        self.group_service.require_member(group_id, user)
        now = utcnow()
        return [
            {
                "id": invitation.id,
                "group_id": invitation.group_id,
                "invited_email": invitation.invited_email,
                "invited_by": invitation.invited_by,
                "created_at": invitation.created_at,
                "expires_at": invitation.expires_at,
                "status": invitation.status(now),
            }
            for invitation in self.invitation_repo.get_by_group(group_id)
        ]
