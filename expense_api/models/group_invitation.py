"""Time-limited invitation to join a group."""

from datetime import datetime, UTC
from enum import Enum as PyEnum
from sqlalchemy import Boolean, String, Integer, ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from expense_api.models.base import Base, utcnow

if TYPE_CHECKING:
    from expense_api.models.group import Group


class InvitationStatus(str, PyEnum):
    """Derived invitation state. Never stored; computed from used/expires_at."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are always UTC here."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class GroupInvitation(Base):
    """
    Single-use invitation token for a group.

    Business Rules:
    - Issued by a current group member for an email address
    - Expires after INVITATION_TTL_DAYS (7 by default)
    - `used` flips False -> True exactly once, on acceptance
    - An expired, unused invitation stays expired; it is never revived
    """

    __tablename__ = "group_invitations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invited_email: Mapped[str] = mapped_column(String(320), nullable=False)
    invited_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    group: Mapped["Group"] = relationship("Group", back_populates="invitations")

    __table_args__ = (
        Index("ix_group_invitations_group_email", "group_id", "invited_email"),
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or utcnow()
        return now > as_utc(self.expires_at)

    def status(self, now: datetime | None = None) -> InvitationStatus:
        if self.used:
            return InvitationStatus.ACCEPTED
        if self.is_expired(now):
            return InvitationStatus.EXPIRED
        return InvitationStatus.PENDING

    def __repr__(self) -> str:
        return f"<GroupInvitation(id={self.id}, group_id={self.group_id}, used={self.used})>"
