"""Group membership model linking users to groups."""

from datetime import datetime
from sqlalchemy import Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from expense_api.models.base import Base, utcnow

if TYPE_CHECKING:
    from expense_api.models.user import User
    from expense_api.models.group import Group


class GroupMembership(Base):
    """
    Fact record proving a user belongs to a group.

    Rows are only ever inserted (group creation or invitation acceptance),
    never updated.

    Constraints:
    - Unique(group_id, user_id) - a user joins a group at most once
    """

    __tablename__ = "group_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Relationships
    group: Mapped["Group"] = relationship("Group", back_populates="memberships")
    user: Mapped["User"] = relationship("User", back_populates="memberships")

    # Constraints
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_user"),
    )

    def __repr__(self) -> str:
        return f"<GroupMembership(group_id={self.group_id}, user_id={self.user_id})>"
