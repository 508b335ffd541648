"""Group model for shared expenses."""

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from expense_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from expense_api.models.expense import Expense
    from expense_api.models.group_invitation import GroupInvitation
    from expense_api.models.group_membership import GroupMembership


class Group(Base, TimestampMixin):
    """
    A set of users who share expenses.

    Access to group expenses is granted by membership alone; the creator
    has no extra privileges once the group exists. The creator joins
    automatically when the group is created and everyone else joins by
    accepting an invitation.
    """

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    memberships: Mapped[list["GroupMembership"]] = relationship(
        "GroupMembership",
        back_populates="group",
        cascade="all, delete-orphan",
    )
    invitations: Mapped[list["GroupInvitation"]] = relationship(
        "GroupInvitation",
        back_populates="group",
        cascade="all, delete-orphan",
    )
    expenses: Mapped[list["Expense"]] = relationship("Expense", back_populates="group")

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name='{self.name}')>"
