from datetime import date as date_type
from decimal import Decimal
from sqlalchemy import Boolean, Integer, Numeric, ForeignKey, Date, Text, JSON, Enum, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from expense_api.models.base import Base, TimestampMixin
from expense_api.models.category import Category

if TYPE_CHECKING:
    from expense_api.models.user import User
    from expense_api.models.group import Group


class Expense(Base, TimestampMixin):
    """
    A single spending record.

    group_id NULL  -> personal expense, only the owner (user_id) may touch it.
    group_id set   -> group expense, any current member of the group may.

    category_is_manual marks a category supplied by the caller; such a
    category is never overwritten by the keyword categorizer.
    Tags stored as JSON array.
    """

    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    category: Mapped[Category | None] = mapped_column(
        Enum(
            Category,
            native_enum=False,
            length=50,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=True,
        index=True,
    )
    category_is_manual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # NULL only on group expenses whose creator deleted their account
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    group_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Relationships
    user: Mapped["User | None"] = relationship("User", back_populates="expenses")
    group: Mapped["Group | None"] = relationship("Group", back_populates="expenses")

    # Composite indexes for common queries
    __table_args__ = (
        Index("ix_expenses_user_date", "user_id", "date"),
        Index("ix_expenses_group_date", "group_id", "date"),
        CheckConstraint(
            "group_id IS NOT NULL OR user_id IS NOT NULL", name="ck_expenses_personal_has_owner"
        ),
    )

    @property
    def is_personal(self) -> bool:
        return self.group_id is None

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, user_id={self.user_id}, group_id={self.group_id})>"
