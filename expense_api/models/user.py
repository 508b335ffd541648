from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from expense_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from expense_api.models.expense import Expense
    from expense_api.models.group_membership import GroupMembership


class User(Base, TimestampMixin):
    """
    Registered user.

    Email is unique across the store. Only a password hash is kept; the
    plain secret never reaches the database.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    # No delete cascade: UserService removes personal expenses and
    # releases group expenses before the user row goes
    expenses: Mapped[list["Expense"]] = relationship("Expense", back_populates="user")
    memberships: Mapped[list["GroupMembership"]] = relationship(
        "GroupMembership",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
