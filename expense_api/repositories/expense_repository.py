from sqlalchemy import func, or_, and_, select
from sqlalchemy.orm import Session, Query

from expense_api.models.expense import Expense
from expense_api.models.group_membership import GroupMembership


class ExpenseRepository:
    """Repository for Expense data access"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, expense: Expense) -> Expense:
        """Create a new expense"""
        self.db.add(expense)
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def get_by_id(self, expense_id: int, for_update: bool = False) -> Expense | None:
        """
        Get expense by ID.

        With for_update=True the row is locked (SELECT ... FOR UPDATE) until
        the session commits or rolls back, so an authorization check and
        the write that follows it see the same row state. SQLite ignores
        the lock clause.
        """
        query = self.db.query(Expense).filter(Expense.id == expense_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def _visible_to_user(self, user_id: int) -> Query:
        """
        Expenses a user can see: personal expenses they own plus every
        expense of every group they currently belong to.

        Built as a single WHERE clause so a row matching both branches is
        still returned once.
        """
        member_group_ids = select(GroupMembership.group_id).where(
            GroupMembership.user_id == user_id
        )
        return self.db.query(Expense).filter(
            or_(
                and_(Expense.group_id.is_(None), Expense.user_id == user_id),
                Expense.group_id.in_(member_group_ids),
            )
        )

    def get_for_user(self, user_id: int) -> list[Expense]:
        """Get personal and group expenses for a user, most recent first"""
        return (
            self._visible_to_user(user_id)
            .order_by(Expense.date.desc(), Expense.id.desc())
            .all()
        )

    def get_by_group(self, group_id: int) -> list[Expense]:
        """Get all expenses attached to a group, most recent first"""
        return (
            self.db.query(Expense)
            .filter(Expense.group_id == group_id)
            .order_by(Expense.date.desc(), Expense.id.desc())
            .all()
        )

    def summarize_by_category(self, user_id: int) -> list[tuple[str | None, float, int]]:
        """
        Aggregate the user's visible expenses by category.

        Returns:
            List of (category value or None, total amount, count) tuples
        """
        visible = self._visible_to_user(user_id).subquery()
        rows = (
            self.db.query(
                visible.c.category,
                func.coalesce(func.sum(visible.c.amount), 0),
                func.count(visible.c.id),
            )
            .group_by(visible.c.category)
            .all()
        )
        return [(category, float(total), int(count)) for category, total, count in rows]

    def update(self, expense: Expense) -> Expense:
        """Update an expense"""
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def delete(self, expense: Expense) -> None:
        """Delete an expense"""
        self.db.delete(expense)
        self.db.commit()

    def delete_personal_for_user_no_commit(self, user_id: int) -> int:
        """Delete the user's personal expenses. Caller responsible for commit."""
        return (
            self.db.query(Expense)
            .filter(Expense.user_id == user_id, Expense.group_id.is_(None))
            .delete(synchronize_session="fetch")
        )

    def release_group_expenses_no_commit(self, user_id: int) -> int:
        """
        Clear the creator on the user's group expenses so they stay in
        the group ledger. Caller responsible for commit.
        """
        return (
            self.db.query(Expense)
            .filter(Expense.user_id == user_id, Expense.group_id.is_not(None))
            .update({Expense.user_id: None}, synchronize_session="fetch")
        )
