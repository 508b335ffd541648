import structlog
from sqlalchemy.orm import Session

from expense_api.models.base import utcnow
from expense_api.models.category import Category, UNCATEGORIZED
from expense_api.models.expense import Expense
from expense_api.models.user import User
from expense_api.repositories.expense_repository import ExpenseRepository
from expense_api.repositories.group_membership_repository import GroupMembershipRepository
from expense_api.schemas.expense_schemas import ExpenseCreate, ExpenseUpdate
from expense_api.services.group_service import GroupService
from expense_api.core.access_policy import AccessPolicy, ExpenseAction
from expense_api.core.categorizer import Categorizer, default_categorizer
from expense_api.core.exceptions import NotFoundException, ValidationException

logger = structlog.get_logger()


class ExpenseService:
    """
    Service layer for the expense ledger.

    Every permission decision goes through AccessPolicy; a default
    category comes from the Categorizer only when the caller gave none.
    """

    def __init__(self, db: Session, categorizer: Categorizer | None = None):
        self.db = db
        self.expense_repo = ExpenseRepository(db)
        self.membership_repo = GroupMembershipRepository(db)
        self.group_service = GroupService(db)
        self.policy = AccessPolicy(self.membership_repo)
        self.categorizer = categorizer or default_categorizer

    def create_expense(self, expense_data: ExpenseCreate, user: User) -> Expense:
        """
        Create a personal or group expense.

        Args:
            expense_data: Expense creation data
            user: Current user (becomes the owner)

        Returns:
            Created expense

        Raises:
            ValidationException: If group_id is given and user is not a member
        """
        if expense_data.category is not None:
            category, manual = expense_data.category, True
        else:
            category, manual = self.categorizer.categorize(expense_data.description), False

        try:
            # Membership check and insert share one transaction
            decision = self.policy.can_create(user.id, expense_data.group_id)
            if not decision:
                raise ValidationException("You are not a member of this group")

            expense = Expense(
                description=expense_data.description,
                amount=expense_data.amount,
                category=category,
                category_is_manual=manual,
                user_id=user.id,
                group_id=expense_data.group_id,
                date=expense_data.date or utcnow().date(),
                tags=list(expense_data.tags),
            )
            expense = self.expense_repo.create(expense)
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "expense_created",
            expense_id=expense.id,
            user_id=user.id,
            group_id=expense.group_id,
            category=expense.category.value if expense.category else None,
        )
        return expense

    def get_expense(self, expense_id: int, user: User) -> Expense | None:
        """
        Get expense by ID with access verification.

        Returns:
            Expense, or None if it doesn't exist

        Raises:
            ForbiddenException: If the expense exists but access is denied
        """
        expense = self.expense_repo.get_by_id(expense_id)
        if expense is None:
            return None
        self.policy.ensure(user.id, expense, ExpenseAction.READ)
        return expense

    def list_for_user(self, user: User) -> list[Expense]:
        """Personal expenses plus expenses of every group the user belongs to"""
        return self.expense_repo.get_for_user(user.id)

    def list_for_group(self, group_id: int, user: User) -> list[Expense]:
        """
        Get all expenses of a group.

        Raises:
            NotFoundException: If group doesn't exist
            ForbiddenException: If user is not a member
        """
        self.group_service.require_member(group_id, user)
        return self.expense_repo.get_by_group(group_id)

    def update_expense(self, expense_id: int, expense_data: ExpenseUpdate, user: User) -> Expense:
        """
        Apply a partial update.

        Authorization is checked against the row as it is before the update.
        A changed description re-derives the category only when the caller
        gave no category and the stored one was not set explicitly.

        Raises:
            NotFoundException: If expense doesn't exist
            ForbiddenException: If access is denied
        """
        try:
            expense = self.expense_repo.get_by_id(expense_id, for_update=True)
            if not expense:
                raise NotFoundException(f"Expense {expense_id} not found")
            self.policy.ensure(user.id, expense, ExpenseAction.UPDATE)

            if expense_data.description is not None:
                expense.description = expense_data.description
            if expense_data.amount is not None:
                expense.amount = expense_data.amount
            if expense_data.date is not None:
                expense.date = expense_data.date
            if expense_data.tags is not None:
                expense.tags = list(expense_data.tags)

            if expense_data.category is not None:
                expense.category = expense_data.category
                expense.category_is_manual = True
            elif expense_data.description is not None and not expense.category_is_manual:
                expense.category = self.categorizer.categorize(expense_data.description)

            expense = self.expense_repo.update(expense)
        except Exception:
            self.db.rollback()
            raise

        logger.info("expense_updated", expense_id=expense.id, user_id=user.id)
        return expense

    def delete_expense(self, expense_id: int, user: User) -> Expense:
        """
        Delete an expense.

        Returns:
            The deleted expense (detached)

        Raises:
            NotFoundException: If expense doesn't exist
            ForbiddenException: If access is denied
        """
        try:
            expense = self.expense_repo.get_by_id(expense_id, for_update=True)
            if not expense:
                raise NotFoundException(f"Expense {expense_id} not found")
            self.policy.ensure(user.id, expense, ExpenseAction.DELETE)
            self.expense_repo.delete(expense)
        except Exception:
            self.db.rollback()
            raise

        logger.info("expense_deleted", expense_id=expense_id, user_id=user.id)
        return expense

    def category_summary(self, user: User) -> dict[str, dict]:
        """
        Totals and counts per category over everything the user can see.

        Rows without a category are reported under "Uncategorized".
        """
        summary: dict[str, dict] = {}
        for category, total, count in self.expense_repo.summarize_by_category(user.id):
            if category is None:
                key = UNCATEGORIZED
            else:
                key = Category(category).value
            bucket = summary.setdefault(key, {"total": 0.0, "count": 0})
            bucket["total"] = round(bucket["total"] + total, 2)
            bucket["count"] += count
        return summary
