from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from expense_api.database import get_db
from expense_api.dependencies import get_current_user
from expense_api.models.user import User
from expense_api.services.expense_service import ExpenseService
from expense_api.schemas.expense_schemas import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    CategoryTotal,
)
from expense_api.core.exceptions import NotFoundException

router = APIRouter()


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense_data: ExpenseCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a new expense.

    - Omit group_id for a personal expense
    - group_id requires membership in that group (400 otherwise)
    - Category is derived from the description when omitted
    - Date defaults to today
    """
    service = ExpenseService(db)
    return service.create_expense(expense_data, user)


@router.get("", response_model=list[ExpenseResponse])
def list_expenses(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List the user's personal expenses and all expenses of their groups.

    Results sorted by date (newest first).
    """
    service = ExpenseService(db)
    return service.list_for_user(user)


@router.get("/group/{group_id}", response_model=list[ExpenseResponse])
def list_group_expenses(
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List expenses of a group.

    - **Requires membership** (403 otherwise)
    """
    service = ExpenseService(db)
    return service.list_for_group(group_id, user)


@router.get("/summary", response_model=dict[str, CategoryTotal])
def get_summary(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Total and count per category over every expense the user can see"""
    service = ExpenseService(db)
    return service.category_summary(user)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Get a specific expense by ID.

    - Returns 404 if the expense doesn't exist
    - Returns 403 if it exists but the user may not see it
    """
    service = ExpenseService(db)
    expense = service.get_expense(expense_id, user)
    if expense is None:
        raise NotFoundException("Expense not found")
    return expense


@router.patch("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update an expense.

    - Only provided fields are updated (partial update)
    - group_id cannot be changed
    - An explicit category is never overwritten by auto-categorization
    """
    service = ExpenseService(db)
    return service.update_expense(expense_id, expense_data, user)


@router.delete("/{expense_id}", response_model=ExpenseResponse)
def delete_expense(
    expense_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete an expense.

    Returns the deleted record.
    """
    service = ExpenseService(db)
    return service.delete_expense(expense_id, user)
