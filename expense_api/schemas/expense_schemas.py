from datetime import date as date_type, datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from expense_api.models.category import Category


class ExpenseCreate(BaseModel):
    """
    Schema for creating a new expense.

    Omit category to have it derived from the description. Omit group_id
    for a personal expense.
    """

    description: str = Field(..., min_length=1, max_length=1000)
    # Matches the Numeric(12, 2) column
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    category: Optional[Category] = None
    tags: list[str] = Field(default_factory=list)
    date: Optional[date_type] = None
    group_id: Optional[int] = Field(None, gt=0)


class ExpenseUpdate(BaseModel):
    """
    Schema for updating an expense (partial).

    group_id is deliberately absent: group assignment cannot change after
    creation, and unknown fields are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    category: Optional[Category] = None
    date: Optional[date_type] = None
    tags: Optional[list[str]] = None


class ExpenseResponse(BaseModel):
    """Schema for expense response"""

    model_config = {"from_attributes": True}

    id: int
    description: str
    amount: float
    category: Optional[Category]
    user_id: Optional[int]
    group_id: Optional[int]
    date: date_type
    tags: list[str]
    created_at: datetime


class CategoryTotal(BaseModel):
    total: float
    count: int
