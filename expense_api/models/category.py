"""Expense category enum."""

from enum import Enum as PyEnum


class Category(str, PyEnum):
    """
    Closed set of expense categories.

    Stored by value. Requests carrying any other label are rejected at the
    schema boundary.
    """

    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    UTILITIES = "Utilities"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    HEALTH = "Health"
    TRAVEL = "Travel"
    EDUCATION = "Education"
    MISCELLANEOUS = "Miscellaneous"


# Summary bucket for rows stored without a category
UNCATEGORIZED = "Uncategorized"
