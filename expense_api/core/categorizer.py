"""Keyword-based expense categorization."""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from expense_api.models.category import Category

DEFAULT_CATEGORY_KEYWORDS: Mapping[Category, tuple[str, ...]] = MappingProxyType(
    {
        Category.FOOD: ("restaurant", "cafe", "groceries", "food", "dinner", "lunch", "breakfast"),
        Category.TRANSPORTATION: ("uber", "lyft", "taxi", "gas", "fuel", "public transport", "metro"),
        Category.UTILITIES: ("electricity", "water", "internet", "phone", "utility", "bill"),
        Category.ENTERTAINMENT: ("movie", "netflix", "spotify", "concert", "game", "hobby"),
        Category.SHOPPING: ("amazon", "clothes", "shoes", "electronics", "store", "mall"),
        Category.HEALTH: ("gym", "pharmacy", "doctor", "hospital", "fitness", "yoga"),
        Category.TRAVEL: ("flight", "hotel", "airbnb", "vacation", "trip", "luggage"),
        Category.EDUCATION: ("course", "book", "tuition", "school", "workshop", "seminar"),
        Category.MISCELLANEOUS: ("other", "uncategorized", "misc"),
    }
)


class Categorizer:
    """
    Maps expense descriptions to a Category.

    Matching is a case-insensitive substring search. Categories are tried
    in table order and the first one with a matching keyword wins; when
    nothing matches the fallback category is returned.

    The keyword table is copied into a read-only mapping at construction,
    so an instance never changes behaviour after it is built.
    """

    def __init__(
        self,
        table: Mapping[Category, Iterable[str]] = DEFAULT_CATEGORY_KEYWORDS,
        fallback: Category = Category.MISCELLANEOUS,
    ):
        self._table = MappingProxyType(
            {category: tuple(kw.lower() for kw in keywords) for category, keywords in table.items()}
        )
        self.fallback = fallback

    @property
    def table(self) -> Mapping[Category, tuple[str, ...]]:
        return self._table

    def categorize(self, description: str) -> Category:
        text = description.lower()
        for category, keywords in self._table.items():
            if any(keyword in text for keyword in keywords):
                return category
        return self.fallback


default_categorizer = Categorizer()


def categorize(description: str) -> Category:
    """Categorize using the default keyword table"""
    return default_categorizer.categorize(description)
