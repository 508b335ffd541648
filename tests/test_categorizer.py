import pytest
from types import MappingProxyType

from expense_api.core.categorizer import Categorizer, categorize, DEFAULT_CATEGORY_KEYWORDS
from expense_api.models.category import Category


class TestDefaultTable:
    """Tests for categorization with the default keyword table"""

    @pytest.mark.parametrize(
        "description, expected",
        [
            ("Uber to airport", Category.TRANSPORTATION),
            ("Dinner at cafe", Category.FOOD),
            ("Netflix subscription", Category.ENTERTAINMENT),
            ("Monthly internet bill", Category.UTILITIES),
            ("Gym membership", Category.HEALTH),
            ("Hotel in Lisbon", Category.TRAVEL),
            ("Python course", Category.EDUCATION),
            ("New shoes", Category.SHOPPING),
        ],
    )
    def test_keyword_maps_to_category(self, description, expected):
        """Descriptions containing a known keyword get its category"""
        assert categorize(description) == expected

    def test_match_is_case_insensitive(self):
        assert categorize("UBER RIDE") == Category.TRANSPORTATION
        assert categorize("uber ride") == Category.TRANSPORTATION

    def test_no_match_falls_back_to_miscellaneous(self):
        assert categorize("Birthday present for Sam") == Category.MISCELLANEOUS
        assert categorize("") == Category.MISCELLANEOUS

    def test_first_category_in_table_order_wins(self):
        """'Dinner' (Food) and 'trip' (Travel) both match; Food comes first"""
        assert categorize("Dinner during trip") == Category.FOOD

    def test_keyword_matches_inside_words(self):
        """Matching is a plain substring search, not a word match"""
        assert categorize("Gasket replacement") == Category.TRANSPORTATION


class TestInjectedTable:
    """Tests for categorizers built with a custom table"""

    def test_custom_table_and_fallback(self):
        categorizer = Categorizer(
            {Category.HEALTH: ["dentist"], Category.FOOD: ["dentist", "pizza"]},
            fallback=Category.SHOPPING,
        )
        assert categorizer.categorize("Dentist visit") == Category.HEALTH
        assert categorizer.categorize("Pizza night") == Category.FOOD
        assert categorizer.categorize("Uber") == Category.SHOPPING

    def test_keywords_are_lowercased(self):
        categorizer = Categorizer({Category.TRAVEL: ["TrainLine"]})
        assert categorizer.categorize("trainline ticket") == Category.TRAVEL

    def test_table_is_immutable_after_construction(self):
        """Mutating the source mapping does not change the categorizer"""
        source = {Category.FOOD: ["pizza"]}
        categorizer = Categorizer(source)
        source[Category.TRAVEL] = ["pizza"]
        source[Category.FOOD].append("sushi")

        assert categorizer.categorize("sushi") == Category.MISCELLANEOUS
        assert isinstance(categorizer.table, MappingProxyType)
        with pytest.raises(TypeError):
            categorizer.table[Category.TRAVEL] = ("train",)

    def test_default_table_covers_every_category(self):
        assert set(DEFAULT_CATEGORY_KEYWORDS) == set(Category)
