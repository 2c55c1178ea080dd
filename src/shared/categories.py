"""Expense category reference data."""

from typing import NamedTuple, Optional


class Category(NamedTuple):
    """Immutable category entry."""

    id: str
    name: str
    icon: str


EXPENSE_CATEGORIES = (
    Category('food', 'Food & Dining', '🍔'),
    Category('transportation', 'Transportation', '🚗'),
    Category('housing', 'Housing', '🏠'),
    Category('utilities', 'Utilities', '💡'),
    Category('entertainment', 'Entertainment', '🎬'),
    Category('healthcare', 'Healthcare', '🏥'),
    Category('shopping', 'Shopping', '🛍️'),
    Category('travel', 'Travel', '✈️'),
    Category('education', 'Education', '📚'),
    Category('personal', 'Personal', '👤'),
    Category('other', 'Other', '📦'),
)

UNCATEGORIZED = 'uncategorized'
UNCATEGORIZED_NAME = 'Uncategorized'

VALID_CATEGORIES = [category.id for category in EXPENSE_CATEGORIES]

_BY_ID = {category.id: category for category in EXPENSE_CATEGORIES}


def get_category(category_id: Optional[str]) -> Optional[Category]:
    """Look up a category by id, returning None for absent or unknown ids."""
    if not category_id:
        return None
    return _BY_ID.get(category_id)


def category_key(category_id: Optional[str]) -> str:
    """Bucket key for a record's category; empty or unknown ids fall back to uncategorized."""
    return category_id if category_id in _BY_ID else UNCATEGORIZED


def category_name(category_id: Optional[str]) -> str:
    """Display name for a category id."""
    category = get_category(category_id)
    return category.name if category else UNCATEGORIZED_NAME


def category_label(category_id: Optional[str]) -> str:
    """Chart label for a category id (icon followed by name)."""
    category = get_category(category_id)
    return f"{category.icon} {category.name}" if category else UNCATEGORIZED_NAME


def plain_label(label: str) -> str:
    """Strip a known category icon prefix, leaving only the display name."""
    for category in EXPENSE_CATEGORIES:
        prefix = f"{category.icon} "
        if label.startswith(prefix):
            return label[len(prefix):]
    return label
