"""Shared text formatting for report titles, amounts and filenames."""

import re
from decimal import Decimal
from typing import Optional

from shared.categories import get_category
from reports.models import ReportScope, ReportType

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]

PERIOD_LABELS = {
    ReportType.MONTHLY: 'Day',
    ReportType.YEARLY: 'Month',
    ReportType.CATEGORY: 'Category',
}


def month_name(month: int) -> str:
    """English month name for a 1-based month number."""
    return MONTH_NAMES[month - 1]


def report_title(scope: ReportScope) -> str:
    """Title used on summary blocks and chart headings."""
    if scope.report_type == ReportType.MONTHLY:
        return f"Expenses for {month_name(scope.month)} {scope.year}"
    if scope.report_type == ReportType.YEARLY:
        return f"Expenses for {scope.year}"
    return "Expenses by Category"


def document_title(scope: ReportScope) -> str:
    """Title repeated in the header of every document page."""
    if scope.report_type == ReportType.MONTHLY:
        return f"Expense Report - {month_name(scope.month)} {scope.year}"
    if scope.report_type == ReportType.YEARLY:
        return f"Expense Report - {scope.year}"
    return "Expense Report - By Category"


def build_filename(scope: ReportScope) -> str:
    """
    Derive the download filename (without extension) for a report scope.

    Examples:
        monthly, March 2024    -> expense-report-march-2024
        yearly, 2024           -> expense-report-2024
        category, no selection -> expense-report-by-category
        category, Food&Dining  -> expense-report-food-&-dining
    """
    if scope.report_type == ReportType.MONTHLY:
        return f"expense-report-{month_name(scope.month).lower()}-{scope.year}"
    if scope.report_type == ReportType.YEARLY:
        return f"expense-report-{scope.year}"

    category = get_category(scope.category)
    if category:
        slug = re.sub(r'\s+', '-', category.name.lower())
        return f"expense-report-{slug}"
    return "expense-report-by-category"


def format_amount(amount: Decimal) -> str:
    """Plain two-decimal amount, e.g. 1234.5 -> '1234.50'."""
    return f"{Decimal(amount):.2f}"


def format_currency(amount: Decimal) -> str:
    """US dollar amount with grouping, e.g. 1234.5 -> '$1,234.50'."""
    amount = Decimal(amount)
    sign = '-' if amount < 0 else ''
    return f"{sign}${abs(amount):,.2f}"


def truncate_text(text: Optional[str], max_length: int) -> str:
    """Cut text to max_length characters, marking the cut with '...'."""
    if not text:
        return ''
    return text[:max_length] + '...' if len(text) > max_length else text
