"""Expense filtering: user filters, report scoping and export selection."""

from typing import Iterable, List, Optional
from datetime import date

from expenses.models import Expense
from reports.models import ExportOptions, FilterSet, ReportScope, ReportType


def _in_date_range(expense: Expense, start: Optional[date], end: Optional[date]) -> bool:
    if start and expense.date < start:
        return False
    if end and expense.date > end:
        return False
    return True


def _matches_search(expense: Expense, term: str) -> bool:
    term = term.lower()
    if term in expense.title.lower():
        return True
    return bool(expense.notes) and term in expense.notes.lower()


def matches_filters(expense: Expense, filter_set: FilterSet) -> bool:
    """Check a single expense against every populated filter field."""
    if not _in_date_range(expense, filter_set.start_date, filter_set.end_date):
        return False

    if filter_set.category and filter_set.category != 'all':
        if expense.category != filter_set.category:
            return False

    if filter_set.min_amount is not None and expense.amount < filter_set.min_amount:
        return False

    if filter_set.max_amount is not None and expense.amount > filter_set.max_amount:
        return False

    if filter_set.search_term and not _matches_search(expense, filter_set.search_term):
        return False

    return True


def apply_filters(expenses: Iterable[Expense], filter_set: Optional[FilterSet] = None) -> List[Expense]:
    """
    Return a new list with the expenses that pass every filter.

    Input order is preserved and records are not modified. Filters that
    contradict each other (min above max, start after end) simply match
    nothing.
    """
    if filter_set is None:
        return list(expenses)
    return [expense for expense in expenses if matches_filters(expense, filter_set)]


def scope_expenses(expenses: Iterable[Expense], scope: ReportScope) -> List[Expense]:
    """Restrict expenses to a report's period and optional category."""
    scoped = []

    for expense in expenses:
        if scope.category and expense.category != scope.category:
            continue

        if scope.report_type == ReportType.MONTHLY:
            if (expense.date.year, expense.date.month) != (scope.year, scope.month):
                continue
        elif scope.report_type == ReportType.YEARLY:
            if expense.date.year != scope.year:
                continue

        scoped.append(expense)

    return scoped


def apply_export_bounds(
    expenses: Iterable[Expense],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None
) -> List[Expense]:
    """Apply the export dialog's own inclusive date bounds."""
    return [expense for expense in expenses if _in_date_range(expense, date_from, date_to)]


def select_for_export(expenses: Iterable[Expense], options: ExportOptions) -> List[Expense]:
    """
    Pick the detail rows for an export.

    Export date bounds are applied on top of whatever filtering produced
    ``expenses``, rows are ordered newest first (stable for equal dates) and
    then cut to ``options.max_items`` when it is a number.
    """
    selected = apply_export_bounds(expenses, options.date_from, options.date_to)
    selected.sort(key=lambda expense: expense.date, reverse=True)

    cap = options.item_cap
    if cap is not None:
        selected = selected[:cap]

    return selected
