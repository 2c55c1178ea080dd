"""Aggregation engine: bucket expenses by day, month or category and summarise them."""

import calendar
from typing import Dict, Iterable, List, Sequence
from decimal import Decimal

from expenses.models import Expense
from shared.categories import category_key, category_label
from reports.filters import scope_expenses
from reports.formatting import MONTH_NAMES
from reports.models import Bucket, ReportContext, ReportScope, ReportSummary, ReportType

ZERO = Decimal('0')


def group_by_day_of_month(expenses: Iterable[Expense], year: int, month: int) -> List[Bucket]:
    """
    Sum expenses per calendar day of one month.

    Every day of the month gets a bucket (28-31 depending on month and leap
    year), in ascending order; days without expenses stay at zero. Expenses
    dated outside the month are ignored.
    """
    days_in_month = calendar.monthrange(year, month)[1]
    totals = [ZERO] * days_in_month

    for expense in expenses:
        if expense.date.year == year and expense.date.month == month:
            totals[expense.date.day - 1] += expense.amount

    return [
        Bucket(key=day, label=str(day), amount=totals[day - 1])
        for day in range(1, days_in_month + 1)
    ]


def group_by_month_of_year(expenses: Iterable[Expense], year: int) -> List[Bucket]:
    """Sum expenses into twelve January..December buckets for one year."""
    totals = [ZERO] * 12

    for expense in expenses:
        if expense.date.year == year:
            totals[expense.date.month - 1] += expense.amount

    return [
        Bucket(key=month, label=MONTH_NAMES[month - 1], amount=totals[month - 1])
        for month in range(1, 13)
    ]


def group_by_category(expenses: Iterable[Expense]) -> List[Bucket]:
    """
    Sum expenses per category actually present.

    Buckets appear in the order their category is first seen. Missing
    categories are grouped under "uncategorized"; absent categories get no
    bucket.
    """
    totals: Dict[str, Decimal] = {}

    for expense in expenses:
        key = category_key(expense.category)
        totals[key] = totals.get(key, ZERO) + expense.amount

    return [
        Bucket(key=key, label=category_label(key), amount=amount)
        for key, amount in totals.items()
    ]


def aggregate(expenses: Sequence[Expense], scope: ReportScope) -> List[Bucket]:
    """Bucket expenses the way the scope's report type asks for."""
    if scope.report_type == ReportType.MONTHLY:
        return group_by_day_of_month(expenses, scope.year, scope.month)
    if scope.report_type == ReportType.YEARLY:
        return group_by_month_of_year(expenses, scope.year)
    return group_by_category(expenses)


def summarize(expenses: Sequence[Expense]) -> ReportSummary:
    """
    Compute total, average, count and the extreme expenses of a subset.

    When several expenses share the highest (or lowest) amount, the first one
    in the subset's order is reported.
    """
    if not expenses:
        return ReportSummary()

    total = ZERO
    highest = lowest = expenses[0]

    for expense in expenses:
        total += expense.amount
        if expense.amount > highest.amount:
            highest = expense
        if expense.amount < lowest.amount:
            lowest = expense

    return ReportSummary(
        total=total,
        average=total / len(expenses),
        count=len(expenses),
        highest=highest,
        lowest=lowest
    )


def build_report_context(expenses: Sequence[Expense], scope: ReportScope) -> ReportContext:
    """Scope the expenses to the report period, then bucket and summarise them."""
    scoped = scope_expenses(expenses, scope)
    return ReportContext(
        scope=scope,
        buckets=aggregate(scoped, scope),
        summary=summarize(scoped)
    )
