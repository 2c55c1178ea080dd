"""Unit tests for report aggregation."""

import pytest
from datetime import date
from decimal import Decimal
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from expenses.models import Expense
from reports.aggregation import (
    aggregate,
    build_report_context,
    group_by_category,
    group_by_day_of_month,
    group_by_month_of_year,
    summarize
)
from reports.formatting import format_amount
from reports.models import ReportScope, ReportType, ReportSummary


def make_expense(expense_id, amount, day, category='food', title=None):
    return Expense(
        expense_id=expense_id,
        title=title or f"Expense {expense_id}",
        amount=Decimal(str(amount)),
        category=category,
        date=day
    )


class TestGrouping:
    """Test cases for bucket grouping."""

    @pytest.fixture
    def march_expenses(self):
        return [
            make_expense('e1', '12.50', date(2024, 3, 1)),
            make_expense('e2', '7.25', date(2024, 3, 1), category='transportation'),
            make_expense('e3', '100.00', date(2024, 3, 15), category='housing'),
            make_expense('e4', '3.10', date(2024, 3, 31), category=None),
        ]

    def test_day_buckets_conserve_total(self, march_expenses):
        """Bucket amounts add up to the subset total."""
        buckets = group_by_day_of_month(march_expenses, 2024, 3)

        assert len(buckets) == 31
        assert sum(bucket.amount for bucket in buckets) == Decimal('122.85')
        assert buckets[0].amount == Decimal('19.75')
        assert buckets[14].amount == Decimal('100.00')
        assert buckets[30].amount == Decimal('3.10')

    def test_day_buckets_zero_filled_and_ordered(self, march_expenses):
        """Days without expenses are present with zero amounts."""
        buckets = group_by_day_of_month(march_expenses, 2024, 3)

        assert [bucket.key for bucket in buckets] == list(range(1, 32))
        assert buckets[1].amount == Decimal('0')
        assert buckets[1].label == '2'

    def test_february_leap_year(self):
        """February 2024 has 29 day buckets, February 2023 has 28."""
        assert len(group_by_day_of_month([], 2024, 2)) == 29
        assert len(group_by_day_of_month([], 2023, 2)) == 28

    def test_day_buckets_ignore_other_months(self):
        expenses = [make_expense('e1', '10', date(2024, 4, 1))]

        buckets = group_by_day_of_month(expenses, 2024, 3)

        assert all(bucket.amount == 0 for bucket in buckets)

    def test_month_buckets(self):
        """Yearly report buckets run January to December."""
        expenses = [
            make_expense('e1', '10', date(2024, 1, 5)),
            make_expense('e2', '20', date(2024, 1, 20)),
            make_expense('e3', '5', date(2024, 12, 31)),
            make_expense('e4', '99', date(2023, 12, 31)),
        ]

        buckets = group_by_month_of_year(expenses, 2024)

        assert len(buckets) == 12
        assert buckets[0].label == 'January'
        assert buckets[11].label == 'December'
        assert buckets[0].amount == Decimal('30')
        assert buckets[11].amount == Decimal('5')
        assert sum(bucket.amount for bucket in buckets) == Decimal('35')

    def test_category_buckets_first_seen_order(self, march_expenses):
        """Only present categories get a bucket, in first-seen order."""
        buckets = group_by_category(march_expenses)

        assert [bucket.key for bucket in buckets] == [
            'food', 'transportation', 'housing', 'uncategorized'
        ]
        assert buckets[3].label == 'Uncategorized'
        assert 'Food & Dining' in buckets[0].label

    def test_unknown_category_grouped_with_uncategorized(self):
        expenses = [
            make_expense('e1', '1', date(2024, 3, 1), category=None),
            make_expense('e2', '2', date(2024, 3, 1), category='retired-category'),
        ]

        buckets = group_by_category(expenses)

        assert len(buckets) == 1
        assert buckets[0].key == 'uncategorized'
        assert buckets[0].amount == Decimal('3')

    def test_aggregate_dispatches_on_report_type(self, march_expenses):
        assert len(aggregate(march_expenses, ReportScope(report_type=ReportType.MONTHLY, year=2024, month=3))) == 31
        assert len(aggregate(march_expenses, ReportScope(report_type=ReportType.YEARLY, year=2024))) == 12
        assert len(aggregate(march_expenses, ReportScope(report_type=ReportType.CATEGORY))) == 4


class TestSummary:
    """Test cases for summary statistics."""

    def test_empty_summary(self):
        """An empty subset reports zeros and no extremes."""
        summary = summarize([])

        assert summary == ReportSummary()
        assert summary.total == 0
        assert summary.average == 0
        assert summary.count == 0
        assert summary.highest is None
        assert summary.lowest is None
        assert summary.highest_title == 'N/A'

    def test_category_report_example(self):
        """Food 100 + 50 and transportation 200 give total 350, average 116.67."""
        expenses = [
            make_expense('e1', '100', date(2024, 3, 1), category='food', title='Groceries'),
            make_expense('e2', '50', date(2024, 3, 2), category='food', title='Lunch'),
            make_expense('e3', '200', date(2024, 3, 3), category='transportation', title='Train'),
        ]

        context = build_report_context(expenses, ReportScope(report_type=ReportType.CATEGORY))

        assert [(bucket.key, bucket.amount) for bucket in context.buckets] == [
            ('food', Decimal('150')),
            ('transportation', Decimal('200')),
        ]
        assert context.summary.total == Decimal('350')
        assert context.summary.count == 3
        assert format_amount(context.summary.average) == '116.67'
        assert context.summary.highest_title == 'Train'
        assert context.summary.lowest_title == 'Lunch'

    def test_ties_report_first_expense(self):
        """Among equal extremes the first one in subset order wins."""
        expenses = [
            make_expense('first', '40', date(2024, 3, 5)),
            make_expense('second', '40', date(2024, 3, 4)),
            make_expense('low-a', '5', date(2024, 3, 3)),
            make_expense('low-b', '5', date(2024, 3, 2)),
        ]

        summary = summarize(expenses)

        assert summary.highest.expense_id == 'first'
        assert summary.lowest.expense_id == 'low-a'

    def test_context_only_counts_scoped_expenses(self):
        """A monthly report ignores expenses outside its month."""
        expenses = [
            make_expense('e1', '10', date(2024, 3, 10)),
            make_expense('e2', '20', date(2024, 4, 10)),
        ]

        context = build_report_context(expenses, ReportScope(report_type=ReportType.MONTHLY, year=2024, month=3))

        assert context.summary.count == 1
        assert context.summary.total == Decimal('10')
        assert sum(bucket.amount for bucket in context.buckets) == context.summary.total


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
