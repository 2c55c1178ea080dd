"""Unit tests for CSV report export."""

import pytest
import csv
import io
from datetime import date
from decimal import Decimal
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from expenses.models import Expense
from reports.aggregation import build_report_context
from reports.csv_export import DETAILS_MARKER, NO_CONTENT_MESSAGE, export_csv
from reports.models import ExportOptions, ReportScope, ReportType


def read_rows(content):
    return list(csv.reader(io.StringIO(content.decode('utf-8'))))


class TestCsvExport:
    """Test cases for export_csv."""

    @pytest.fixture
    def expenses(self):
        return [
            Expense(
                expense_id='e1',
                title='Lunch, "quick"',
                amount=Decimal('12.5'),
                category='food',
                date=date(2024, 3, 2),
                notes='line one\nline two'
            ),
            Expense(
                expense_id='e2',
                title='Bus',
                amount=Decimal('2.80'),
                category=None,
                date=date(2024, 3, 1),
                is_recurring=True,
                recurring_frequency='weekly'
            ),
        ]

    @pytest.fixture
    def context(self, expenses):
        return build_report_context(expenses, ReportScope(report_type=ReportType.MONTHLY, year=2024, month=3))

    def test_special_characters_round_trip(self, expenses, context):
        """Commas, quotes and newlines survive a write/read cycle."""
        content = export_csv(expenses, context, ExportOptions(include_summary=False))

        assert b'"Lunch, ""quick"""' in content

        rows = read_rows(content)
        assert rows[1][1] == 'Lunch, "quick"'
        assert rows[1][4] == 'line one\nline two'

    def test_detail_columns(self, expenses, context):
        rows = read_rows(export_csv(expenses, context, ExportOptions(include_summary=False)))

        assert rows[0] == ['Date', 'Title', 'Category', 'Amount', 'Notes', 'Recurring']
        assert rows[1] == ['2024-03-02', 'Lunch, "quick"', 'Food & Dining', '12.50', 'line one\nline two', 'No']
        assert rows[2] == ['2024-03-01', 'Bus', 'Uncategorized', '2.80', '', 'Yes']

    def test_summary_layout(self, expenses, context):
        rows = read_rows(export_csv(expenses, context, ExportOptions(include_details=False)))

        assert rows[0] == ['Expenses for March 2024']
        assert rows[1] == []
        assert rows[2] == ['Total Expenses', '15.30']
        assert rows[3] == ['Average Expense', '7.65']
        assert rows[4] == ['Number of Expenses', '2']
        assert rows[5] == ['Highest Expense', '12.50', 'Lunch, "quick"']
        assert rows[6] == ['Lowest Expense', '2.80', 'Bus']
        assert rows[7] == []
        assert rows[8] == ['Day', 'Amount']
        assert rows[9] == ['1', '2.80']
        assert rows[10] == ['2', '12.50']
        assert len(rows) == 9 + 31
        assert DETAILS_MARKER not in [row[0] for row in rows if row]

    def test_summary_and_details_separated(self, expenses, context):
        rows = read_rows(export_csv(expenses, context, ExportOptions()))

        marker_index = rows.index([DETAILS_MARKER])
        assert rows[marker_index - 1] == []
        assert rows[marker_index + 1] == []
        assert rows[marker_index + 2][0] == 'Date'
        assert len(rows) == (9 + 31) + 3 + 3

    def test_all_sections_off_writes_placeholder(self, expenses, context):
        options = ExportOptions(include_summary=False, include_chart=False, include_details=False)

        rows = read_rows(export_csv(expenses, context, options))

        assert rows == [[NO_CONTENT_MESSAGE]]

    def test_chart_only_writes_placeholder(self, expenses, context):
        options = ExportOptions(include_summary=False, include_details=False)

        assert read_rows(export_csv(expenses, context, options)) == [[NO_CONTENT_MESSAGE]]

    def test_empty_report(self):
        context = build_report_context([], ReportScope(report_type=ReportType.CATEGORY))

        rows = read_rows(export_csv([], context, ExportOptions()))

        assert rows[2] == ['Total Expenses', '0.00']
        assert rows[5] == ['Highest Expense', '0.00', 'N/A']
        assert rows[8] == ['Category', 'Amount']
        assert rows[-1] == ['Date', 'Title', 'Category', 'Amount', 'Notes', 'Recurring']


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
