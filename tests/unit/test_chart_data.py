"""Unit tests for chart series and chart rendering."""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from expenses.models import Expense
from reports.aggregation import build_report_context
from reports.chart_data import chart_data_for_context, dashboard_window_start, to_chart_data, top_categories
from reports.chart_renderer import render_chart_to_image
from reports.models import Bucket, ChartData, ReportScope, ReportType
from shared.categories import category_label, category_name, plain_label

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


class TestChartData:
    """Test cases for chart series."""

    def test_labels_align_with_values(self):
        buckets = [
            Bucket(key='food', label='Food', amount=Decimal('12.5')),
            Bucket(key='travel', label='Travel', amount=Decimal('0')),
        ]

        chart = to_chart_data(buckets, 'Expenses by Category')

        assert chart.labels == ['Food', 'Travel']
        assert chart.datasets[0].label == 'Expenses by Category'
        assert chart.datasets[0].values == [12.5, 0.0]

    def test_dataset_label_per_report_type(self):
        expense = Expense(expense_id='e1', title='Tea', amount=Decimal('3'), category='food', date=date(2024, 7, 4))

        monthly = build_report_context([expense], ReportScope(report_type=ReportType.MONTHLY, year=2024, month=7))
        yearly = build_report_context([expense], ReportScope(report_type=ReportType.YEARLY, year=2024))

        assert chart_data_for_context(monthly).datasets[0].label == 'Daily Expenses'
        assert len(chart_data_for_context(monthly).labels) == 31
        assert chart_data_for_context(yearly).datasets[0].label == 'Monthly Expenses'
        assert chart_data_for_context(yearly).labels[6] == 'July'

    def test_top_categories(self):
        buckets = [
            Bucket(key=str(index), label=str(index), amount=Decimal(amount))
            for index, amount in enumerate(['5', '50', '20', '50', '1', '30', '7'])
        ]

        top = top_categories(buckets)

        assert [bucket.key for bucket in top] == ['1', '3', '5', '2', '6']

    def test_dashboard_window(self):
        today = date(2024, 3, 31)

        assert dashboard_window_start(today, 'week') == date(2024, 3, 24)
        assert dashboard_window_start(today, 'month') == date(2024, 2, 29)
        assert dashboard_window_start(today, 'year') == date(2023, 3, 31)
        assert dashboard_window_start(today, 'decade') == date(2024, 2, 29)


class TestChartRenderer:
    """Test cases for render_chart_to_image."""

    def test_renders_png(self):
        chart = to_chart_data(
            [Bucket(key=1, label='1', amount=Decimal('10')), Bucket(key=2, label='2', amount=Decimal('25'))],
            'Daily Expenses'
        )

        image = render_chart_to_image(chart, {'title': 'March'})

        assert image.startswith(PNG_SIGNATURE)

    def test_renders_empty_chart(self):
        image = render_chart_to_image(ChartData(labels=[], datasets=[]))

        assert image.startswith(PNG_SIGNATURE)

    def test_tick_labels_drop_category_icons(self):
        chart = to_chart_data(
            [
                Bucket(key='food', label=category_label('food'), amount=Decimal('40')),
                Bucket(key='uncategorized', label=category_label(None), amount=Decimal('5')),
            ],
            'Expenses by Category'
        )

        with patch('matplotlib.axes.Axes.set_xticklabels') as set_labels:
            render_chart_to_image(chart)

        assert set_labels.call_args[0][0] == ['Food & Dining', 'Uncategorized']


class TestPlainLabel:
    """Test cases for plain_label."""

    def test_strips_icon(self):
        assert plain_label(category_label('transportation')) == category_name('transportation')

    def test_other_labels_unchanged(self):
        assert plain_label('Mar 2024') == 'Mar 2024'
        assert plain_label('12') == '12'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
