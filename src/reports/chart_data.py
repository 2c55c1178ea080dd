"""Reshape aggregation buckets into chart-ready series."""

from typing import List, Sequence
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from reports.models import Bucket, ChartData, ChartDataset, ReportContext, ReportType

DATASET_LABELS = {
    ReportType.MONTHLY: 'Daily Expenses',
    ReportType.YEARLY: 'Monthly Expenses',
    ReportType.CATEGORY: 'Expenses by Category',
}

DASHBOARD_RANGES = ('week', 'month', 'year')


def to_chart_data(buckets: Sequence[Bucket], dataset_label: str) -> ChartData:
    """Map buckets to {labels, datasets} keeping the bucket order."""
    return ChartData(
        labels=[bucket.label for bucket in buckets],
        datasets=[
            ChartDataset(
                label=dataset_label,
                values=[float(bucket.amount) for bucket in buckets]
            )
        ]
    )


def chart_data_for_context(context: ReportContext) -> ChartData:
    """Chart series for a report context."""
    return to_chart_data(context.buckets, DATASET_LABELS[context.report_type])


def top_categories(buckets: Sequence[Bucket], limit: int = 5) -> List[Bucket]:
    """Largest category buckets first; ties keep their original order."""
    return sorted(buckets, key=lambda bucket: bucket.amount, reverse=True)[:limit]


def dashboard_window_start(today: date, time_range: str = 'month') -> date:
    """
    First day included in a dashboard time range.

    'week' looks back seven days, 'month' one calendar month and 'year' one
    calendar year; anything else falls back to 'month'.
    """
    if time_range == 'week':
        return today - timedelta(days=7)
    if time_range == 'year':
        return today - relativedelta(years=1)
    return today - relativedelta(months=1)
