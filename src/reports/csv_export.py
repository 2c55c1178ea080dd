"""Delimited-text (CSV) report export."""

import csv
from io import StringIO
from typing import List, Sequence

from expenses.models import Expense
from shared.categories import category_name
from reports.formatting import PERIOD_LABELS, format_amount, report_title
from reports.models import ExportOptions, ReportContext

DETAIL_COLUMNS = ['Date', 'Title', 'Category', 'Amount', 'Notes', 'Recurring']
DETAILS_MARKER = 'DETAILED EXPENSES'
NO_CONTENT_MESSAGE = 'No content selected for export'


def summary_rows(context: ReportContext) -> List[List[str]]:
    """Rows of the summary block: title, statistics and the bucket breakdown."""
    summary = context.summary

    rows = [
        [report_title(context.scope)],
        [],
        ['Total Expenses', format_amount(summary.total)],
        ['Average Expense', format_amount(summary.average)],
        ['Number of Expenses', str(summary.count)],
        ['Highest Expense', format_amount(summary.highest_amount), summary.highest_title],
        ['Lowest Expense', format_amount(summary.lowest_amount), summary.lowest_title],
        [],
        [PERIOD_LABELS[context.report_type], 'Amount'],
    ]
    rows.extend([bucket.label, format_amount(bucket.amount)] for bucket in context.buckets)
    return rows


def detail_rows(expenses: Sequence[Expense]) -> List[List[str]]:
    """Header plus one row per expense."""
    rows = [list(DETAIL_COLUMNS)]
    for expense in expenses:
        rows.append([
            expense.date.isoformat(),
            expense.title,
            category_name(expense.category),
            format_amount(expense.amount),
            expense.notes or '',
            'Yes' if expense.is_recurring else 'No',
        ])
    return rows


def export_csv(expenses: Sequence[Expense], context: ReportContext, options: ExportOptions) -> bytes:
    """
    Render the CSV document.

    Fields containing a comma, quote or line break are quoted with inner
    quotes doubled, so every value reads back unchanged.

    Args:
        expenses: Detail rows, already selected for export
        context: Report scope, buckets and summary
        options: Export options

    Returns:
        UTF-8 encoded CSV content
    """
    output = StringIO()
    writer = csv.writer(output, lineterminator='\n')

    if options.include_summary:
        writer.writerows(summary_rows(context))

    if options.include_summary and options.include_details:
        writer.writerow([])
        writer.writerow([DETAILS_MARKER])
        writer.writerow([])

    if options.include_details:
        writer.writerows(detail_rows(expenses))

    # Charts have no CSV form, so a chart-only export gets the placeholder too
    if not (options.include_summary or options.include_details):
        writer.writerow([NO_CONTENT_MESSAGE])

    csv_content = output.getvalue()
    output.close()

    return csv_content.encode('utf-8')
