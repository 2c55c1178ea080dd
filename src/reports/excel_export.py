"""Spreadsheet (xlsx) report export."""

from io import BytesIO
from typing import Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from expenses.models import Expense
from shared.categories import category_name
from reports.formatting import PERIOD_LABELS, report_title
from reports.models import ExportOptions, ReportContext

CURRENCY_FORMAT = '$#,##0.00'
DATE_FORMAT = 'yyyy-mm-dd'
HEADER_FONT = Font(bold=True, color='FFFFFF')
HEADER_FILL = PatternFill(start_color='4F81BD', end_color='4F81BD', fill_type='solid')
TITLE_FONT = Font(bold=True, size=14, color='000000')
CENTER = Alignment(horizontal='center')

SUMMARY_SHEET = 'Summary'
EXPENSES_SHEET = 'Expenses'
PLACEHOLDER_SHEET = 'Report'
NO_CONTENT_MESSAGE = 'No content selected for export'

SUMMARY_WIDTHS = [25, 15, 40]
EXPENSE_WIDTHS = [15, 25, 20, 15, 40, 15]
EXPENSE_HEADERS = ['Date', 'Title', 'Category', 'Amount', 'Notes', 'Recurring']


def _cell_text(value) -> str:
    """Drop control characters that worksheets cannot hold."""
    return ILLEGAL_CHARACTERS_RE.sub('', value or '')


def _set_column_widths(worksheet: Worksheet, widths) -> None:
    for index, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width


def _style_header_row(worksheet: Worksheet, row: int, columns: int) -> None:
    for column in range(1, columns + 1):
        cell = worksheet.cell(row=row, column=column)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER


def _write_summary_sheet(workbook: Workbook, context: ReportContext) -> None:
    worksheet = workbook.create_sheet(SUMMARY_SHEET)
    summary = context.summary

    worksheet.append([report_title(context.scope)])
    worksheet.merge_cells('A1:C1')
    worksheet['A1'].font = TITLE_FONT
    worksheet['A1'].alignment = CENTER

    worksheet.append([])
    worksheet.append(['Total Expenses', summary.total])
    worksheet.append(['Average Expense', summary.average])
    worksheet.append(['Number of Expenses', summary.count])
    worksheet.append(['Highest Expense', summary.highest_amount, _cell_text(summary.highest_title)])
    worksheet.append(['Lowest Expense', summary.lowest_amount, _cell_text(summary.lowest_title)])
    worksheet.append([])

    for row in (3, 4, 6, 7):
        worksheet.cell(row=row, column=2).number_format = CURRENCY_FORMAT

    worksheet.append([PERIOD_LABELS[context.report_type], 'Amount'])
    _style_header_row(worksheet, worksheet.max_row, 2)

    for bucket in context.buckets:
        worksheet.append([_cell_text(bucket.label), bucket.amount])
        worksheet.cell(row=worksheet.max_row, column=2).number_format = CURRENCY_FORMAT

    _set_column_widths(worksheet, SUMMARY_WIDTHS)


def _write_expenses_sheet(workbook: Workbook, expenses: Sequence[Expense]) -> None:
    worksheet = workbook.create_sheet(EXPENSES_SHEET)

    worksheet.append(EXPENSE_HEADERS)
    _style_header_row(worksheet, 1, len(EXPENSE_HEADERS))

    for expense in expenses:
        worksheet.append([
            expense.date,
            _cell_text(expense.title),
            category_name(expense.category),
            expense.amount,
            _cell_text(expense.notes),
            'Yes' if expense.is_recurring else 'No',
        ])
        row = worksheet.max_row
        worksheet.cell(row=row, column=1).number_format = DATE_FORMAT
        worksheet.cell(row=row, column=4).number_format = CURRENCY_FORMAT

    _set_column_widths(worksheet, EXPENSE_WIDTHS)


def _write_placeholder_sheet(workbook: Workbook) -> None:
    worksheet = workbook.create_sheet(PLACEHOLDER_SHEET)
    worksheet['A1'] = NO_CONTENT_MESSAGE
    worksheet['A1'].font = Font(italic=True, color='646464')
    _set_column_widths(worksheet, [40])


def export_excel(expenses: Sequence[Expense], context: ReportContext, options: ExportOptions) -> bytes:
    """
    Render the workbook.

    Contains a "Summary" sheet and/or an "Expenses" sheet depending on the
    options. A workbook needs at least one sheet, so when both are disabled
    a "Report" sheet with a short notice is written instead.

    Returns:
        xlsx file content
    """
    workbook = Workbook()
    workbook.remove(workbook.active)

    if options.include_summary:
        _write_summary_sheet(workbook, context)

    if options.include_details:
        _write_expenses_sheet(workbook, expenses)

    if not workbook.worksheets:
        _write_placeholder_sheet(workbook)

    output = BytesIO()
    workbook.save(output)
    return output.getvalue()
