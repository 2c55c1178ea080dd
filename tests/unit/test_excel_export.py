"""Unit tests for spreadsheet report export."""

import pytest
from io import BytesIO
from datetime import date, datetime
from decimal import Decimal
import sys
import os

from openpyxl import load_workbook

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from expenses.models import Expense
from reports.aggregation import build_report_context
from reports.excel_export import CURRENCY_FORMAT, NO_CONTENT_MESSAGE, export_excel
from reports.models import ExportOptions, ReportScope, ReportType


def open_workbook(content):
    return load_workbook(BytesIO(content))


class TestExcelExport:
    """Test cases for export_excel."""

    @pytest.fixture
    def expenses(self):
        return [
            Expense(
                expense_id='e1',
                title='Flight',
                amount=Decimal('420.00'),
                category='travel',
                date=date(2024, 6, 12),
                notes='Conference'
            ),
            Expense(
                expense_id='e2',
                title='Museum',
                amount=Decimal('18.00'),
                category='entertainment',
                date=date(2024, 2, 3)
            ),
        ]

    @pytest.fixture
    def context(self, expenses):
        return build_report_context(expenses, ReportScope(report_type=ReportType.YEARLY, year=2024))

    def test_sheets_follow_options(self, expenses, context):
        assert open_workbook(export_excel(expenses, context, ExportOptions())).sheetnames == ['Summary', 'Expenses']
        assert open_workbook(
            export_excel(expenses, context, ExportOptions(include_details=False))
        ).sheetnames == ['Summary']
        assert open_workbook(
            export_excel(expenses, context, ExportOptions(include_summary=False))
        ).sheetnames == ['Expenses']

    def test_no_sheets_selected_writes_placeholder(self, expenses, context):
        options = ExportOptions(include_summary=False, include_chart=False, include_details=False)

        workbook = open_workbook(export_excel(expenses, context, options))

        assert workbook.sheetnames == ['Report']
        assert workbook['Report']['A1'].value == NO_CONTENT_MESSAGE

    def test_summary_sheet(self, expenses, context):
        sheet = open_workbook(export_excel(expenses, context, ExportOptions()))['Summary']

        assert sheet['A1'].value == 'Expenses for 2024'
        assert 'A1:C1' in [str(merged) for merged in sheet.merged_cells.ranges]
        assert sheet['A3'].value == 'Total Expenses'
        assert sheet['B3'].value == pytest.approx(438.0)
        assert sheet['B3'].number_format == CURRENCY_FORMAT
        assert sheet['B4'].number_format == CURRENCY_FORMAT
        assert sheet['B5'].value == 2
        assert sheet['C6'].value == 'Flight'
        assert sheet['C7'].value == 'Museum'
        assert sheet['A9'].value == 'Month'
        assert sheet['A9'].font.bold

    def test_summary_breakdown_rows(self, expenses, context):
        sheet = open_workbook(export_excel(expenses, context, ExportOptions()))['Summary']

        labels = [sheet.cell(row=row, column=1).value for row in range(10, 22)]
        assert labels[0] == 'January'
        assert labels[-1] == 'December'
        assert sheet['B11'].value == pytest.approx(18.0)
        assert sheet['B15'].value == pytest.approx(420.0)
        assert sheet['B15'].number_format == CURRENCY_FORMAT

    def test_expenses_sheet(self, expenses, context):
        sheet = open_workbook(export_excel(expenses, context, ExportOptions(include_summary=False)))['Expenses']

        assert [cell.value for cell in sheet[1]] == ['Date', 'Title', 'Category', 'Amount', 'Notes', 'Recurring']
        assert sheet['A2'].value == datetime(2024, 6, 12)
        assert sheet['B2'].value == 'Flight'
        assert sheet['C2'].value == 'Travel'
        assert sheet['D2'].value == pytest.approx(420.0)
        assert sheet['D2'].number_format == CURRENCY_FORMAT
        assert sheet['E2'].value == 'Conference'
        assert sheet['F2'].value == 'No'
        assert sheet.max_row == 3
        assert sheet.column_dimensions['E'].width == 40


    def test_control_characters_are_dropped(self):
        """Titles and notes with control characters still export."""
        odd = [
            Expense(
                expense_id='e9',
                title='Lunch\x01odd',
                amount=Decimal('500.00'),
                category='food',
                date=date(2024, 7, 1),
                notes='bell\x07 note'
            ),
        ]
        odd_context = build_report_context(odd, ReportScope(report_type=ReportType.YEARLY, year=2024))

        workbook = open_workbook(export_excel(odd, odd_context, ExportOptions()))

        assert workbook['Summary']['C6'].value == 'Lunchodd'
        assert workbook['Expenses']['B2'].value == 'Lunchodd'
        assert workbook['Expenses']['E2'].value == 'bell note'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
