"""Report, filter and export data models."""

from enum import Enum
from typing import List, Literal, Optional, Union
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from expenses.models import Expense


class ReportType(str, Enum):
    """Report views; each one fixes how expenses are bucketed."""

    MONTHLY = "monthly"    # one bucket per day of the selected month
    YEARLY = "yearly"      # one bucket per month of the selected year
    CATEGORY = "category"  # one bucket per category present


class ExportFormat(str, Enum):
    """Downloadable document formats."""

    CSV = "csv"
    EXCEL = "excel"
    PDF = "pdf"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self]


_EXTENSIONS = {
    ExportFormat.CSV: '.csv',
    ExportFormat.EXCEL: '.xlsx',
    ExportFormat.PDF: '.pdf',
}

_CONTENT_TYPES = {
    ExportFormat.CSV: 'text/csv; charset=utf-8',
    ExportFormat.EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    ExportFormat.PDF: 'application/pdf',
}


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class FilterSet(BaseModel):
    """User-selected expense filters. A None field places no constraint."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    search_term: Optional[str] = None

    @field_validator('start_date', 'end_date', 'category', 'min_amount', 'max_amount', 'search_term',
                     mode='before')
    @classmethod
    def _empty_means_unset(cls, value):
        return _blank_to_none(value)


class ExportOptions(BaseModel):
    """
    Options chosen in the export dialog.

    Attributes:
        include_summary: Emit the summary block / sheet
        include_chart: Embed the chart snapshot (PDF only)
        include_details: Emit the per-expense table
        max_items: "all" or a positive cap on the detail rows
        date_from: Extra inclusive lower date bound applied at export time
        date_to: Extra inclusive upper date bound applied at export time
    """

    include_summary: bool = True
    include_chart: bool = True
    include_details: bool = True
    max_items: Union[Literal['all'], PositiveInt] = 'all'
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @field_validator('date_from', 'date_to', mode='before')
    @classmethod
    def _empty_date_means_unset(cls, value):
        return _blank_to_none(value)

    @property
    def item_cap(self) -> Optional[int]:
        return None if self.max_items == 'all' else self.max_items

    @property
    def has_content(self) -> bool:
        return self.include_summary or self.include_chart or self.include_details


class ReportScope(BaseModel):
    """Which slice of expenses a report covers."""

    report_type: ReportType = ReportType.MONTHLY
    year: int = Field(default_factory=lambda: date.today().year, ge=1, le=9999)
    month: int = Field(default_factory=lambda: date.today().month, ge=1, le=12)
    category: Optional[str] = None

    @field_validator('category', mode='before')
    @classmethod
    def _all_means_unset(cls, value):
        value = _blank_to_none(value)
        return None if value == 'all' else value


class Bucket(BaseModel):
    """One aggregation slot (a day, a month or a category)."""

    key: Union[int, str]
    label: str
    amount: Decimal = Decimal('0')


class ReportSummary(BaseModel):
    """Summary statistics over an expense subset."""

    total: Decimal = Decimal('0')
    average: Decimal = Decimal('0')
    count: int = 0
    highest: Optional[Expense] = None
    lowest: Optional[Expense] = None

    @property
    def highest_amount(self) -> Decimal:
        return self.highest.amount if self.highest else Decimal('0')

    @property
    def highest_title(self) -> str:
        return self.highest.title if self.highest else 'N/A'

    @property
    def lowest_amount(self) -> Decimal:
        return self.lowest.amount if self.lowest else Decimal('0')

    @property
    def lowest_title(self) -> str:
        return self.lowest.title if self.lowest else 'N/A'


class ReportContext(BaseModel):
    """A report scope together with its aggregation results."""

    scope: ReportScope
    buckets: List[Bucket]
    summary: ReportSummary

    @property
    def report_type(self) -> ReportType:
        return self.scope.report_type


class ChartDataset(BaseModel):
    label: str
    values: List[float]


class ChartData(BaseModel):
    """Chart-ready series: labels aligned index-for-index with each dataset."""

    labels: List[str]
    datasets: List[ChartDataset]


class ExportResult(BaseModel):
    """A finished document ready to hand to the download sink."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    filename: str
    content_type: str
