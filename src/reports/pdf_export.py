"""Paginated document (PDF) report export."""

from io import BytesIO
from typing import Optional, Sequence
from datetime import date
import logging

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from expenses.models import Expense
from shared.categories import category_name
from reports.formatting import document_title, format_currency, report_title, truncate_text
from reports.models import ExportOptions, ReportContext

logger = logging.getLogger(__name__)

# Layout is expressed in millimetres from the top-left corner of the page
PAGE_WIDTH = 210   # A4
PAGE_HEIGHT = 297
MARGIN_X = 10
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN_X
CONTENT_TOP = 30
CONTENT_BOTTOM = PAGE_HEIGHT - 20

HEADING_HEIGHT = 10
LINE_HEIGHT = 8
ROW_HEIGHT = 8
SECTION_GAP = 10
CHART_GAP = 15

TABLE_COLUMNS = ['Date', 'Title', 'Category', 'Amount']
TABLE_WIDTHS = [30, 70, 50, 40]
TITLE_MAX_LENGTH = 25
CATEGORY_MAX_LENGTH = 15

HEADER_FILL = (220, 220, 220)
STRIPE_FILL = (245, 245, 245)
RULE_COLOR = (200, 200, 200)
MUTED_TEXT = (100, 100, 100)

NO_CONTENT_MESSAGE = 'No content selected for export'


def _rgb(color):
    return tuple(channel / 255 for channel in color)


class PdfReportWriter:
    """
    Flows report blocks down A4 pages.

    Every block asks for its height before it is drawn; when the block would
    cross the bottom content limit a new page is started, with the header and
    footer drawn again. Page breaks depend only on the running vertical
    offset, never on what kind of block is being placed.
    """

    def __init__(self, title: str, generated_on: date):
        self.title = title
        self.generated_on = generated_on
        self.buffer = BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4, invariant=1)
        self.canvas.setTitle(title)
        self.page_count = 0
        self.y = CONTENT_TOP
        self.blocks_drawn = 0
        self.start_page()

    # -- page furniture -------------------------------------------------

    def start_page(self) -> None:
        if self.page_count:
            self.canvas.showPage()
        self.page_count += 1
        self.y = CONTENT_TOP
        self._draw_header()
        self._draw_footer()

    def _draw_header(self) -> None:
        self.text(self.title, PAGE_WIDTH / 2, 15, size=16, align='center')
        self.canvas.setStrokeColorRGB(*_rgb(RULE_COLOR))
        self.canvas.line(
            MARGIN_X * mm, self._pdf_y(20),
            (PAGE_WIDTH - MARGIN_X) * mm, self._pdf_y(20)
        )

    def _draw_footer(self) -> None:
        footer_y = PAGE_HEIGHT - 10
        self.text(
            f"Generated on {self.generated_on.isoformat()}",
            MARGIN_X, footer_y, size=10, color=MUTED_TEXT
        )
        self.text(
            f"Page {self.page_count}",
            PAGE_WIDTH - MARGIN_X, footer_y, size=10, color=MUTED_TEXT, align='right'
        )

    # -- primitives -----------------------------------------------------

    @staticmethod
    def _pdf_y(y: float) -> float:
        return (PAGE_HEIGHT - y) * mm

    def text(
        self,
        value: str,
        x: float,
        y: float,
        size: int = 11,
        bold: bool = False,
        color=(0, 0, 0),
        align: str = 'left'
    ) -> None:
        self.canvas.setFont('Helvetica-Bold' if bold else 'Helvetica', size)
        self.canvas.setFillColorRGB(*_rgb(color))
        if align == 'center':
            self.canvas.drawCentredString(x * mm, self._pdf_y(y), value)
        elif align == 'right':
            self.canvas.drawRightString(x * mm, self._pdf_y(y), value)
        else:
            self.canvas.drawString(x * mm, self._pdf_y(y), value)

    def fill_rect(self, x: float, y: float, width: float, height: float, color) -> None:
        self.canvas.setFillColorRGB(*_rgb(color))
        self.canvas.rect(x * mm, self._pdf_y(y + height), width * mm, height * mm, stroke=0, fill=1)

    def ensure_space(self, height: float) -> bool:
        """Start a new page when ``height`` does not fit; returns True if it did."""
        if self.y + height > CONTENT_BOTTOM:
            self.start_page()
            return True
        return False

    # -- blocks ---------------------------------------------------------

    def heading(self, value: str) -> None:
        self.text(value, MARGIN_X, self.y + 7, size=14)
        self.y += HEADING_HEIGHT

    def summary_section(self, context: ReportContext) -> None:
        summary = context.summary
        lines = [
            f"Total Expenses: {format_currency(summary.total)}",
            f"Average Expense: {format_currency(summary.average)}",
            f"Number of Expenses: {summary.count}",
            f"Highest Expense: {format_currency(summary.highest_amount)} ({summary.highest_title})",
            f"Lowest Expense: {format_currency(summary.lowest_amount)} ({summary.lowest_title})",
        ]

        # Keep the heading together with the first line
        self.ensure_space(HEADING_HEIGHT + LINE_HEIGHT)
        self.heading('Report Summary')

        for line in lines:
            self.ensure_space(LINE_HEIGHT)
            self.text(line, MARGIN_X, self.y + 6, size=11)
            self.y += LINE_HEIGHT

        self.y += SECTION_GAP
        self.blocks_drawn += 1

    def chart_section(self, heading: str, image_bytes: bytes) -> bool:
        """Place the chart snapshot scaled to the content width; False if unreadable."""
        try:
            image = ImageReader(BytesIO(image_bytes))
            pixel_width, pixel_height = image.getSize()
        except Exception as e:
            logger.warning(f"Skipping chart, image could not be read: {e}")
            return False

        if not pixel_width or not pixel_height:
            logger.warning("Skipping chart, image has no size")
            return False

        width = CONTENT_WIDTH
        height = width * pixel_height / pixel_width

        # A chart taller than a whole page is shrunk to fit one
        max_height = CONTENT_BOTTOM - CONTENT_TOP - HEADING_HEIGHT
        if height > max_height:
            width = width * max_height / height
            height = max_height

        self.ensure_space(HEADING_HEIGHT + height)
        self.heading(heading)
        self.canvas.drawImage(
            image,
            MARGIN_X * mm,
            self._pdf_y(self.y + height),
            width=width * mm,
            height=height * mm
        )
        self.y += height + CHART_GAP
        self.blocks_drawn += 1
        return True

    def _table_header(self) -> None:
        x = MARGIN_X
        for column, width in zip(TABLE_COLUMNS, TABLE_WIDTHS):
            self.fill_rect(x, self.y, width, ROW_HEIGHT, HEADER_FILL)
            self.text(column, x + 2, self.y + 6, size=10, bold=True)
            x += width
        self.y += ROW_HEIGHT

    def _table_row(self, index: int, expense: Expense) -> None:
        if index % 2 == 0:
            self.fill_rect(MARGIN_X, self.y, CONTENT_WIDTH, ROW_HEIGHT, STRIPE_FILL)

        x = MARGIN_X
        self.text(expense.date.isoformat(), x + 2, self.y + 6, size=10)
        x += TABLE_WIDTHS[0]
        self.text(truncate_text(expense.title, TITLE_MAX_LENGTH), x + 2, self.y + 6, size=10)
        x += TABLE_WIDTHS[1]
        self.text(
            truncate_text(category_name(expense.category), CATEGORY_MAX_LENGTH),
            x + 2, self.y + 6, size=10
        )
        x += TABLE_WIDTHS[2]
        self.text(
            format_currency(expense.amount),
            x + TABLE_WIDTHS[3] - 2, self.y + 6, size=10, align='right'
        )
        self.y += ROW_HEIGHT

    def details_section(self, expenses: Sequence[Expense]) -> None:
        first_row = ROW_HEIGHT if expenses else 0
        self.ensure_space(HEADING_HEIGHT + ROW_HEIGHT + first_row)
        self.heading('Detailed Expenses')
        self._table_header()

        for index, expense in enumerate(expenses):
            if self.ensure_space(ROW_HEIGHT):
                self._table_header()
            self._table_row(index, expense)

        self.blocks_drawn += 1

    def placeholder(self) -> None:
        self.text(
            NO_CONTENT_MESSAGE, PAGE_WIDTH / 2, PAGE_HEIGHT / 2,
            size=14, color=MUTED_TEXT, align='center'
        )

    def finish(self) -> bytes:
        self.canvas.save()
        return self.buffer.getvalue()


def export_pdf(
    expenses: Sequence[Expense],
    context: ReportContext,
    options: ExportOptions,
    chart_image: Optional[bytes] = None,
    generated_on: Optional[date] = None
) -> bytes:
    """
    Render the paginated report document.

    Sections appear in a fixed order (summary, chart, detail table), each
    only when enabled. A requested chart without an image is left out. When
    nothing ends up on the page a centred notice is drawn instead.

    Returns:
        PDF file content
    """
    writer = build_pdf(expenses, context, options, chart_image, generated_on)
    return writer.finish()


def build_pdf(
    expenses: Sequence[Expense],
    context: ReportContext,
    options: ExportOptions,
    chart_image: Optional[bytes] = None,
    generated_on: Optional[date] = None
) -> PdfReportWriter:
    """Lay out every page and return the writer, before the document is saved."""
    writer = PdfReportWriter(document_title(context.scope), generated_on or date.today())

    if options.include_summary:
        writer.summary_section(context)

    if options.include_chart and chart_image:
        writer.chart_section(report_title(context.scope), chart_image)

    if options.include_details:
        writer.details_section(expenses)

    if not writer.blocks_drawn:
        writer.placeholder()

    return writer
