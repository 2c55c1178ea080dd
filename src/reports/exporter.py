"""Report export pipeline shared by the CSV, spreadsheet and PDF writers."""

from typing import Any, Callable, Dict, Optional, Sequence, Union
from datetime import date
import logging

from expenses.models import Expense
from shared.exceptions import ExpenseTrackerException, ExportError
from shared.validators import validate_export_format
from reports.chart_data import chart_data_for_context
from reports.csv_export import export_csv
from reports.excel_export import export_excel
from reports.filters import scope_expenses, select_for_export
from reports.formatting import build_filename
from reports.models import ChartData, ExportFormat, ExportOptions, ExportResult, ReportContext
from reports.pdf_export import export_pdf

logger = logging.getLogger(__name__)

ChartRenderer = Callable[[ChartData, Optional[Dict[str, Any]]], bytes]


def export_report(
    export_format: Union[ExportFormat, str],
    expenses: Sequence[Expense],
    context: ReportContext,
    options: Optional[ExportOptions] = None,
    chart_renderer: Optional[ChartRenderer] = None,
    generated_on: Optional[date] = None
) -> ExportResult:
    """
    Produce a downloadable report document.

    Every call works only from its arguments: the detail rows are re-derived
    from ``expenses`` (restricted to the report scope, the export date bounds
    and the item cap) while the summary and breakdown come from ``context``,
    so a capped export can list fewer rows than the summary counts.

    Args:
        export_format: csv, excel or pdf
        expenses: Filtered expenses for the report
        context: Report scope with its buckets and summary
        options: Export options (defaults include every section)
        chart_renderer: Callable turning chart data into PNG bytes, used for PDF
        generated_on: Date printed in the PDF footer (defaults to today)

    Returns:
        Document content, filename with extension and content type

    Raises:
        ValidationError: If the format is unknown
        ExportError: If the document could not be generated
    """
    export_format = ExportFormat(validate_export_format(
        export_format.value if isinstance(export_format, ExportFormat) else export_format
    ))
    options = options or ExportOptions()

    selected = select_for_export(scope_expenses(expenses, context.scope), options)
    filename = build_filename(context.scope) + export_format.extension

    try:
        if export_format == ExportFormat.CSV:
            content = export_csv(selected, context, options)
        elif export_format == ExportFormat.EXCEL:
            content = export_excel(selected, context, options)
        else:
            chart_image = snapshot_chart(context, options, chart_renderer)
            content = export_pdf(selected, context, options, chart_image, generated_on)
    except ExpenseTrackerException:
        raise
    except Exception as e:
        logger.error(f"Failed to generate {export_format.value} export: {str(e)}", exc_info=True)
        raise ExportError(f"Failed to export {export_format.value} report") from e

    logger.info(f"Exported {filename} with {len(selected)} expense rows")

    return ExportResult(
        content=content,
        filename=filename,
        content_type=export_format.content_type
    )


def snapshot_chart(
    context: ReportContext,
    options: ExportOptions,
    chart_renderer: Optional[ChartRenderer]
) -> Optional[bytes]:
    """
    Render the report chart for embedding, or None when it cannot be had.

    A missing renderer or a renderer failure only drops the chart from the
    document; the rest of the export carries on.
    """
    if not options.include_chart:
        return None

    if chart_renderer is None:
        logger.warning("Chart requested but no chart renderer is available; omitting chart")
        return None

    try:
        return chart_renderer(chart_data_for_context(context), None)
    except Exception as e:
        logger.warning(f"Chart rendering failed, omitting chart: {str(e)}")
        return None
