"""Report generation: load expenses, aggregate them and export documents."""

from typing import Any, Dict, List, Optional
from datetime import date
import logging
import threading

from expenses.models import Expense
from expenses.service import ExpenseService
from shared.exceptions import ConflictError, DatabaseError, ValidationError
from shared.validators import validate_export_format
from reports.aggregation import build_report_context, group_by_category, summarize
from reports.chart_data import DASHBOARD_RANGES, chart_data_for_context, dashboard_window_start, top_categories
from reports.chart_renderer import render_chart_to_image
from reports.exporter import ChartRenderer, export_report
from reports.filters import apply_filters
from reports.formatting import build_filename, report_title
from reports.models import ExportOptions, ExportResult, FilterSet, ReportScope
from reports.preferences import PreferenceStore

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Service for building expense reports and exporting them."""

    def __init__(self, chart_renderer: Optional[ChartRenderer] = render_chart_to_image):
        """Initialize report generator."""
        self.expense_service = ExpenseService()
        self.preferences = PreferenceStore()
        self.chart_renderer = chart_renderer
        self._exports_in_flight = set()
        self._in_flight_lock = threading.Lock()

    def load_expenses(self, user_id: str, filter_set: Optional[FilterSet] = None) -> List[Expense]:
        """
        Fetch a user's expenses with the filter set applied.

        Date range and category are pushed down to the store query; the
        remaining predicates (amounts, search text) run in memory.

        Raises:
            DatabaseError: If the store cannot be read
        """
        filter_set = filter_set or FilterSet()

        try:
            expenses = self.expense_service.fetch_expenses(
                user_id=user_id,
                category=filter_set.category,
                start_date=filter_set.start_date.isoformat() if filter_set.start_date else None,
                end_date=filter_set.end_date.isoformat() if filter_set.end_date else None
            )
        except DatabaseError as e:
            logger.error(f"Failed to load expenses for user {user_id}: {e.message}")
            raise DatabaseError("Failed to load expenses")

        return apply_filters(expenses, filter_set)

    def build_report(
        self,
        user_id: str,
        scope: ReportScope,
        filter_set: Optional[FilterSet] = None
    ) -> Dict[str, Any]:
        """
        Build the report view for a scope.

        Returns:
            Report title, buckets, summary, chart series and the default
            export filename and format
        """
        expenses = self.load_expenses(user_id, filter_set)
        context = build_report_context(expenses, scope)

        return {
            'title': report_title(scope),
            'scope': scope,
            'buckets': context.buckets,
            'summary': context.summary,
            'chart': chart_data_for_context(context),
            'filename': build_filename(scope),
            'preferred_export_format': self.preferences.get_export_format(user_id)
        }

    def build_dashboard(
        self,
        user_id: str,
        time_range: str = 'month',
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Build the dashboard overview for a look-back window ending today.

        Args:
            user_id: User ID
            time_range: week, month or year
            today: Last day of the window (defaults to today)

        Returns:
            Window bounds, summary, top five categories and recent expenses

        Raises:
            ValidationError: If the time range is unknown
        """
        if time_range not in DASHBOARD_RANGES:
            raise ValidationError(
                f"Invalid time range. Must be one of: {', '.join(DASHBOARD_RANGES)}"
            )

        today = today or date.today()
        start = dashboard_window_start(today, time_range)
        expenses = self.load_expenses(user_id, FilterSet(start_date=start, end_date=today))

        return {
            'time_range': time_range,
            'start_date': start,
            'end_date': today,
            'summary': summarize(expenses),
            'top_categories': top_categories(group_by_category(expenses)),
            'recent_expenses': expenses[:5]
        }

    def export(
        self,
        user_id: str,
        export_format: str,
        scope: ReportScope,
        filter_set: Optional[FilterSet] = None,
        options: Optional[ExportOptions] = None,
        generated_on: Optional[date] = None
    ) -> ExportResult:
        """
        Export a report document for a user.

        Only one export per user runs at a time; a second request while the
        first is still being generated is rejected. The in-flight marker is
        cleared whether the export succeeds or fails.

        Raises:
            ValidationError: If the format is unknown
            ConflictError: If an export for this user is already running
            DatabaseError: If the expenses cannot be loaded
            ExportError: If the document cannot be generated
        """
        export_format = validate_export_format(export_format)

        with self._in_flight_lock:
            if user_id in self._exports_in_flight:
                raise ConflictError("An export is already in progress")
            self._exports_in_flight.add(user_id)

        try:
            expenses = self.load_expenses(user_id, filter_set)
            context = build_report_context(expenses, scope)
            result = export_report(
                export_format,
                expenses,
                context,
                options=options,
                chart_renderer=self.chart_renderer,
                generated_on=generated_on
            )
        finally:
            self._exports_in_flight.discard(user_id)

        self._remember_format(user_id, export_format)
        return result

    def is_exporting(self, user_id: str) -> bool:
        return user_id in self._exports_in_flight

    def _remember_format(self, user_id: str, export_format: str) -> None:
        """Store the format as the user's default when it changed."""
        try:
            if self.preferences.get_export_format(user_id) != export_format:
                self.preferences.set_export_format(user_id, export_format)
        except DatabaseError as e:
            # Preference write failures never fail the export
            logger.warning(f"Could not save export preference for user {user_id}: {e.message}")
