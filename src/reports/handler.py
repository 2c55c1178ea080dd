"""Lambda handler for report operations."""

import json
import os
import logging
from typing import Dict, Any
import sys

from pydantic import ValidationError as ModelValidationError

# Add parent directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.response import (
    success_response,
    error_response,
    validation_error_response,
    file_response,
    conflict_response
)
from shared.exceptions import ExpenseTrackerException, ValidationError, ConflictError, ExportError
from shared.validators import validate_export_format
from reports.generator import ReportGenerator
from reports.models import ExportOptions, FilterSet, ReportScope

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

# Initialize services
report_generator = ReportGenerator()

FILTER_PARAMS = {
    'start_date': 'start_date',
    'end_date': 'end_date',
    'filter_category': 'category',
    'min_amount': 'min_amount',
    'max_amount': 'max_amount',
    'search': 'search_term',
}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for report operations.

    Handles:
    - GET /reports - Report buckets, summary and chart series
    - POST /reports/export - Download the report as CSV, Excel or PDF
    - GET /reports/preferences - Preferred export format
    - GET /reports/dashboard - Spending overview for the last week, month or year

    Args:
        event: Lambda event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        # Log request
        logger.info(f"Request: {event.get('httpMethod')} {event.get('path')}")

        # Get user ID from Cognito authorizer
        user_id = get_user_id(event)
        if not user_id:
            return error_response("Unauthorized", status_code=401)

        # Get HTTP method and path
        http_method = event.get('httpMethod')
        path = event.get('path')

        # Route request
        if path == '/reports' and http_method == 'GET':
            return handle_report(event, user_id)
        elif path == '/reports/export' and http_method == 'POST':
            return handle_export(event, user_id)
        elif path == '/reports/preferences' and http_method == 'GET':
            return handle_preferences(event, user_id)
        elif path == '/reports/dashboard' and http_method == 'GET':
            return handle_dashboard(event, user_id)
        else:
            return error_response("Route not found", status_code=404)

    except ExpenseTrackerException as e:
        logger.error(f"Application error: {str(e)}")
        return error_response(e.message, status_code=e.status_code)
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


def handle_report(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """
    Handle report view request.

    Query parameters report_type, year, month and category select the
    report; start_date, end_date, filter_category, min_amount, max_amount
    and search narrow the expenses first.
    """
    query_params = event.get('queryStringParameters') or {}

    try:
        scope = parse_scope(query_params)
        filter_set = parse_filters(query_params)
    except ModelValidationError as e:
        return validation_error_response("Invalid report parameters", details={'errors': _errors(e)})

    logger.info(f"Building {scope.report_type.value} report for user {user_id}")

    report = report_generator.build_report(user_id, scope, filter_set)

    return success_response(data=report)


def handle_export(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """
    Handle export request.

    Body:
        format: csv | excel | pdf (defaults to the user's preferred format)
        scope: report_type, year, month, category
        filters: start_date, end_date, category, min_amount, max_amount, search_term
        options: include_summary, include_chart, include_details, max_items,
                 date_from, date_to

    Returns:
        API Gateway response carrying the document as a download
    """
    try:
        body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        return validation_error_response("Invalid JSON body")

    try:
        scope = ReportScope.model_validate(body.get('scope') or {})
        filter_set = FilterSet.model_validate(body.get('filters') or {})
        options = ExportOptions.model_validate(body.get('options') or {})
    except ModelValidationError as e:
        return validation_error_response("Invalid export request", details={'errors': _errors(e)})

    if body.get('format') not in (None, ''):
        try:
            validate_export_format(body['format'])
        except ValidationError as e:
            return validation_error_response(e.message)

    export_format = body.get('format') or report_generator.preferences.get_export_format(user_id)

    try:
        result = report_generator.export(user_id, export_format, scope, filter_set, options)
    except ValidationError as e:
        return validation_error_response(e.message)
    except ConflictError as e:
        return conflict_response(e.message)
    except ExportError as e:
        logger.error(f"Export error for user {user_id}: {e.message}")
        return error_response("Failed to export. Please try again.", status_code=500, error_code="EXPORT_FAILED")

    logger.info(f"Export {result.filename} ready for user {user_id}")

    return file_response(result.content, result.filename, result.content_type)


def handle_preferences(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle preferred export format lookup."""
    export_format = report_generator.preferences.get_export_format(user_id)
    return success_response(data={'export_format': export_format})


def handle_dashboard(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle dashboard overview; the range query parameter defaults to month."""
    query_params = event.get('queryStringParameters') or {}
    time_range = (query_params.get('range') or 'month').lower()

    try:
        dashboard = report_generator.build_dashboard(user_id, time_range)
    except ValidationError as e:
        return validation_error_response(e.message)

    return success_response(data=dashboard)


def parse_scope(query_params: Dict[str, Any]) -> ReportScope:
    """Build a report scope from query parameters, leaving missing ones at their defaults."""
    fields = {
        name: query_params[name]
        for name in ('report_type', 'year', 'month', 'category')
        if query_params.get(name)
    }
    return ReportScope.model_validate(fields)


def parse_filters(query_params: Dict[str, Any]) -> FilterSet:
    """Build a filter set from query parameters."""
    fields = {
        field: query_params[param]
        for param, field in FILTER_PARAMS.items()
        if query_params.get(param)
    }
    return FilterSet.model_validate(fields)


def _errors(error: ModelValidationError):
    return [
        {'field': '.'.join(str(part) for part in item['loc']), 'message': item['msg']}
        for item in error.errors()
    ]


def get_user_id(event: Dict[str, Any]) -> str:
    """
    Extract user ID from Cognito authorizer claims.

    Args:
        event: Lambda event

    Returns:
        User ID (sub claim)
    """
    request_context = event.get('requestContext', {})
    authorizer = request_context.get('authorizer', {})
    claims = authorizer.get('claims', {})
    return claims.get('sub')
