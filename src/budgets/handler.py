"""Lambda handler for budget operations."""

import json
import os
import logging
from typing import Dict, Any
import sys

from pydantic import ValidationError as ModelValidationError

# Add parent directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.response import success_response, error_response, validation_error_response, not_found_response
from shared.validators import validate_required_fields
from shared.exceptions import ExpenseTrackerException, ValidationError, NotFoundError
from budgets.service import BudgetService
from expenses.service import ExpenseService
from reports.filters import apply_filters
from reports.models import FilterSet

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

# Initialize services
budget_service = BudgetService()
expense_service = ExpenseService()


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for budget operations.

    Handles:
    - POST /budgets - Create budget
    - GET /budgets - List budgets
    - GET /budgets/status - Budgets with spending against the filtered expenses
    - PUT /budgets/{id} - Update budget
    - DELETE /budgets/{id} - Delete budget

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
        if path == '/budgets' and http_method == 'POST':
            return handle_create(event, user_id)
        elif path == '/budgets' and http_method == 'GET':
            return handle_list(event, user_id)
        elif path == '/budgets/status' and http_method == 'GET':
            return handle_status(event, user_id)
        elif path.startswith('/budgets/') and http_method == 'PUT':
            return handle_update(event, user_id)
        elif path.startswith('/budgets/') and http_method == 'DELETE':
            return handle_delete(event, user_id)
        else:
            return error_response("Route not found", status_code=404)

    except ExpenseTrackerException as e:
        logger.error(f"Application error: {str(e)}")
        return error_response(e.message, status_code=e.status_code)
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


def handle_create(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle create budget."""
    try:
        body = json.loads(event.get('body') or '{}')

        validate_required_fields(body, ['category', 'amount', 'period'])

        budget = budget_service.create_budget(
            user_id=user_id,
            category=body['category'],
            amount=body['amount'],
            period=body['period'],
            notes=body.get('notes')
        )

        logger.info(f"Budget created successfully: {budget['budget_id']}")

        return success_response(
            data=budget,
            message="Budget created successfully",
            status_code=201
        )

    except json.JSONDecodeError:
        return validation_error_response("Invalid JSON body")
    except ValidationError as e:
        return validation_error_response(e.message)


def handle_list(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle list budgets."""
    budgets = budget_service.list_budgets(user_id)

    return success_response(data={
        'budgets': budgets,
        'count': len(budgets)
    })


def handle_status(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """
    Handle budget status.

    Spending is measured over the expenses matching the same filter query
    parameters the expense list accepts (start_date, end_date, category,
    min_amount, max_amount, search).
    """
    query_params = event.get('queryStringParameters') or {}

    try:
        filter_set = FilterSet.model_validate({
            'start_date': query_params.get('start_date'),
            'end_date': query_params.get('end_date'),
            'category': query_params.get('category'),
            'min_amount': query_params.get('min_amount'),
            'max_amount': query_params.get('max_amount'),
            'search_term': query_params.get('search'),
        })
    except ModelValidationError:
        return validation_error_response("Invalid filter parameters")

    expenses = expense_service.fetch_expenses(
        user_id=user_id,
        category=filter_set.category,
        start_date=filter_set.start_date.isoformat() if filter_set.start_date else None,
        end_date=filter_set.end_date.isoformat() if filter_set.end_date else None
    )
    statuses = budget_service.list_budget_status(user_id, apply_filters(expenses, filter_set))

    return success_response(data={
        'budgets': statuses,
        'count': len(statuses),
        'over_budget_count': sum(1 for status in statuses if status.is_over_budget)
    })


def handle_update(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle update budget."""
    try:
        path_params = event.get('pathParameters') or {}
        budget_id = path_params.get('id')

        if not budget_id:
            return validation_error_response("Budget ID is required")

        body = json.loads(event.get('body') or '{}')

        if not body:
            return validation_error_response("No updates provided")

        updated_budget = budget_service.update_budget(user_id, budget_id, body)

        logger.info(f"Budget updated successfully: {budget_id}")

        return success_response(
            data=updated_budget,
            message="Budget updated successfully"
        )

    except json.JSONDecodeError:
        return validation_error_response("Invalid JSON body")
    except ValidationError as e:
        return validation_error_response(e.message)
    except NotFoundError as e:
        return not_found_response(e.message)


def handle_delete(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle delete budget."""
    path_params = event.get('pathParameters') or {}
    budget_id = path_params.get('id')

    if not budget_id:
        return validation_error_response("Budget ID is required")

    try:
        budget_service.delete_budget(user_id, budget_id)
    except NotFoundError as e:
        return not_found_response(e.message)

    logger.info(f"Budget deleted successfully: {budget_id}")

    return success_response(
        message="Budget deleted successfully"
    )


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
