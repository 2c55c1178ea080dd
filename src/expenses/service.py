"""Expense service for managing expenses."""

import os
import uuid
from typing import Dict, Any, List, Optional
from datetime import datetime
import logging
from boto3.dynamodb.conditions import Key, Attr

from shared.dynamodb import DynamoDBClient
from shared.validators import (
    validate_amount,
    validate_category,
    validate_date,
    validate_frequency,
    validate_required_fields,
    validate_title,
    sanitize_string
)
from shared.exceptions import NotFoundError
from expenses.models import Expense

logger = logging.getLogger(__name__)

DATE_INDEX = 'user-date-index'
CATEGORY_INDEX = 'user-category-index'

# Fields an edit replaces wholesale
MUTABLE_FIELDS = [
    'title',
    'amount',
    'category',
    'date',
    'notes',
    'is_recurring',
    'recurring_frequency',
    'receipt_url'
]


class ExpenseService:
    """Service for managing expenses."""

    def __init__(self):
        """Initialize expense service."""
        self.expenses_table = DynamoDBClient(os.environ.get('EXPENSES_TABLE'))

    def create_expense(self, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a new expense.

        Args:
            user_id: User ID
            data: Expense fields (title, amount, date required)

        Returns:
            Created expense

        Raises:
            ValidationError: If validation fails
        """
        fields = self._validate_fields(data)
        now = datetime.utcnow().isoformat()

        # Index keys (category) cannot hold NULL, so empty fields are left out
        expense = {
            'user_id': user_id,
            'expense_id': str(uuid.uuid4()),
            **{key: value for key, value in fields.items() if value is not None},
            'created_at': now,
            'updated_at': now
        }

        self.expenses_table.put_item(expense)

        logger.info(f"Created expense {expense['expense_id']}")
        return expense

    def get_expense(self, user_id: str, expense_id: str) -> Dict[str, Any]:
        """
        Get expense by ID.

        Raises:
            NotFoundError: If expense not found
        """
        expense = self.expenses_table.get_item({
            'user_id': user_id,
            'expense_id': expense_id
        })

        if not expense:
            raise NotFoundError("Expense not found")

        return expense

    def list_expenses(
        self,
        user_id: str,
        category: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 50,
        last_evaluated_key: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        List one page of expenses for a user with optional filters.

        Args:
            user_id: User ID
            category: Optional category filter
            start_date: Optional start date (YYYY-MM-DD)
            end_date: Optional end date (YYYY-MM-DD)
            limit: Maximum number of results
            last_evaluated_key: Pagination key

        Returns:
            Dictionary with expenses and pagination key
        """
        if category == 'all':
            category = None

        key_condition, filter_expr, index_name = self._build_query(
            user_id, category, start_date, end_date
        )

        result = self.expenses_table.query(
            key_condition_expression=key_condition,
            filter_expression=filter_expr,
            index_name=index_name,
            limit=limit,
            scan_forward=False,  # Most recent first
            exclusive_start_key=last_evaluated_key
        )

        return {
            'expenses': result['items'],
            'count': len(result['items']),
            'last_evaluated_key': result['last_evaluated_key']
        }

    def fetch_expenses(
        self,
        user_id: str,
        category: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[Expense]:
        """
        Fetch every expense matching the server-side filters.

        Records come back newest first; records sharing a date keep the
        order the store returned them in.

        Raises:
            DatabaseError: If the store query fails
        """
        if category == 'all':
            category = None

        key_condition, filter_expr, index_name = self._build_query(
            user_id, category, start_date, end_date
        )

        items = self.expenses_table.query_all(
            key_condition_expression=key_condition,
            filter_expression=filter_expr,
            index_name=index_name,
            scan_forward=False
        )

        expenses = [Expense.model_validate(item) for item in items]
        expenses.sort(key=lambda expense: expense.date, reverse=True)

        logger.debug(f"Fetched {len(expenses)} expenses for user {user_id}")
        return expenses

    def _build_query(
        self,
        user_id: str,
        category: Optional[str],
        start_date: Optional[str],
        end_date: Optional[str]
    ):
        """Pick an index and build the key condition / filter for the store query."""
        if category:
            # Category lives in the index key, dates become a filter
            key_condition = Key('user_id').eq(user_id) & Key('category').eq(category)

            filter_expr = None
            if start_date and end_date:
                filter_expr = Attr('date').between(start_date, end_date)
            elif start_date:
                filter_expr = Attr('date').gte(start_date)
            elif end_date:
                filter_expr = Attr('date').lte(end_date)

            return key_condition, filter_expr, CATEGORY_INDEX

        if start_date and end_date:
            key_condition = Key('user_id').eq(user_id) & Key('date').between(start_date, end_date)
        elif start_date:
            key_condition = Key('user_id').eq(user_id) & Key('date').gte(start_date)
        elif end_date:
            key_condition = Key('user_id').eq(user_id) & Key('date').lte(end_date)
        else:
            key_condition = Key('user_id').eq(user_id)

        return key_condition, None, DATE_INDEX

    def update_expense(
        self,
        user_id: str,
        expense_id: str,
        data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Replace the mutable fields of an expense.

        Args:
            user_id: User ID
            expense_id: Expense ID
            data: Full set of expense fields

        Returns:
            Updated expense

        Raises:
            NotFoundError: If expense not found
            ValidationError: If validation fails
        """
        # Verify expense exists
        self.get_expense(user_id, expense_id)

        fields = self._validate_fields(data)

        # Build update expression; cleared fields are removed from the item
        update_parts = []
        remove_parts = []
        expr_values = {}
        expr_names = {}

        for key in MUTABLE_FIELDS:
            expr_names[f'#{key}'] = key
            if fields[key] is None:
                remove_parts.append(f"#{key}")
            else:
                update_parts.append(f"#{key} = :{key}")
                expr_values[f':{key}'] = fields[key]

        # Add updated_at timestamp
        update_parts.append("#updated_at = :updated_at")
        expr_names['#updated_at'] = 'updated_at'
        expr_values[':updated_at'] = datetime.utcnow().isoformat()

        update_expr = "SET " + ", ".join(update_parts)
        if remove_parts:
            update_expr += " REMOVE " + ", ".join(remove_parts)

        updated_expense = self.expenses_table.update_item(
            key={'user_id': user_id, 'expense_id': expense_id},
            update_expression=update_expr,
            expression_values=expr_values,
            expression_names=expr_names
        )

        logger.info(f"Updated expense {expense_id}")
        return updated_expense

    def delete_expense(self, user_id: str, expense_id: str) -> None:
        """
        Permanently delete an expense.

        Raises:
            NotFoundError: If expense not found
        """
        # Verify expense exists
        self.get_expense(user_id, expense_id)

        self.expenses_table.delete_item({
            'user_id': user_id,
            'expense_id': expense_id
        })

        logger.info(f"Deleted expense {expense_id}")

    @staticmethod
    def _validate_fields(data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and normalise the user-editable expense fields."""
        validate_required_fields(data, ['title', 'amount', 'date'])

        is_recurring = bool(data.get('is_recurring', False))
        category = data.get('category') or None
        notes = data.get('notes')
        receipt_url = data.get('receipt_url')

        return {
            'title': validate_title(data['title']),
            'amount': validate_amount(data['amount']),
            'category': validate_category(category) if category else None,
            'date': validate_date(data['date']),
            'notes': sanitize_string(notes, max_length=1000) if notes else None,
            'is_recurring': is_recurring,
            'recurring_frequency': (
                validate_frequency(data.get('recurring_frequency'))
                if is_recurring else None
            ),
            'receipt_url': sanitize_string(receipt_url, max_length=2048) if receipt_url else None
        }
