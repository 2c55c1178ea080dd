"""Budget service for managing budgets and measuring spending against them."""

import os
import uuid
from typing import Dict, Any, Iterable, List, Optional
from datetime import datetime
from decimal import Decimal
import logging
from boto3.dynamodb.conditions import Key

from shared.dynamodb import DynamoDBClient
from shared.validators import (
    validate_amount,
    validate_category,
    validate_period,
    sanitize_string
)
from shared.exceptions import NotFoundError
from budgets.models import Budget, BudgetStatus
from expenses.models import Expense

logger = logging.getLogger(__name__)


def compute_budget_status(budget: Budget, expenses: Iterable[Expense]) -> BudgetStatus:
    """
    Measure a budget against a set of expenses.

    Spent is the sum of the expenses in the budget's category, whatever
    period the expenses cover. Percentage is 0 for a zero budget.
    """
    spent = sum(
        (expense.amount for expense in expenses if expense.category == budget.category),
        Decimal('0')
    )
    remaining = budget.amount - spent
    percentage = spent / budget.amount * 100 if budget.amount > 0 else Decimal('0')

    return BudgetStatus(
        budget=budget,
        spent=spent,
        remaining=remaining,
        percentage=percentage,
        is_over_budget=remaining < 0
    )


def budget_statuses(budgets: Iterable[Budget], expenses: Iterable[Expense]) -> List[BudgetStatus]:
    """Status of every budget against the same expense set."""
    expenses = list(expenses)
    return [compute_budget_status(budget, expenses) for budget in budgets]


class BudgetService:
    """Service for managing budgets."""

    def __init__(self):
        """Initialize budget service."""
        self.budgets_table = DynamoDBClient(os.environ.get('BUDGETS_TABLE'))

    def create_budget(
        self,
        user_id: str,
        category: str,
        amount: Any,
        period: str,
        notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a new budget.

        Args:
            user_id: User ID
            category: Budget category id
            amount: Budget ceiling
            period: Budget period (weekly/monthly/quarterly/yearly)
            notes: Optional notes

        Returns:
            Created budget

        Raises:
            ValidationError: If validation fails
        """
        now = datetime.utcnow().isoformat()

        budget = {
            'user_id': user_id,
            'budget_id': str(uuid.uuid4()),
            'category': validate_category(category),
            'amount': validate_amount(amount),
            'period': validate_period(period),
            'created_at': now,
            'updated_at': now
        }

        if notes:
            budget['notes'] = sanitize_string(notes, max_length=1000)

        self.budgets_table.put_item(budget)

        logger.info(f"Created budget {budget['budget_id']} for category {budget['category']}")
        return budget

    def get_budget(self, user_id: str, budget_id: str) -> Budget:
        """
        Get budget by ID.

        Raises:
            NotFoundError: If budget not found
        """
        item = self.budgets_table.get_item({
            'user_id': user_id,
            'budget_id': budget_id
        })

        if not item:
            raise NotFoundError("Budget not found")

        return Budget.model_validate(item)

    def list_budgets(self, user_id: str) -> List[Budget]:
        """List every budget of a user."""
        items = self.budgets_table.query_all(
            key_condition_expression=Key('user_id').eq(user_id)
        )
        return [Budget.model_validate(item) for item in items]

    def list_budget_status(self, user_id: str, expenses: Iterable[Expense]) -> List[BudgetStatus]:
        """Budgets of a user measured against the given expenses."""
        return budget_statuses(self.list_budgets(user_id), expenses)

    def update_budget(
        self,
        user_id: str,
        budget_id: str,
        updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Update budget.

        Args:
            user_id: User ID
            budget_id: Budget ID
            updates: Fields to update (category, amount, period, notes)

        Returns:
            Updated budget

        Raises:
            NotFoundError: If budget not found
            ValidationError: If validation fails
        """
        # Verify budget exists
        self.get_budget(user_id, budget_id)

        validated = {}

        if 'amount' in updates:
            validated['amount'] = validate_amount(updates['amount'])

        if 'category' in updates:
            validated['category'] = validate_category(updates['category'])

        if 'period' in updates:
            validated['period'] = validate_period(updates['period'])

        if 'notes' in updates:
            validated['notes'] = sanitize_string(updates['notes'] or '', max_length=1000)

        # Build update expression
        update_parts = []
        expr_values = {}
        expr_names = {}

        for key, value in validated.items():
            update_parts.append(f"#{key} = :{key}")
            expr_names[f'#{key}'] = key
            expr_values[f':{key}'] = value

        # Add updated_at timestamp
        update_parts.append("#updated_at = :updated_at")
        expr_names['#updated_at'] = 'updated_at'
        expr_values[':updated_at'] = datetime.utcnow().isoformat()

        update_expr = "SET " + ", ".join(update_parts)

        updated_budget = self.budgets_table.update_item(
            key={'user_id': user_id, 'budget_id': budget_id},
            update_expression=update_expr,
            expression_values=expr_values,
            expression_names=expr_names
        )

        logger.info(f"Updated budget {budget_id}")
        return updated_budget

    def delete_budget(self, user_id: str, budget_id: str) -> None:
        """
        Permanently delete a budget.

        Raises:
            NotFoundError: If budget not found
        """
        # Verify budget exists
        self.get_budget(user_id, budget_id)

        self.budgets_table.delete_item({
            'user_id': user_id,
            'budget_id': budget_id
        })

        logger.info(f"Deleted budget {budget_id}")
