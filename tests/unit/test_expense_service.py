"""Unit tests for expense service."""

import pytest
from unittest.mock import Mock, patch
from datetime import date
from decimal import Decimal
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from expenses.models import Expense
from expenses.service import CATEGORY_INDEX, DATE_INDEX, ExpenseService
from shared.exceptions import NotFoundError, ValidationError


class TestExpenseService:
    """Test cases for ExpenseService."""

    @pytest.fixture
    def expense_service(self):
        """Create expense service instance with mocked DynamoDB."""
        with patch('expenses.service.DynamoDBClient'):
            service = ExpenseService()
            service.expenses_table = Mock()
            return service

    @pytest.fixture
    def sample_expense(self):
        """Sample expense data."""
        return {
            'user_id': 'user123',
            'expense_id': 'exp123',
            'title': 'Weekly groceries',
            'amount': Decimal('45.67'),
            'category': 'food',
            'date': '2024-01-15',
            'is_recurring': False,
            'created_at': '2024-01-15T10:00:00',
            'updated_at': '2024-01-15T10:00:00'
        }

    @pytest.fixture
    def edit(self):
        """Full set of edited fields."""
        return {
            'title': 'Weekly groceries',
            'amount': '50.00',
            'category': 'food',
            'date': '2024-01-16',
            'notes': None,
            'is_recurring': True,
            'recurring_frequency': 'Weekly'
        }

    def test_create_expense(self, expense_service):
        """Test creating an expense."""
        expense = expense_service.create_expense('user123', {
            'title': '  Taxi  ',
            'amount': '18.40',
            'date': '2024-02-02',
            'category': 'transportation'
        })

        assert expense['user_id'] == 'user123'
        assert expense['title'] == 'Taxi'
        assert expense['amount'] == Decimal('18.40')
        assert expense['is_recurring'] is False
        assert 'expense_id' in expense
        expense_service.expenses_table.put_item.assert_called_once_with(expense)

    def test_create_expense_leaves_out_empty_fields(self, expense_service):
        """Uncategorised expenses carry no category attribute."""
        expense = expense_service.create_expense('user123', {
            'title': 'Gift',
            'amount': 20,
            'date': '2024-02-02',
            'category': ''
        })

        assert 'category' not in expense
        assert 'notes' not in expense
        assert 'recurring_frequency' not in expense

    def test_create_expense_requires_title(self, expense_service):
        with pytest.raises(ValidationError, match="title"):
            expense_service.create_expense('user123', {'amount': 5, 'date': '2024-02-02'})

    def test_create_recurring_expense_requires_frequency(self, expense_service):
        with pytest.raises(ValidationError):
            expense_service.create_expense('user123', {
                'title': 'Gym',
                'amount': 30,
                'date': '2024-02-02',
                'is_recurring': True
            })

    def test_get_expense_success(self, expense_service, sample_expense):
        """Test getting an expense successfully."""
        expense_service.expenses_table.get_item.return_value = sample_expense

        result = expense_service.get_expense('user123', 'exp123')

        assert result == sample_expense
        expense_service.expenses_table.get_item.assert_called_once_with({
            'user_id': 'user123',
            'expense_id': 'exp123'
        })

    def test_get_expense_not_found(self, expense_service):
        """Test getting a non-existent expense."""
        expense_service.expenses_table.get_item.return_value = None

        with pytest.raises(NotFoundError, match="Expense not found"):
            expense_service.get_expense('user123', 'nonexistent')

    def test_update_expense_replaces_fields(self, expense_service, sample_expense, edit):
        """Test that an edit sets present fields and removes cleared ones."""
        expense_service.expenses_table.get_item.return_value = sample_expense
        expense_service.expenses_table.update_item.return_value = {**sample_expense, 'amount': Decimal('50.00')}

        result = expense_service.update_expense('user123', 'exp123', edit)

        assert result['amount'] == Decimal('50.00')
        kwargs = expense_service.expenses_table.update_item.call_args.kwargs
        assert kwargs['key'] == {'user_id': 'user123', 'expense_id': 'exp123'}
        assert kwargs['expression_values'][':amount'] == Decimal('50.00')
        assert kwargs['expression_values'][':recurring_frequency'] == 'weekly'
        assert ':updated_at' in kwargs['expression_values']
        assert 'REMOVE #notes, #receipt_url' in kwargs['update_expression']

    def test_update_expense_validate_amount(self, expense_service, sample_expense, edit):
        """Test that update validates amount."""
        expense_service.expenses_table.get_item.return_value = sample_expense

        with pytest.raises(ValidationError):
            expense_service.update_expense('user123', 'exp123', {**edit, 'amount': -10})

    def test_update_expense_validate_category(self, expense_service, sample_expense, edit):
        """Test that update validates category."""
        expense_service.expenses_table.get_item.return_value = sample_expense

        with pytest.raises(ValidationError):
            expense_service.update_expense('user123', 'exp123', {**edit, 'category': 'InvalidCategory'})

    def test_update_expense_not_found(self, expense_service, edit):
        expense_service.expenses_table.get_item.return_value = None

        with pytest.raises(NotFoundError):
            expense_service.update_expense('user123', 'missing', edit)

        expense_service.expenses_table.update_item.assert_not_called()

    def test_delete_expense_success(self, expense_service, sample_expense):
        """Test deleting an expense successfully."""
        expense_service.expenses_table.get_item.return_value = sample_expense

        expense_service.delete_expense('user123', 'exp123')

        expense_service.expenses_table.delete_item.assert_called_once_with({
            'user_id': 'user123',
            'expense_id': 'exp123'
        })

    def test_delete_expense_not_found(self, expense_service):
        """Test deleting a non-existent expense."""
        expense_service.expenses_table.get_item.return_value = None

        with pytest.raises(NotFoundError):
            expense_service.delete_expense('user123', 'nonexistent')

    def test_list_expenses_with_category_filter(self, expense_service):
        """Test listing expenses with category filter."""
        mock_result = {
            'items': [{'expense_id': 'exp1'}, {'expense_id': 'exp2'}],
            'last_evaluated_key': None
        }

        expense_service.expenses_table.query.return_value = mock_result

        result = expense_service.list_expenses(
            user_id='user123',
            category='food'
        )

        assert result['count'] == 2
        assert result['expenses'] == mock_result['items']
        assert expense_service.expenses_table.query.call_args.kwargs['index_name'] == CATEGORY_INDEX

    def test_list_expenses_with_date_range(self, expense_service):
        """Test listing expenses with date range."""
        mock_result = {
            'items': [{'expense_id': 'exp1'}],
            'last_evaluated_key': None
        }

        expense_service.expenses_table.query.return_value = mock_result

        result = expense_service.list_expenses(
            user_id='user123',
            category='all',
            start_date='2024-01-01',
            end_date='2024-01-31'
        )

        assert result['count'] == 1
        kwargs = expense_service.expenses_table.query.call_args.kwargs
        assert kwargs['index_name'] == DATE_INDEX
        assert kwargs['filter_expression'] is None
        assert kwargs['scan_forward'] is False

    def test_fetch_expenses_newest_first(self, expense_service, sample_expense):
        """Fetched records are parsed and ordered by date, newest first."""
        expense_service.expenses_table.query_all.return_value = [
            {**sample_expense, 'expense_id': 'old', 'date': '2024-01-01'},
            {**sample_expense, 'expense_id': 'new', 'date': '2024-03-01T08:30:00Z'},
            {**sample_expense, 'expense_id': 'mid', 'date': '2024-02-01'},
        ]

        expenses = expense_service.fetch_expenses('user123')

        assert [expense.expense_id for expense in expenses] == ['new', 'mid', 'old']
        assert all(isinstance(expense, Expense) for expense in expenses)
        assert expenses[0].date == date(2024, 3, 1)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
