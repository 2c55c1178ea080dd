#!/usr/bin/env python3
"""
Seed a user with sample expenses and budgets so reports and exports have
something to chart. Spreads expenses over the last year, marks a few as
recurring, and creates one budget per period.
"""

import boto3
import os
import sys
from datetime import datetime, timedelta
from decimal import Decimal
import uuid
import random

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.categories import VALID_CATEGORIES
from shared.validators import VALID_FREQUENCIES

SAMPLE_TITLES = {
    'food': ['Groceries', 'Lunch with team', 'Coffee', 'Pizza night', 'Farmers market'],
    'transportation': ['Bus pass', 'Fuel', 'Taxi home', 'Parking', 'Train ticket'],
    'housing': ['Rent', 'Home insurance', 'Furniture'],
    'utilities': ['Electricity bill', 'Water bill', 'Internet', 'Phone plan'],
    'entertainment': ['Cinema', 'Streaming subscription', 'Concert', 'Board game'],
    'healthcare': ['Pharmacy', 'Dentist', 'Gym membership'],
    'shopping': ['Shoes', 'Headphones', 'Birthday gift', 'Kitchen supplies'],
    'travel': ['Hotel', 'Flight', 'Car rental'],
    'education': ['Online course', 'Books', 'Workshop'],
    'personal': ['Haircut', 'Laundry'],
    'other': ['Miscellaneous']
}

SAMPLE_BUDGETS = [
    {'category': 'food', 'amount': 500, 'period': 'monthly'},
    {'category': 'transportation', 'amount': 60, 'period': 'weekly'},
    {'category': 'utilities', 'amount': 600, 'period': 'quarterly'},
    {'category': 'travel', 'amount': 2500, 'period': 'yearly'},
    {'category': 'entertainment', 'amount': 150, 'period': 'monthly', 'notes': 'Includes subscriptions'}
]


def get_table_names():
    """Table names from the environment, falling back to the stack defaults."""
    return {
        'expenses': os.environ.get('EXPENSES_TABLE', 'expense-tracker-expenses'),
        'budgets': os.environ.get('BUDGETS_TABLE', 'expense-tracker-budgets'),
        'users': os.environ.get('USERS_TABLE', 'expense-tracker-users')
    }


def get_dynamodb_resource():
    """DynamoDB resource, pointed at LocalStack when USE_LOCALSTACK is set."""
    if os.environ.get('USE_LOCALSTACK', 'false').lower() == 'true':
        return boto3.resource(
            'dynamodb',
            endpoint_url=os.environ.get('LOCALSTACK_ENDPOINT', 'http://localhost:4566')
        )
    return boto3.resource('dynamodb')


def build_expense(user_id, today):
    """One random expense dated within the last year."""
    category = random.choice(VALID_CATEGORIES)
    is_recurring = random.random() < 0.15
    now = datetime.utcnow().isoformat()

    expense = {
        'user_id': user_id,
        'expense_id': str(uuid.uuid4()),
        'title': random.choice(SAMPLE_TITLES[category]),
        'amount': Decimal(str(round(random.uniform(3.0, 250.0), 2))),
        'category': category,
        'date': (today - timedelta(days=random.randint(0, 365))).isoformat(),
        'is_recurring': is_recurring,
        'created_at': now,
        'updated_at': now
    }

    if is_recurring:
        expense['recurring_frequency'] = random.choice(VALID_FREQUENCIES)
    if random.random() < 0.3:
        expense['notes'] = 'Seeded sample'

    return expense


def seed_expenses(dynamodb, table_name, user_id, num_expenses=100):
    """Seed sample expenses."""
    table = dynamodb.Table(table_name)
    today = datetime.utcnow().date()

    print(f"Creating {num_expenses} sample expenses...")
    expenses = [build_expense(user_id, today) for _ in range(num_expenses)]

    with table.batch_writer() as batch:
        for expense in expenses:
            batch.put_item(Item=expense)

    print(f"Created {len(expenses)} expenses")
    return expenses


def seed_budgets(dynamodb, table_name, user_id):
    """Seed one sample budget per period."""
    table = dynamodb.Table(table_name)
    now = datetime.utcnow().isoformat()

    print(f"Creating {len(SAMPLE_BUDGETS)} sample budgets...")

    budgets = []
    for budget_data in SAMPLE_BUDGETS:
        budget = {
            'user_id': user_id,
            'budget_id': str(uuid.uuid4()),
            'category': budget_data['category'],
            'amount': Decimal(str(budget_data['amount'])),
            'period': budget_data['period'],
            'created_at': now,
            'updated_at': now
        }
        if budget_data.get('notes'):
            budget['notes'] = budget_data['notes']
        budgets.append(budget)

    with table.batch_writer() as batch:
        for budget in budgets:
            batch.put_item(Item=budget)

    print(f"Created {len(budgets)} budgets")
    return budgets


def main():
    """Main function."""
    print("=" * 50)
    print("Expense Reports - Seed Data Script")
    print("=" * 50)

    table_names = get_table_names()

    print("\nTable names:")
    for key, value in table_names.items():
        print(f"  {key}: {value}")

    user_id = input("\nEnter user ID (Cognito sub) to seed data for: ").strip()
    if not user_id:
        print("Error: User ID is required")
        sys.exit(1)

    num_expenses = input("Enter number of expenses to create (default: 100): ").strip()
    num_expenses = int(num_expenses) if num_expenses else 100

    dynamodb = get_dynamodb_resource()

    print("\nSeeding expenses...")
    expenses = seed_expenses(dynamodb, table_names['expenses'], user_id, num_expenses)

    print("\nSeeding budgets...")
    budgets = seed_budgets(dynamodb, table_names['budgets'], user_id)

    print("\n" + "=" * 50)
    print("Data seeding complete!")
    print("=" * 50)
    print(f"  - {len(expenses)} expenses")
    print(f"  - {len(budgets)} budgets")
    print(f"\nFor user: {user_id}")


if __name__ == '__main__':
    main()
