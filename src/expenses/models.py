"""Expense data models."""

from enum import Enum
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RecurringFrequency(str, Enum):
    """How often a recurring expense repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


def coerce_calendar_date(value: Any) -> Any:
    """Reduce store timestamps ('2024-01-05T10:30:00Z', datetimes) to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return date_parser.parse(value).date()
    return value


class Expense(BaseModel):
    """Expense record as returned by the store."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    expense_id: str
    user_id: Optional[str] = None
    title: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    category: Optional[str] = None
    date: date
    notes: Optional[str] = None
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None
    receipt_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator('date', mode='before')
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        return coerce_calendar_date(value)

    @model_validator(mode='after')
    def _clear_frequency(self) -> 'Expense':
        # Frequency only means something on recurring expenses
        if not self.is_recurring:
            self.recurring_frequency = None
        return self
