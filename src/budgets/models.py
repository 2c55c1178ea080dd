"""Budget data models."""

from enum import Enum
from typing import Optional
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class BudgetPeriod(str, Enum):
    """Budget period. Informational only; it does not bound the spending window."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Budget(BaseModel):
    """Budget model."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    budget_id: str
    user_id: Optional[str] = None
    category: str
    amount: Decimal = Field(..., gt=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class BudgetStatus(BaseModel):
    """A budget together with the spending measured against it."""

    budget: Budget
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    is_over_budget: bool
