"""Validation utilities for the expense tracker application."""

from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal, InvalidOperation

from .categories import VALID_CATEGORIES
from .exceptions import ValidationError


# Budget periods
VALID_PERIODS = ["weekly", "monthly", "quarterly", "yearly"]

# Recurring expense frequencies
VALID_FREQUENCIES = ["daily", "weekly", "biweekly", "monthly", "quarterly", "yearly"]

# Report export formats
VALID_EXPORT_FORMATS = ["csv", "excel", "pdf"]


def validate_amount(amount: Any) -> Decimal:
    """
    Validate monetary amount.

    Args:
        amount: Amount to validate

    Returns:
        Validated amount as Decimal

    Raises:
        ValidationError: If amount is invalid
    """
    if amount is None or amount == '':
        raise ValidationError("Amount is required")

    try:
        decimal_amount = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid amount format")

    if not decimal_amount.is_finite():
        raise ValidationError("Invalid amount format")

    if decimal_amount <= 0:
        raise ValidationError("Amount must be greater than 0")

    if decimal_amount > Decimal('999999.99'):
        raise ValidationError("Amount is too large")

    # Ensure at most 2 decimal places
    if decimal_amount.as_tuple().exponent < -2:
        raise ValidationError("Amount can have at most 2 decimal places")

    return decimal_amount


def validate_date(date_str: str) -> str:
    """
    Validate date format (ISO 8601: YYYY-MM-DD).

    Args:
        date_str: Date string to validate

    Returns:
        Validated date string

    Raises:
        ValidationError: If date is invalid
    """
    if not date_str:
        raise ValidationError("Date is required")

    try:
        datetime.strptime(date_str, '%Y-%m-%d')
        return date_str
    except (TypeError, ValueError):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")


def validate_category(category: str) -> str:
    """
    Validate expense category id.

    Args:
        category: Category id to validate

    Returns:
        Validated category id

    Raises:
        ValidationError: If category is invalid
    """
    if not category:
        raise ValidationError("Category is required")

    if category not in VALID_CATEGORIES:
        raise ValidationError(
            f"Invalid category. Must be one of: {', '.join(VALID_CATEGORIES)}"
        )

    return category


def validate_period(period: str) -> str:
    """
    Validate budget period.

    Raises:
        ValidationError: If period is invalid
    """
    if not period:
        raise ValidationError("Period is required")

    if not isinstance(period, str):
        raise ValidationError("Period must be a string")

    period = period.lower()

    if period not in VALID_PERIODS:
        raise ValidationError(
            f"Invalid period. Must be one of: {', '.join(VALID_PERIODS)}"
        )

    return period


def validate_frequency(frequency: str) -> str:
    """Validate recurring expense frequency."""
    if not frequency:
        raise ValidationError("Recurring frequency is required for recurring expenses")

    if not isinstance(frequency, str):
        raise ValidationError("Frequency must be a string")

    frequency = frequency.lower()

    if frequency not in VALID_FREQUENCIES:
        raise ValidationError(
            f"Invalid frequency. Must be one of: {', '.join(VALID_FREQUENCIES)}"
        )

    return frequency


def validate_export_format(export_format: str) -> str:
    """Validate report export format."""
    if not export_format:
        raise ValidationError("Export format is required")

    if not isinstance(export_format, str):
        raise ValidationError("Export format must be a string")

    export_format = export_format.lower()

    if export_format not in VALID_EXPORT_FORMATS:
        raise ValidationError(
            f"Invalid export format. Must be one of: {', '.join(VALID_EXPORT_FORMATS)}"
        )

    return export_format


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> None:
    """
    Validate that required fields are present in data.

    Args:
        data: Data dictionary to validate
        required_fields: List of required field names

    Raises:
        ValidationError: If any required field is missing
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None]

    if missing_fields:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing_fields)}"
        )


def sanitize_string(value: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize string input by trimming whitespace and enforcing a length limit.

    Args:
        value: String to sanitize
        max_length: Optional maximum length

    Returns:
        Sanitized string

    Raises:
        ValidationError: If string is invalid
    """
    if not isinstance(value, str):
        raise ValidationError("Value must be a string")

    # Remove leading/trailing whitespace
    value = value.strip()

    if max_length and len(value) > max_length:
        raise ValidationError(f"Value exceeds maximum length of {max_length}")

    return value


def validate_title(title: str) -> str:
    """Validate an expense title (non-empty after trimming)."""
    if title is None:
        raise ValidationError("Title is required")

    title = sanitize_string(title, max_length=200)

    if not title:
        raise ValidationError("Title is required")

    return title
