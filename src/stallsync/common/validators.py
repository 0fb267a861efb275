from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value.strip()) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value.strip()


def require_positive_amount(value, field_name: str) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if amount <= 0:
        raise ValidationError(f"{field_name} must be a positive number")
    return amount


def require_non_negative_amount(value, field_name: str) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if amount < 0:
        raise ValidationError(f"{field_name} must be a non-negative number")
    return amount


def require_month(month, year) -> tuple[int, int]:
    try:
        m, y = int(month), int(year)
    except (TypeError, ValueError):
        raise ValidationError("Month and year must be integers") from None
    if not 1 <= m <= 12:
        raise ValidationError(f"Invalid month: {m}")
    return m, y
