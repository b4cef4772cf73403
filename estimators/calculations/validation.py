"""
Shared input validation for the calculators.

Every check raises ``ValidationError`` naming the offending field. Only the
fields listed in ``ZERO_FALLBACKS`` are allowed to resolve to zero instead
of failing.
"""

import math
from typing import Optional

from estimators.errors import ValidationError

# Floating tolerance shared by the lot allocator and the depreciation planner
EPSILON = 1e-9

# Edge cases the business rules tolerate by resolving to zero
ZERO_FALLBACKS = (
    "disposal.unit_price",  # zero sale price -> zero proceeds
    "lots[].unit_cost",  # gifted or free units -> zero basis contribution
    "tiered.base",  # zero base -> zero tax
    "plan.residual_value",  # residual >= gross -> empty schedule
)


def require_number(value, field: str) -> float:
    """Return ``value`` as a finite float or fail."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(field, "must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, "must be a number")
    if not math.isfinite(number):
        raise ValidationError(field, "must be finite")
    return number


def require_non_negative(value, field: str) -> float:
    number = require_number(value, field)
    if number < 0:
        raise ValidationError(field, "must not be negative")
    return number


def require_positive(value, field: str) -> float:
    number = require_number(value, field)
    if number <= 0:
        raise ValidationError(field, "must be greater than zero")
    return number


def require_percent(value, field: str) -> float:
    """Percentages are on a 0-100 scale."""
    number = require_number(value, field)
    if number < 0 or number > 100:
        raise ValidationError(field, "must be between 0 and 100")
    return number


def require_int_range(
    value, field: str, minimum: int, maximum: Optional[int] = None
) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, "must be a whole number")
    if value < minimum:
        raise ValidationError(field, f"must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationError(field, f"must be at most {maximum}")
    return value


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""
    return round(value, 2)
