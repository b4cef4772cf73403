"""
Calendar helpers for pro-rata allocation.

Day counts are calendar-aware: leap years have 366 days.
"""

import calendar
from datetime import date, datetime
from typing import Union

from dateutil.parser import isoparse

from estimators.errors import ValidationError


def days_in_year(year: int) -> int:
    """Number of days in a calendar year (365 or 366)."""
    return 366 if calendar.isleap(year) else 365


def day_of_year(value: date) -> int:
    """1-based ordinal of ``value`` within its year (Jan 1 -> 1)."""
    return value.timetuple().tm_yday


def days_remaining_in_year(value: date) -> int:
    """Days from ``value`` to Dec 31 inclusive of both ends."""
    return days_in_year(value.year) - day_of_year(value) + 1


def parse_iso_date(value: Union[str, date], field: str) -> date:
    """
    Parse an ISO-8601 calendar date.

    Args:
        value: ``date``/``datetime`` instance or ISO-8601 string
        field: Field name reported on failure

    Returns:
        The calendar date

    Raises:
        ValidationError: If the value is missing or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "must be an ISO-8601 date")
    try:
        return isoparse(value.strip()).date()
    except ValueError:
        raise ValidationError(field, f"malformed ISO-8601 date {value!r}")
