"""
Financial Calculation Engine

Tiered tax brackets, FIFO cost basis and depreciation schedules. Everything
here is pure and synchronous; inputs are validated and failures raise the
errors in ``estimators.errors``.
"""

from estimators.calculations import (
    book_depreciation,
    brackets,
    dates,
    depreciation,
    lots,
    validation,
)

__all__ = ["book_depreciation", "brackets", "dates", "depreciation", "lots", "validation"]
