"""
Error taxonomy for the calculation engine.

Calculators raise these; the API layer maps them to HTTP responses in
``estimators.main``. ``PlanIncompleteWarning`` is never raised, it travels
inside a successful depreciation plan.
"""

from dataclasses import dataclass
from typing import Optional


class EstimatorError(Exception):
    """Base class for all calculation engine errors."""

    code = "estimator_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class ValidationError(EstimatorError):
    """Malformed or out-of-range input for a named field."""

    code = "validation_error"

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field

    def to_dict(self) -> dict:
        return {"error": self.code, "field": self.field, "detail": self.message}


class ConfigurationError(EstimatorError):
    """Invalid bracket table, category catalog or incentive policy."""

    code = "configuration_error"


class InsufficientQuantityError(EstimatorError):
    """A disposal asks for more units than the acquisition lots hold."""

    code = "insufficient_quantity"

    def __init__(self, available: float, requested: float):
        super().__init__(
            f"disposal of {requested} exceeds available quantity {available}"
        )
        self.available = available
        self.requested = requested

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"available": self.available, "requested": self.requested})
        return data


class NotFoundError(EstimatorError):
    """Unknown regime, category, preset or scenario."""

    code = "not_found"


@dataclass(frozen=True)
class PlanIncompleteWarning:
    """Returned with a depreciation plan cut short by the row guard."""

    rows_generated: int
    remaining_base: float
    guard_cap: int
    code: str = "plan_incomplete"
    message: Optional[str] = None

    def describe(self) -> str:
        if self.message:
            return self.message
        return (
            f"schedule stopped after {self.rows_generated} rows "
            f"(guard cap {self.guard_cap}) with {self.remaining_base:.2f} "
            f"still to allocate"
        )
