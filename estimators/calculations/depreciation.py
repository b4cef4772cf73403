"""
Tax Depreciation Schedules

Builds a year-by-year allowance schedule for an asset from its catalog
category: maximum table rate (doubled for used assets), first-year pro-rata
by days in service, and the eco-vehicle incentives (free allocation or an
accelerated rate) for eligible placement years.

Each plan runs Start -> first year (free allocation or pro-rata) -> standard
years -> terminated (exhausted or guard limited), synchronously in one call.
"""

import enum
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Iterable, List, Optional, Union

from estimators.calculations.dates import (
    days_in_year,
    days_remaining_in_year,
    parse_iso_date,
)
from estimators.calculations.validation import (
    EPSILON,
    require_non_negative,
    require_percent,
)
from estimators.catalog.registry import AssetCategory
from estimators.errors import ConfigurationError, PlanIncompleteWarning, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_GUARD_CAP = 120


class RowRule(str, enum.Enum):
    """Which rule produced a schedule row."""

    free_allocation = "free_allocation"
    pro_rata = "pro_rata"
    standard = "standard"


class IncentiveMode(str, enum.Enum):
    free_allocation = "free_allocation"
    accelerated = "accelerated"


class Termination(str, enum.Enum):
    exhausted = "exhausted"
    guard_limited = "guard_limited"


@dataclass(frozen=True)
class IncentivePolicy:
    """Placement years eligible for each incentive mode."""

    free_allocation_years: FrozenSet[int] = frozenset({2024, 2025})
    accelerated_years: FrozenSet[int] = frozenset({2023})

    def __post_init__(self):
        overlap = set(self.free_allocation_years) & set(self.accelerated_years)
        if overlap:
            raise ConfigurationError(
                f"incentive years {sorted(overlap)} are both free-allocation and accelerated"
            )

    @classmethod
    def from_years(
        cls, free_allocation: Iterable[int], accelerated: Iterable[int]
    ) -> "IncentivePolicy":
        return cls(frozenset(free_allocation), frozenset(accelerated))

    def mode_for(self, year: int) -> Optional[IncentiveMode]:
        if year in self.free_allocation_years:
            return IncentiveMode.free_allocation
        if year in self.accelerated_years:
            return IncentiveMode.accelerated
        return None


@dataclass(frozen=True)
class Incentive:
    """Caller request for the eco incentive."""

    percent: float = 100.0  # first-year share under free allocation


@dataclass(frozen=True)
class DepreciationRow:
    """One year of the schedule."""

    year: int
    opening_base: float
    allowance: float
    closing_base: float
    rule: RowRule
    note: str

    @property
    def year_label(self) -> str:
        return str(self.year)

    def to_dict(self) -> dict:
        return {
            "year_label": self.year_label,
            "opening_base": self.opening_base,
            "allowance": self.allowance,
            "closing_base": self.closing_base,
            "rule": self.rule.value,
            "note": self.note,
        }


@dataclass
class DepreciationPlan:
    """Schedule plus the figures shown next to it."""

    rows: List[DepreciationRow]
    rate_applied: float
    max_rate_percent: float
    max_period_years: int
    estimated_useful_life_years: int
    effective_base: float
    deductible_base: float
    total_allowance: float
    remaining_base: float
    termination: Termination
    incentive_mode: Optional[IncentiveMode] = None
    warning: Optional[PlanIncompleteWarning] = None
    notes: List[str] = field(default_factory=list)
    vat_paid: float = 0.0
    vat_recoverable: float = 0.0

    def to_dict(self) -> dict:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "rate_applied": self.rate_applied,
            "max_rate_percent": self.max_rate_percent,
            "max_period_years": self.max_period_years,
            "estimated_useful_life_years": self.estimated_useful_life_years,
            "effective_base": self.effective_base,
            "deductible_base": self.deductible_base,
            "total_allowance": self.total_allowance,
            "remaining_base": self.remaining_base,
            "termination": self.termination.value,
            "incentive_mode": self.incentive_mode.value if self.incentive_mode else None,
            "warning": (
                {
                    "code": self.warning.code,
                    "message": self.warning.describe(),
                    "rows_generated": self.warning.rows_generated,
                    "remaining_base": self.warning.remaining_base,
                }
                if self.warning
                else None
            ),
            "notes": list(self.notes),
            "vat_paid": self.vat_paid,
            "vat_recoverable": self.vat_recoverable,
        }


def _absorb(allowance: float, remaining: float) -> float:
    """Let a row take the whole remainder when what is left would be noise."""
    if remaining - allowance <= EPSILON:
        return remaining
    return allowance


def _row(year: int, opening: float, allowance: float, rule: RowRule, note: str) -> DepreciationRow:
    closing = 0.0 if allowance == opening else opening - allowance
    return DepreciationRow(year, opening, opening - closing, closing, rule, note)


def applied_rate(category: AssetCategory, is_used_asset: bool) -> float:
    """Table maximum, doubled for used assets and capped at 100%."""
    rate = category.max_rate_percent
    if not 0 < rate <= 100:
        raise ConfigurationError(
            f"category {category.id!r} rate {rate} is outside (0, 100]"
        )
    return min(100.0, rate * 2) if is_used_asset else float(rate)


def build_plan(
    category: AssetCategory,
    gross_value: float,
    residual_value: float,
    placed_in_service_date: Union[date, str],
    is_used_asset: bool = False,
    incentive: Optional[Incentive] = None,
    policy: Optional[IncentivePolicy] = None,
    business_use_exclusive: bool = True,
    vat_rate_percent: float = 0.0,
    vat_deductible_percent: float = 0.0,
    guard_cap: int = DEFAULT_GUARD_CAP,
) -> DepreciationPlan:
    """
    Generate the depreciation schedule for one asset.

    Args:
        category: Catalog category (rate and period ceilings)
        gross_value: Acquisition value
        residual_value: Salvage value excluded from the depreciable base
        placed_in_service_date: Date the asset entered service (ISO-8601 or date)
        is_used_asset: Second-hand assets may use twice the table rate
        incentive: Eco incentive request; the category must allow it
        policy: Incentive-eligible years (defaults to IncentivePolicy())
        business_use_exclusive: Non-exclusive business use is not deductible
        vat_rate_percent: VAT rate paid on the gross value
        vat_deductible_percent: Share of that VAT that is recoverable
        guard_cap: Maximum number of schedule rows

    Returns:
        DepreciationPlan; carries a PlanIncompleteWarning when the guard cap
        stopped the schedule before the base was exhausted

    Raises:
        ValidationError: For out-of-range inputs or an incentive requested on
            a category that does not allow one
    """
    gross = require_non_negative(gross_value, "gross_value")
    residual = require_non_negative(residual_value, "residual_value")
    placed = parse_iso_date(placed_in_service_date, "placed_in_service_date")
    vat_rate = require_percent(vat_rate_percent, "vat_rate_percent")
    vat_deductible = require_percent(vat_deductible_percent, "vat_deductible_percent")
    if isinstance(guard_cap, bool) or not isinstance(guard_cap, int) or guard_cap < 1:
        raise ValidationError("guard_cap", "must be a positive whole number")
    policy = policy or IncentivePolicy()

    notes = []
    effective_base = max(0.0, gross - residual)
    if residual > 0:
        notes.append(
            f"Residual value {residual:.2f} applied (effective base {effective_base:.2f})."
        )

    deductible_base = effective_base
    if not business_use_exclusive:
        deductible_base = 0.0
        notes.append("Not exclusively used for the business: depreciation is not deductible.")

    rate = applied_rate(category, is_used_asset)
    year = placed.year

    mode = None
    percent = 0.0
    if incentive is not None:
        if not category.allows_incentive:
            raise ValidationError(
                "incentive", f"category {category.id!r} does not allow incentives"
            )
        percent = require_percent(incentive.percent, "incentive.percent")
        mode = policy.mode_for(year)
        if mode is None:
            notes.append(f"No incentive available for placement year {year}; standard rules apply.")
        elif mode is IncentiveMode.accelerated:
            rate = min(100.0, rate * 2)
            notes.append(f"Accelerated incentive {year}: rate doubled to {rate:g}%.")

    annual = deductible_base * rate / 100
    rows = []
    remaining = deductible_base

    if remaining > 0:
        if mode is IncentiveMode.free_allocation:
            allowance = min(deductible_base * percent / 100, remaining)
            rule = RowRule.free_allocation
            note = f"Free allocation {year}: {percent:g}% of the effective base."
        else:
            days = days_remaining_in_year(placed)
            total_days = days_in_year(year)
            allowance = min(annual * days / total_days, remaining)
            rule = RowRule.pro_rata
            note = f"Pro-rata {days}/{total_days} days."
        row = _row(year, remaining, _absorb(allowance, remaining), rule, note)
        rows.append(row)
        remaining = row.closing_base

    while remaining > 0 and len(rows) < guard_cap:
        year += 1
        row = _row(
            year,
            remaining,
            _absorb(min(annual, remaining), remaining),
            RowRule.standard,
            f"Standard rate {rate:g}%.",
        )
        rows.append(row)
        remaining = row.closing_base

    warning = None
    termination = Termination.exhausted
    if remaining > 0:
        termination = Termination.guard_limited
        warning = PlanIncompleteWarning(
            rows_generated=len(rows), remaining_base=remaining, guard_cap=guard_cap
        )
        logger.warning(f"Depreciation plan for {category.id}: {warning.describe()}")

    vat_paid = gross * vat_rate / 100

    return DepreciationPlan(
        rows=rows,
        rate_applied=rate,
        max_rate_percent=category.max_rate_percent,
        max_period_years=category.max_period_years,
        estimated_useful_life_years=math.ceil(100 / rate),
        effective_base=effective_base,
        deductible_base=deductible_base,
        total_allowance=math.fsum(row.allowance for row in rows),
        remaining_base=remaining,
        termination=termination,
        incentive_mode=mode,
        warning=warning,
        notes=notes,
        vat_paid=vat_paid,
        vat_recoverable=vat_paid * vat_deductible / 100,
    )
