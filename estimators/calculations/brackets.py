"""
Progressive Tiered-Rate Calculations

Evaluates a nonnegative base against ordered rate tiers (income and savings
tax brackets). Tiers use cumulative upper bounds; the last tier is unbounded.
"""

import math
from dataclasses import dataclass
from functools import reduce
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from estimators.calculations.validation import require_non_negative
from estimators.errors import ConfigurationError, NotFoundError


@dataclass(frozen=True)
class BracketTier:
    """One marginal segment: income up to ``upper_bound`` taxed at ``rate`` percent."""

    upper_bound: float  # math.inf for the top tier
    rate: float  # percent, 0-100

    @property
    def is_unbounded(self) -> bool:
        return math.isinf(self.upper_bound)


def make_tier(upper_bound: Optional[float], rate: float) -> BracketTier:
    """Build a tier; ``None`` means no upper bound."""
    return BracketTier(
        upper_bound=math.inf if upper_bound is None else float(upper_bound),
        rate=float(rate),
    )


def validate_tiers(tiers: Iterable[BracketTier]) -> Tuple[BracketTier, ...]:
    """
    Check a tier table and freeze it.

    Raises:
        ConfigurationError: If the table is empty, not strictly ascending,
            has a rate outside 0-100, or its final tier is bounded
    """
    table = tuple(tiers)
    if not table:
        raise ConfigurationError("bracket table is empty")

    previous = 0.0
    for index, tier in enumerate(table):
        if math.isnan(tier.upper_bound) or math.isnan(tier.rate):
            raise ConfigurationError(f"tier {index} has a non-numeric value")
        if tier.rate < 0 or tier.rate > 100:
            raise ConfigurationError(f"tier {index} rate {tier.rate} is outside 0-100")
        if tier.upper_bound <= previous:
            raise ConfigurationError(
                f"tier {index} upper bound {tier.upper_bound} is not above {previous}"
            )
        if tier.is_unbounded and index != len(table) - 1:
            raise ConfigurationError(f"only the final tier may be unbounded (tier {index})")
        previous = tier.upper_bound

    if not table[-1].is_unbounded:
        raise ConfigurationError("final tier must be unbounded")
    return table


def tiers_from_spans(spans: Sequence[Tuple[Optional[float], float]]) -> Tuple[BracketTier, ...]:
    """
    Build cumulative tiers from ``(width, rate)`` pairs.

    A width of ``None`` closes the table with an unbounded tier, so
    ``[(6000, 19), (44000, 21), (None, 23)]`` gives bounds 6000, 50000, inf.
    """
    tiers = []
    upper = 0.0
    for width, rate in spans:
        if width is None or math.isinf(width):
            tiers.append(make_tier(None, rate))
            break
        if width <= 0:
            raise ConfigurationError(f"tier width {width} must be positive")
        upper += width
        tiers.append(make_tier(upper, rate))
    return validate_tiers(tiers)


def _slice(base: float, lower: float, upper: float) -> float:
    return max(0.0, min(base, upper) - lower)


def compute_tiered(base: float, tiers: Sequence[BracketTier]) -> float:
    """
    Accumulate ``slice * rate`` across the tiers for ``base``.

    Args:
        base: Nonnegative amount (taxable base)
        tiers: Ascending tiers with cumulative upper bounds

    Returns:
        The accumulated amount; 0 when ``base`` is 0

    Raises:
        ValidationError: If ``base`` is negative
        ConfigurationError: If the tier table is invalid
    """
    table = validate_tiers(tiers)
    base = require_non_negative(base, "base")

    def step(acc: Tuple[float, float], tier: BracketTier) -> Tuple[float, float]:
        lower, total = acc
        if base <= lower:
            return acc
        return tier.upper_bound, total + _slice(base, lower, tier.upper_bound) * tier.rate / 100

    _, total = reduce(step, table, (0.0, 0.0))
    return total


def tier_breakdown(base: float, tiers: Sequence[BracketTier]) -> List[Dict]:
    """Per-tier taxed slice and amount for ``base`` (tiers above ``base`` omitted)."""
    table = validate_tiers(tiers)
    base = require_non_negative(base, "base")

    rows = []
    lower = 0.0
    for tier in table:
        if base <= lower:
            break
        taxed = _slice(base, lower, tier.upper_bound)
        rows.append(
            {
                "lower_bound": lower,
                "upper_bound": None if tier.is_unbounded else tier.upper_bound,
                "rate": tier.rate,
                "taxed_amount": taxed,
                "tax": taxed * tier.rate / 100,
            }
        )
        lower = tier.upper_bound
    return rows


def marginal_rate(base: float, tiers: Sequence[BracketTier]) -> float:
    """Rate (percent) applied to the next unit above ``base``."""
    table = validate_tiers(tiers)
    base = require_non_negative(base, "base")
    for tier in table:
        if base < tier.upper_bound:
            return tier.rate
    return table[-1].rate


def effective_rate(base: float, tiers: Sequence[BracketTier]) -> float:
    """Average rate (percent) over the whole base; 0 for a zero base."""
    amount = compute_tiered(base, tiers)
    if base == 0:
        return 0.0
    return amount / base * 100


# Spanish savings base (base del ahorro): 6k / 44k / 150k / 100k / rest
SPANISH_SAVINGS_BASE = tiers_from_spans(
    [(6_000, 19), (44_000, 21), (150_000, 23), (100_000, 27), (None, 28)]
)

# Italian IRPEF, three brackets
ITALIAN_IRPEF = (
    make_tier(28_000, 23),
    make_tier(50_000, 35),
    make_tier(None, 43),
)

PRESETS: Dict[str, Tuple[BracketTier, ...]] = {
    "es_savings": SPANISH_SAVINGS_BASE,
    "it_irpef": ITALIAN_IRPEF,
}


def get_preset(name: str) -> Tuple[BracketTier, ...]:
    """Look up a built-in bracket table by name."""
    try:
        return PRESETS[name]
    except KeyError:
        raise NotFoundError(f"unknown bracket preset {name!r}")
