"""
FIFO Cost-Basis Calculations

Consumes acquisition lots earliest-first to price a disposal, and estimates
the capital gain and the tax on it.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from estimators.calculations.brackets import (
    BracketTier,
    SPANISH_SAVINGS_BASE,
    compute_tiered,
)
from estimators.calculations.validation import (
    EPSILON,
    require_non_negative,
    require_positive,
)
from estimators.errors import InsufficientQuantityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcquisitionLot:
    """Units bought at one unit cost."""

    quantity: float
    unit_cost: float


@dataclass(frozen=True)
class DisposalRequest:
    """Units sold at one unit price."""

    quantity: float
    unit_price: float


@dataclass(frozen=True)
class LotConsumption:
    """How much of one lot a disposal used."""

    lot_index: int
    quantity: float
    unit_cost: float
    cost: float


@dataclass
class FifoAllocation:
    """Result of a FIFO allocation."""

    cost_basis: float
    quantity: float
    consumed: List[LotConsumption] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "cost_basis": self.cost_basis,
            "quantity": self.quantity,
            "consumed": [
                {
                    "lot_index": c.lot_index,
                    "quantity": c.quantity,
                    "unit_cost": c.unit_cost,
                    "cost": c.cost,
                }
                for c in self.consumed
            ],
        }


def _checked_lots(lots: Sequence[AcquisitionLot]) -> List[AcquisitionLot]:
    checked = []
    for index, lot in enumerate(lots):
        checked.append(
            AcquisitionLot(
                quantity=require_positive(lot.quantity, f"lots[{index}].quantity"),
                unit_cost=require_non_negative(lot.unit_cost, f"lots[{index}].unit_cost"),
            )
        )
    return checked


def allocate_fifo(
    lots: Sequence[AcquisitionLot],
    disposal_quantity: float,
    tolerance: float = EPSILON,
) -> FifoAllocation:
    """
    Assign a cost basis to a disposal by consuming the earliest lots first.

    Args:
        lots: Acquisition lots in the order they were bought
        disposal_quantity: Units sold (must be positive)
        tolerance: Slack allowed when comparing quantities

    Returns:
        FifoAllocation with the cost basis and per-lot consumption

    Raises:
        ValidationError: If a quantity or cost is out of range
        InsufficientQuantityError: If the lots hold less than the disposal
    """
    checked = _checked_lots(lots)
    requested = require_positive(disposal_quantity, "disposal_quantity")

    available = sum(lot.quantity for lot in checked)
    if available < requested - tolerance:
        raise InsufficientQuantityError(available=available, requested=requested)

    cost_basis = 0.0
    remaining = requested
    consumed = []
    for index, lot in enumerate(checked):
        if remaining <= tolerance:
            break
        used = min(remaining, lot.quantity)
        cost = used * lot.unit_cost
        cost_basis += cost
        remaining -= used
        consumed.append(LotConsumption(index, used, lot.unit_cost, cost))

    return FifoAllocation(
        cost_basis=cost_basis,
        quantity=requested,
        consumed=consumed,
    )


@dataclass
class CapitalGainEstimate:
    """Capital gain on a disposal and the tax due on it."""

    gross_proceeds: float
    acquisition_cost: float
    capital_gain: float
    tax_due: float
    net_proceeds: float
    allocation: FifoAllocation

    def to_dict(self) -> dict:
        return {
            "gross_proceeds": self.gross_proceeds,
            "acquisition_cost": self.acquisition_cost,
            "capital_gain": self.capital_gain,
            "tax_due": self.tax_due,
            "net_proceeds": self.net_proceeds,
            "allocation": self.allocation.to_dict(),
        }


def estimate_capital_gain(
    lots: Sequence[AcquisitionLot],
    disposal: DisposalRequest,
    tiers: Optional[Sequence[BracketTier]] = None,
    acquisition_fees: float = 0.0,
    disposal_fees: float = 0.0,
    tolerance: float = EPSILON,
) -> CapitalGainEstimate:
    """
    Estimate the gain on selling ``disposal.quantity`` units out of ``lots``.

    Purchase fees add to the acquisition cost and sale fees reduce the
    transfer value. Tax is computed on positive gains only; a loss owes
    nothing. A zero unit price resolves to zero proceeds.

    Args:
        lots: Acquisition lots, earliest first
        disposal: Quantity and unit price of the sale
        tiers: Bracket table for the gain (defaults to the Spanish savings base)
        acquisition_fees: Fees paid when buying the consumed units
        disposal_fees: Fees paid on the sale

    Returns:
        CapitalGainEstimate
    """
    unit_price = require_non_negative(disposal.unit_price, "disposal.unit_price")
    acquisition_fees = require_non_negative(acquisition_fees, "acquisition_fees")
    disposal_fees = require_non_negative(disposal_fees, "disposal_fees")

    allocation = allocate_fifo(lots, disposal.quantity, tolerance=tolerance)

    gross_proceeds = allocation.quantity * unit_price
    transfer_value = gross_proceeds - disposal_fees
    acquisition_cost = allocation.cost_basis + acquisition_fees
    capital_gain = transfer_value - acquisition_cost

    table = SPANISH_SAVINGS_BASE if tiers is None else tiers
    tax_due = compute_tiered(capital_gain, table) if capital_gain > 0 else 0.0
    if capital_gain < 0:
        logger.debug(f"Disposal realises a loss of {-capital_gain:.2f}")

    return CapitalGainEstimate(
        gross_proceeds=gross_proceeds,
        acquisition_cost=acquisition_cost,
        capital_gain=capital_gain,
        tax_due=tax_due,
        net_proceeds=gross_proceeds - tax_due,
        allocation=allocation,
    )
