"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results. Engine errors
propagate to the handlers registered in ``estimators.main``.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Dict, List, Optional

from estimators.calculations import book_depreciation, brackets, depreciation, lots
from estimators.calculations.dates import parse_iso_date
from estimators.catalog.registry import CatalogRegistry, get_catalog_registry
from estimators.conditions import (
    AllOf,
    AnyOf,
    Condition,
    Equals,
    GreaterThan,
    IsTrue,
    visible_fields,
)
from estimators.config import Settings, get_settings
from estimators.errors import ValidationError

router = APIRouter()


class TierInput(BaseModel):
    """One bracket; omit ``upper_bound`` for the top tier."""

    upper_bound: Optional[float] = None
    rate: float


def resolve_tiers(tiers: Optional[List[TierInput]], preset: Optional[str]):
    """Caller-supplied tiers win over a named preset."""
    if tiers:
        return tuple(brackets.make_tier(t.upper_bound, t.rate) for t in tiers)
    if preset:
        return brackets.get_preset(preset)
    raise ValidationError("tiers", "provide a bracket table or a preset name")


class TieredInput(BaseModel):
    """Input for a progressive bracket calculation."""

    base: float
    tiers: Optional[List[TierInput]] = None
    preset: Optional[str] = None


class TieredResponse(BaseModel):
    amount: float
    effective_rate: float
    marginal_rate: float
    breakdown: List[dict]


@router.post("/tiered", response_model=TieredResponse)
async def calculate_tiered(inputs: TieredInput):
    """Apply a progressive bracket table to a base."""
    table = resolve_tiers(inputs.tiers, inputs.preset)
    amount = brackets.compute_tiered(inputs.base, table)

    return TieredResponse(
        amount=amount,
        effective_rate=brackets.effective_rate(inputs.base, table),
        marginal_rate=brackets.marginal_rate(inputs.base, table),
        breakdown=brackets.tier_breakdown(inputs.base, table),
    )


@router.get("/presets/{name}")
async def get_bracket_preset(name: str):
    """Return a built-in bracket table."""
    table = brackets.get_preset(name)
    return {
        "name": name,
        "tiers": [
            {"upper_bound": None if t.is_unbounded else t.upper_bound, "rate": t.rate}
            for t in table
        ],
    }


class LotInput(BaseModel):
    """Acquisition lot schema."""

    quantity: float
    unit_cost: float


class FifoInput(BaseModel):
    """Input for FIFO cost-basis allocation."""

    lots: List[LotInput]
    disposal_quantity: float


def _lots(items: List[LotInput]) -> List[lots.AcquisitionLot]:
    return [lots.AcquisitionLot(quantity=i.quantity, unit_cost=i.unit_cost) for i in items]


@router.post("/fifo")
async def calculate_fifo(
    inputs: FifoInput, settings: Settings = Depends(get_settings)
):
    """Cost basis of a disposal, consuming the earliest lots first."""
    allocation = lots.allocate_fifo(
        _lots(inputs.lots),
        inputs.disposal_quantity,
        tolerance=settings.quantity_tolerance,
    )
    return allocation.to_dict()


class CapitalGainInput(BaseModel):
    """Input for a capital gain estimate."""

    lots: List[LotInput]
    quantity: float
    unit_price: float
    acquisition_fees: float = 0.0
    disposal_fees: float = 0.0
    tiers: Optional[List[TierInput]] = None
    preset: Optional[str] = "es_savings"


@router.post("/capital-gain")
async def calculate_capital_gain(
    inputs: CapitalGainInput, settings: Settings = Depends(get_settings)
):
    """FIFO cost basis, capital gain and the tax on it."""
    estimate = lots.estimate_capital_gain(
        _lots(inputs.lots),
        lots.DisposalRequest(quantity=inputs.quantity, unit_price=inputs.unit_price),
        tiers=resolve_tiers(inputs.tiers, inputs.preset),
        acquisition_fees=inputs.acquisition_fees,
        disposal_fees=inputs.disposal_fees,
        tolerance=settings.quantity_tolerance,
    )
    return estimate.to_dict()


class IncentiveInput(BaseModel):
    """Eco incentive request."""

    percent: float = 100.0


class DepreciationInput(BaseModel):
    """Input for a tax depreciation plan."""

    regime: str = "directa_simplificada"
    category_id: str
    gross_value: float
    residual_value: float = 0.0
    placed_in_service_date: str
    is_used_asset: bool = False
    incentive: Optional[IncentiveInput] = None
    business_use_exclusive: bool = True
    vat_rate_percent: float = 21.0
    vat_deductible_percent: float = 50.0


@router.post("/depreciation")
async def calculate_depreciation(
    inputs: DepreciationInput,
    registry: CatalogRegistry = Depends(get_catalog_registry),
    settings: Settings = Depends(get_settings),
):
    """Year-by-year depreciation plan for a catalog category."""
    snapshot = registry.snapshot()
    category = snapshot.get(inputs.regime, inputs.category_id)

    plan = depreciation.build_plan(
        category=category,
        gross_value=inputs.gross_value,
        residual_value=inputs.residual_value,
        placed_in_service_date=inputs.placed_in_service_date,
        is_used_asset=inputs.is_used_asset,
        incentive=(
            depreciation.Incentive(percent=inputs.incentive.percent)
            if inputs.incentive
            else None
        ),
        policy=depreciation.IncentivePolicy.from_years(
            settings.incentive_free_allocation_years,
            settings.incentive_accelerated_years,
        ),
        business_use_exclusive=inputs.business_use_exclusive,
        vat_rate_percent=inputs.vat_rate_percent,
        vat_deductible_percent=inputs.vat_deductible_percent,
        guard_cap=settings.plan_guard_cap,
    )

    result = plan.to_dict()
    result["category"] = category.to_dict()
    result["catalog_version"] = snapshot.version
    return result


def depreciation_field_conditions(
    policy: depreciation.IncentivePolicy,
) -> Dict[str, Optional[Condition]]:
    """
    Visibility rules for the depreciation form inputs.

    The incentive share is only offered for categories that allow it and
    for placement years the policy covers; VAT recovery only matters once
    a VAT rate is entered.
    """
    eligible_years = sorted(policy.free_allocation_years | policy.accelerated_years)
    return {
        "regime": None,
        "category_id": None,
        "gross_value": None,
        "residual_value": None,
        "placed_in_service_date": None,
        "is_used_asset": None,
        "incentive_percent": AllOf(
            conditions=[
                IsTrue(field="allows_incentive"),
                AnyOf(
                    conditions=[
                        Equals(field="placement_year", value=year)
                        for year in eligible_years
                    ]
                ),
            ]
        ),
        "business_use_exclusive": None,
        "vat_rate_percent": None,
        "vat_deductible_percent": GreaterThan(field="vat_rate_percent", value=0),
    }


class DepreciationFormInput(BaseModel):
    """Current state of the depreciation form."""

    regime: str = "directa_simplificada"
    category_id: str
    placed_in_service_date: Optional[str] = None
    vat_rate_percent: float = 21.0


@router.post("/depreciation/form")
async def depreciation_form(
    inputs: DepreciationFormInput,
    registry: CatalogRegistry = Depends(get_catalog_registry),
    settings: Settings = Depends(get_settings),
):
    """Which depreciation inputs to show for the current form state."""
    category = registry.get(inputs.regime, inputs.category_id)
    conditions = depreciation_field_conditions(
        depreciation.IncentivePolicy.from_years(
            settings.incentive_free_allocation_years,
            settings.incentive_accelerated_years,
        )
    )

    state = {
        "allows_incentive": category.allows_incentive,
        "vat_rate_percent": inputs.vat_rate_percent,
    }
    if inputs.placed_in_service_date:
        state["placement_year"] = parse_iso_date(
            inputs.placed_in_service_date, "placed_in_service_date"
        ).year

    return {
        "visible_fields": visible_fields(conditions, state),
        "conditions": {
            name: condition.model_dump() if condition is not None else None
            for name, condition in conditions.items()
        },
    }


class BookDepreciationInput(BaseModel):
    """Input for an accounting depreciation table."""

    method: str = "straight_line"
    cost: float
    residual_value: float = 0.0
    useful_life: int


@router.post("/book-depreciation")
async def calculate_book_depreciation(inputs: BookDepreciationInput):
    """Straight-line, declining-balance or sum-of-digits schedule."""
    schedule = book_depreciation.book_schedule(
        inputs.method, inputs.cost, inputs.residual_value, inputs.useful_life
    )
    return {
        "method": inputs.method,
        "schedule": schedule,
        "total_allowance": schedule[-1]["accumulated"],
    }
