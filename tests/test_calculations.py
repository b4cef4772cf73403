"""
Tests for the bracket and FIFO cost-basis calculations.
"""

import math
import pytest
from estimators.calculations.brackets import (
    ITALIAN_IRPEF,
    SPANISH_SAVINGS_BASE,
    compute_tiered,
    effective_rate,
    get_preset,
    make_tier,
    marginal_rate,
    tier_breakdown,
    tiers_from_spans,
)
from estimators.calculations.lots import (
    AcquisitionLot,
    DisposalRequest,
    allocate_fifo,
    estimate_capital_gain,
)
from estimators.errors import (
    ConfigurationError,
    InsufficientQuantityError,
    NotFoundError,
    ValidationError,
)

CUMULATIVE_TIERS = [
    make_tier(6000, 19),
    make_tier(50000, 21),
    make_tier(200000, 23),
    make_tier(300000, 27),
    make_tier(None, 28),
]


class TestTieredCalculations:
    """Test progressive bracket evaluation."""

    def test_zero_base(self):
        """Test a zero base owes nothing."""
        assert compute_tiered(0, CUMULATIVE_TIERS) == 0

    def test_two_tier_example(self):
        """Test 10,000 spans the first two savings brackets."""
        # 6000 x 19% + 4000 x 21%
        assert compute_tiered(10000, CUMULATIVE_TIERS) == pytest.approx(1980)

    def test_top_tier(self):
        """Test a base reaching the unbounded tier."""
        expected = 6000 * 0.19 + 44000 * 0.21 + 150000 * 0.23 + 100000 * 0.27 + 50000 * 0.28
        assert compute_tiered(350000, CUMULATIVE_TIERS) == pytest.approx(expected)

    def test_exactly_on_bound(self):
        """Test a base equal to an upper bound stays in the lower tier."""
        assert compute_tiered(6000, CUMULATIVE_TIERS) == pytest.approx(1140)

    def test_non_decreasing(self):
        """Test the result never drops as the base grows."""
        previous = 0.0
        for base in range(0, 400001, 2500):
            amount = compute_tiered(base, CUMULATIVE_TIERS)
            assert amount >= previous
            previous = amount

    def test_continuous_at_bounds(self):
        """Test there is no jump across a tier boundary."""
        for bound in (6000, 50000, 200000, 300000):
            below = compute_tiered(bound - 1e-6, CUMULATIVE_TIERS)
            above = compute_tiered(bound + 1e-6, CUMULATIVE_TIERS)
            assert abs(above - below) < 1e-5

    def test_spans_match_cumulative_bounds(self):
        """Test width-based tables build the same bounds as the preset."""
        assert [t.upper_bound for t in SPANISH_SAVINGS_BASE] == [
            6000, 50000, 200000, 300000, math.inf
        ]
        assert compute_tiered(123456, SPANISH_SAVINGS_BASE) == pytest.approx(
            compute_tiered(123456, CUMULATIVE_TIERS)
        )

    def test_negative_base(self):
        """Test a negative base is rejected with its field."""
        with pytest.raises(ValidationError) as exc:
            compute_tiered(-1, CUMULATIVE_TIERS)
        assert exc.value.field == "base"

    def test_empty_table(self):
        with pytest.raises(ConfigurationError):
            compute_tiered(100, [])

    def test_bounded_final_tier(self):
        """Test a table without an unbounded top tier is rejected."""
        with pytest.raises(ConfigurationError):
            compute_tiered(100, [make_tier(1000, 10), make_tier(5000, 20)])

    def test_not_ascending(self):
        with pytest.raises(ConfigurationError):
            compute_tiered(100, [make_tier(5000, 10), make_tier(1000, 20), make_tier(None, 30)])

    def test_unbounded_tier_must_be_last(self):
        with pytest.raises(ConfigurationError):
            compute_tiered(100, [make_tier(None, 10), make_tier(None, 20)])

    def test_rate_out_of_range(self):
        with pytest.raises(ConfigurationError):
            compute_tiered(100, [make_tier(None, 120)])

    def test_zero_width_span(self):
        with pytest.raises(ConfigurationError):
            tiers_from_spans([(0, 10), (None, 20)])

    def test_breakdown_sums_to_total(self):
        """Test per-tier amounts add up to the total."""
        rows = tier_breakdown(75000, ITALIAN_IRPEF)
        assert len(rows) == 3
        assert rows[-1]["upper_bound"] is None
        assert sum(r["tax"] for r in rows) == pytest.approx(compute_tiered(75000, ITALIAN_IRPEF))

    def test_marginal_and_effective_rate(self):
        assert marginal_rate(10000, ITALIAN_IRPEF) == 23
        assert marginal_rate(28000, ITALIAN_IRPEF) == 35
        assert marginal_rate(90000, ITALIAN_IRPEF) == 43
        assert effective_rate(0, ITALIAN_IRPEF) == 0
        assert effective_rate(10000, CUMULATIVE_TIERS) == pytest.approx(19.8)

    def test_presets(self):
        assert get_preset("it_irpef") is ITALIAN_IRPEF
        with pytest.raises(NotFoundError):
            get_preset("unknown")


class TestFifoAllocation:
    """Test FIFO lot consumption."""

    def test_partial_second_lot(self):
        """Test consuming one full lot and part of the next."""
        allocation = allocate_fifo(
            [AcquisitionLot(1, 20000), AcquisitionLot(0.5, 30000)], 1.25
        )
        assert allocation.cost_basis == pytest.approx(27500)
        assert [c.quantity for c in allocation.consumed] == [1, 0.25]

    def test_stops_after_disposal_is_covered(self):
        """Test later lots are left untouched."""
        allocation = allocate_fifo(
            [AcquisitionLot(2, 100), AcquisitionLot(3, 200), AcquisitionLot(5, 300)], 2
        )
        assert allocation.cost_basis == pytest.approx(200)
        assert len(allocation.consumed) == 1

    @pytest.mark.parametrize("split_at", [0.1, 0.5, 0.75, 0.999])
    def test_split_lot_invariance(self, split_at):
        """Test splitting a lot into two with the same totals changes nothing."""
        original = [AcquisitionLot(1, 20000), AcquisitionLot(2, 25000), AcquisitionLot(1, 40000)]
        split = [
            AcquisitionLot(1, 20000),
            AcquisitionLot(2 * split_at, 25000),
            AcquisitionLot(2 * (1 - split_at), 25000),
            AcquisitionLot(1, 40000),
        ]
        for disposal in (0.5, 1.5, 2.9, 3.5, 4):
            assert allocate_fifo(split, disposal).cost_basis == pytest.approx(
                allocate_fifo(original, disposal).cost_basis
            )

    def test_oversell_rejected(self):
        """Test selling more than held fails without a partial result."""
        with pytest.raises(InsufficientQuantityError) as exc:
            allocate_fifo([AcquisitionLot(1, 100), AcquisitionLot(0.5, 200)], 1.5 + 1e-6)
        assert exc.value.available == pytest.approx(1.5)

    def test_oversell_within_tolerance(self):
        """Test rounding noise below the tolerance is accepted."""
        allocation = allocate_fifo([AcquisitionLot(1, 100), AcquisitionLot(0.5, 200)], 1.5 + 1e-10)
        assert allocation.cost_basis == pytest.approx(200)

    def test_zero_unit_cost_allowed(self):
        allocation = allocate_fifo([AcquisitionLot(1, 0), AcquisitionLot(1, 50)], 1.5)
        assert allocation.cost_basis == pytest.approx(25)

    def test_invalid_lot_names_field(self):
        with pytest.raises(ValidationError) as exc:
            allocate_fifo([AcquisitionLot(1, 10), AcquisitionLot(0, 10)], 0.5)
        assert exc.value.field == "lots[1].quantity"

    def test_non_positive_disposal(self):
        with pytest.raises(ValidationError) as exc:
            allocate_fifo([AcquisitionLot(1, 10)], 0)
        assert exc.value.field == "disposal_quantity"


class TestCapitalGain:
    """Test capital gain estimates."""

    def test_gain_taxed_with_savings_brackets(self):
        """Test gain on half a coin bought at 20,000 and sold at 40,000."""
        estimate = estimate_capital_gain(
            [AcquisitionLot(1, 20000)], DisposalRequest(quantity=0.5, unit_price=40000)
        )
        assert estimate.gross_proceeds == pytest.approx(20000)
        assert estimate.acquisition_cost == pytest.approx(10000)
        assert estimate.capital_gain == pytest.approx(10000)
        assert estimate.tax_due == pytest.approx(1980)
        assert estimate.net_proceeds == pytest.approx(18020)

    def test_fees_reduce_gain(self):
        estimate = estimate_capital_gain(
            [AcquisitionLot(1, 20000)],
            DisposalRequest(quantity=0.5, unit_price=40000),
            acquisition_fees=100,
            disposal_fees=50,
        )
        assert estimate.capital_gain == pytest.approx(9850)

    def test_loss_owes_nothing(self):
        estimate = estimate_capital_gain(
            [AcquisitionLot(1, 50000)], DisposalRequest(quantity=1, unit_price=30000)
        )
        assert estimate.capital_gain == pytest.approx(-20000)
        assert estimate.tax_due == 0

    def test_zero_price_resolves_to_zero_proceeds(self):
        estimate = estimate_capital_gain(
            [AcquisitionLot(1, 100)], DisposalRequest(quantity=1, unit_price=0)
        )
        assert estimate.gross_proceeds == 0
        assert estimate.tax_due == 0

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError) as exc:
            estimate_capital_gain([AcquisitionLot(1, 100)], DisposalRequest(quantity=1, unit_price=-1))
        assert exc.value.field == "disposal.unit_price"

    def test_oversell_propagates(self):
        with pytest.raises(InsufficientQuantityError):
            estimate_capital_gain([AcquisitionLot(1, 100)], DisposalRequest(quantity=2, unit_price=10))
