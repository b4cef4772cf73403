"""
Tests for typed input visibility conditions.
"""

import pytest
from pydantic import ValidationError as SchemaError

from estimators.conditions import (
    AllOf,
    AnyOf,
    Equals,
    GreaterThan,
    IsTrue,
    NotEquals,
    is_visible,
    parse_condition,
    visible_fields,
)


class TestConditions:
    """Test condition evaluation."""

    def test_no_condition_is_visible(self):
        assert is_visible(None, {})

    def test_equals(self):
        condition = Equals(field="regime", value="Forfettario")
        assert is_visible(condition, {"regime": "Forfettario"})
        assert not is_visible(condition, {"regime": "Ordinario"})
        assert not is_visible(condition, {})

    def test_not_equals(self):
        condition = NotEquals(field="regime", value="Forfettario")
        assert is_visible(condition, {"regime": "Ordinario"})

    def test_is_true(self):
        condition = IsTrue(field="consider_dilution")
        assert is_visible(condition, {"consider_dilution": True})
        assert not is_visible(condition, {"consider_dilution": "true"})

    def test_greater_than(self):
        condition = GreaterThan(field="income", value=28000)
        assert is_visible(condition, {"income": 30000})
        assert not is_visible(condition, {"income": 28000})
        assert not is_visible(condition, {"income": "lots"})

    def test_composites(self):
        condition = AllOf(
            conditions=[
                Equals(field="regime", value="Ordinario"),
                AnyOf(conditions=[IsTrue(field="has_expenses"), GreaterThan(field="income", value=0)]),
            ]
        )
        assert is_visible(condition, {"regime": "Ordinario", "has_expenses": False, "income": 10})
        assert not is_visible(condition, {"regime": "Ordinario", "has_expenses": False, "income": 0})

    def test_parse_from_json(self):
        condition = parse_condition(
            {
                "kind": "any_of",
                "conditions": [
                    {"kind": "equals", "field": "platform", "value": "declarative"},
                    {"kind": "is_true", "field": "repairs_needed"},
                ],
            }
        )
        assert isinstance(condition, AnyOf)
        assert is_visible(condition, {"repairs_needed": True})

    def test_unknown_kind_rejected(self):
        with pytest.raises(SchemaError):
            parse_condition({"kind": "regex", "field": "x", "value": ".*"})

    def test_visible_fields(self):
        conditions = {
            "regime": None,
            "expenses": Equals(field="regime", value="Ordinario"),
            "startup_rate": Equals(field="regime", value="Forfettario"),
        }
        assert visible_fields(conditions, {"regime": "Ordinario"}) == ["regime", "expenses"]


class TestDepreciationFormConditions:
    """Test the visibility rules attached to the depreciation form."""

    def test_incentive_follows_policy_years(self):
        from estimators.api.calculations import depreciation_field_conditions
        from estimators.calculations.depreciation import IncentivePolicy

        conditions = depreciation_field_conditions(IncentivePolicy.from_years([2030], [2029]))
        state = {"allows_incentive": True, "vat_rate_percent": 21.0}
        assert "incentive_percent" in visible_fields(conditions, {**state, "placement_year": 2029})
        assert "incentive_percent" in visible_fields(conditions, {**state, "placement_year": 2030})
        assert "incentive_percent" not in visible_fields(conditions, {**state, "placement_year": 2024})
        assert "incentive_percent" not in visible_fields(conditions, state)

    def test_round_trip_through_json(self):
        from estimators.api.calculations import depreciation_field_conditions
        from estimators.calculations.depreciation import IncentivePolicy

        condition = depreciation_field_conditions(IncentivePolicy())["incentive_percent"]
        restored = parse_condition(condition.model_dump())
        state = {"allows_incentive": True, "placement_year": 2025}
        assert is_visible(restored, state)
        assert not is_visible(restored, {**state, "allows_incentive": False})
