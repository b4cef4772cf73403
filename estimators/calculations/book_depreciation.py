"""
Accounting Depreciation Methods

Straight-line, declining-balance and sum-of-the-years'-digits schedules for
the book value of an asset. Amounts are rounded to cents and the last year
is adjusted so the net book value closes exactly at the residual value.
"""

from typing import Dict, List

from estimators.calculations.validation import (
    require_int_range,
    require_non_negative,
    round_currency,
)
from estimators.errors import ValidationError

METHODS = ("straight_line", "declining_balance", "sum_of_digits")
MAX_USEFUL_LIFE = 50


def declining_balance_coefficient(useful_life: int) -> float:
    """Multiplier on the straight-line rate for declining balance."""
    if useful_life < 5:
        return 1.5
    if useful_life < 8:
        return 2.0
    return 2.5


def _validate(cost: float, residual_value: float, useful_life: int):
    cost = require_non_negative(cost, "cost")
    residual_value = require_non_negative(residual_value, "residual_value")
    if residual_value > cost:
        raise ValidationError("residual_value", "must not exceed the cost")
    useful_life = require_int_range(useful_life, "useful_life", 1, MAX_USEFUL_LIFE)
    return cost, residual_value, useful_life


def _row(year: int, allowance: float, accumulated: float, net: float) -> Dict:
    return {
        "year": year,
        "allowance": allowance,
        "accumulated": accumulated,
        "net_book_value": net,
    }


def _close_at_residual(table: List[Dict], residual_value: float) -> List[Dict]:
    """Push any rounding difference into the last row."""
    last = table[-1]
    target = round_currency(residual_value)
    if len(table) > 1 and last["net_book_value"] != target:
        diff = round_currency(last["net_book_value"] - target)
        last["allowance"] = round_currency(last["allowance"] + diff)
        last["accumulated"] = round_currency(last["accumulated"] + diff)
        last["net_book_value"] = target
    return table


def straight_line(cost: float, residual_value: float, useful_life: int) -> List[Dict]:
    """Equal allowances over the useful life."""
    cost, residual_value, useful_life = _validate(cost, residual_value, useful_life)
    base = cost - residual_value
    table = [_row(0, 0.0, 0.0, round_currency(cost))]
    if base == 0:
        return table

    allowance = round_currency(base / useful_life)
    accumulated = 0.0
    for year in range(1, useful_life + 1):
        outstanding = round_currency(base - accumulated)
        amount = outstanding if year == useful_life else min(allowance, outstanding)
        accumulated = round_currency(accumulated + amount)
        table.append(_row(year, amount, accumulated, round_currency(cost - accumulated)))
    return table


def declining_balance(cost: float, residual_value: float, useful_life: int) -> List[Dict]:
    """
    Fixed percentage of the opening net value each year.

    The rate is the straight-line rate times ``declining_balance_coefficient``;
    no year takes the net value below the residual.
    """
    cost, residual_value, useful_life = _validate(cost, residual_value, useful_life)
    table = [_row(0, 0.0, 0.0, round_currency(cost))]
    if cost - residual_value == 0:
        return table

    rate = declining_balance_coefficient(useful_life) / useful_life
    net = cost
    accumulated = 0.0
    for year in range(1, useful_life + 1):
        amount = round_currency(net * rate)
        if round_currency(net - amount) < residual_value:
            amount = round_currency(net - residual_value)
        accumulated = round_currency(accumulated + amount)
        net = round_currency(net - amount)
        table.append(_row(year, amount, accumulated, net))
    return _close_at_residual(table, residual_value)


def sum_of_digits(cost: float, residual_value: float, useful_life: int) -> List[Dict]:
    """Allowances weighted by remaining life over the sum of the years' digits."""
    cost, residual_value, useful_life = _validate(cost, residual_value, useful_life)
    base = cost - residual_value
    table = [_row(0, 0.0, 0.0, round_currency(cost))]
    if base == 0:
        return table

    digits = useful_life * (useful_life + 1) / 2
    accumulated = 0.0
    for year in range(1, useful_life + 1):
        if year == useful_life:
            amount = round_currency(base - accumulated)
        else:
            amount = round_currency(base * (useful_life - year + 1) / digits)
        accumulated = round_currency(accumulated + amount)
        table.append(_row(year, amount, accumulated, round_currency(cost - accumulated)))
    return _close_at_residual(table, residual_value)


def book_schedule(
    method: str, cost: float, residual_value: float, useful_life: int
) -> List[Dict]:
    """Dispatch to one of ``METHODS``."""
    if method == "straight_line":
        return straight_line(cost, residual_value, useful_life)
    if method == "declining_balance":
        return declining_balance(cost, residual_value, useful_life)
    if method == "sum_of_digits":
        return sum_of_digits(cost, residual_value, useful_life)
    raise ValidationError("method", f"must be one of {', '.join(METHODS)}")
