"""Stablecoin and native pricing: ceiling rounding, precision, monotonicity."""

import pytest

from helpers import T0, sample_project, to_scaled
from launchpad.sale.pricing import (
    ceil_div,
    discounted_usd_price_e6,
    required_payment_native,
    required_payment_stable,
)


@pytest.mark.parametrize(
    "a,b,expected",
    [(0, 7, 0), (14, 7, 2), (15, 7, 3), (1, 10**18, 1), (10**30, 10**12, 10**18)],
)
def test_ceil_div(a, b, expected):
    assert ceil_div(a, b) == expected


def test_stable_cost_at_one_dollar_is_exact():
    project = sample_project(T0, usd_price_per_token_e6=1_000_000, max_allocate_amount=1000)
    assert required_payment_stable(project, 1000) == 1000


def test_stable_cost_exact_when_divisible():
    # 0.001 USD per token, 6 decimals: 1000 units cost exactly 1 USDC unit
    project = sample_project(T0, usd_price_per_token_e6=1000)
    assert required_payment_stable(project, 1000) == 1
    assert required_payment_stable(project, 2000) == 2


def test_stable_cost_rounds_up_by_one_unit():
    project = sample_project(T0, usd_price_per_token_e6=1000)
    for amount in (1, 999, 1001, 1999):
        truncated = project.usd_price_per_token_e6 * amount // 10**project.token_decimals
        assert required_payment_stable(project, amount) == truncated + 1


def test_stable_cost_is_monotonic():
    project = sample_project(T0, usd_price_per_token_e6=333_333, token_decimals=4)
    costs = [required_payment_stable(project, amount) for amount in range(0, 3000)]
    assert costs == sorted(costs)


def test_native_cost_with_discount():
    # 0.2 USD per token, 95% for native buyers, native at 0.1 USD
    project = sample_project(
        T0,
        token_decimals=18,
        usd_price_per_token_e6=200_000,
        max_allocate_amount=to_scaled(50, 18),
    )
    price_e8 = 10_000_000
    assert required_payment_native(project, to_scaled(50, 18), price_e8) == to_scaled(95, 18)
    assert required_payment_native(project, to_scaled(10, 18), price_e8) == to_scaled(19, 18)
    assert required_payment_native(project, to_scaled(20, 18), price_e8) == to_scaled(38, 18)


def test_native_cost_rounds_up():
    project = sample_project(T0, token_decimals=18, usd_price_per_token_e6=200_000)
    # 1 unit costs 1.9 native units before rounding
    assert required_payment_native(project, 1, 10_000_000) == 2


def test_native_cost_handles_large_amounts_without_precision_loss():
    project = sample_project(T0, token_decimals=18, usd_price_per_token_e6=123_456_789)
    amount = to_scaled(10**12, 18)
    cost = required_payment_native(project, amount, 7_654_321)
    numerator = 123_456_789 * 9500 * amount * 10**8 * 10**18
    denominator = 10_000 * 10**18 * 7_654_321 * 10**6
    assert cost == -(-numerator // denominator)


def test_discounted_usd_price():
    project = sample_project(T0, usd_price_per_token_e6=200_000)
    assert discounted_usd_price_e6(project) == 190_000
