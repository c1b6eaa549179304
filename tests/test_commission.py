from __future__ import annotations

import pytest

from dealer_credit.commission.rules import (
    DEFAULT_COMMISSION_TIERS,
    PaymentMethod,
    TieredCommission,
    calculate_commission,
    calculate_commission_from_profit,
    calculate_tiered_commission,
    get_commission_config,
)


def test_commission_configs():
    cash = get_commission_config("cash")
    assert (cash.base_percentage, cash.bonus_percentage, cash.min_amount, cash.max_amount) == (
        1.0,
        0.5,
        100_000,
        5_000_000,
    )
    credit = get_commission_config(PaymentMethod.CREDIT)
    assert (credit.base_percentage, credit.bonus_percentage, credit.min_amount, credit.max_amount) == (
        0.5,
        0.25,
        50_000,
        3_000_000,
    )


def test_unknown_payment_method():
    with pytest.raises(ValueError):
        get_commission_config("barter")


def test_commission_exactly_at_floor():
    assert calculate_commission(10_000_000, "cash", False) == 100_000


def test_commission_floor_and_ceiling():
    assert calculate_commission(5_000_000, "credit") == 50_000
    assert calculate_commission(1_000_000_000, "cash") == 5_000_000
    assert calculate_commission(1_000_000_000, "credit", True) == 3_000_000


def test_commission_target_bonus():
    assert calculate_commission(20_000_000, "credit", True) == 150_000
    assert calculate_commission(200_000_000, "cash", True) == 3_000_000
    assert calculate_commission(200_000_000, "cash", False) == 2_000_000


def test_commission_from_profit():
    assert calculate_commission_from_profit(110_000_000, 100_000_000) == 1_000_000
    assert calculate_commission_from_profit(110_000_000, 100_000_000, 15) == 1_500_000
    assert calculate_commission_from_profit(100_000_000, 100_000_000) == 0
    assert calculate_commission_from_profit(90_000_000, 100_000_000) == 0


@pytest.mark.parametrize(
    "price,expected",
    [
        (50_000_000, 500_000),  # threshold is inclusive
        (50_000_001, 625_000),
        (150_000_000, 2_250_000),
        (300_000_000, 6_000_000),
    ],
)
def test_tiered_commission(price, expected):
    assert calculate_tiered_commission(price) == expected


def test_default_tiers_end_with_open_bracket():
    assert DEFAULT_COMMISSION_TIERS[-1].threshold == float("inf")


def test_tiered_commission_falls_back_to_one_percent():
    assert calculate_tiered_commission(10_000_000, tiers=[]) == 100_000
    capped = [TieredCommission(threshold=5_000_000, percentage=3.0)]
    assert calculate_tiered_commission(10_000_000, tiers=capped) == 100_000
    zero = [TieredCommission(threshold=100_000_000, percentage=0)]
    assert calculate_tiered_commission(10_000_000, tiers=zero) == 100_000
