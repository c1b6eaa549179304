from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from dealer_credit.util.money import round_half_up


class PaymentMethod(str, Enum):
    CASH = "cash"
    CREDIT = "credit"


@dataclass(frozen=True)
class CommissionConfig:
    base_percentage: float
    bonus_percentage: float  # added when the sales target is met
    min_amount: int
    max_amount: int


@dataclass(frozen=True)
class TieredCommission:
    threshold: float  # upper bound of the selling price, inclusive
    percentage: float


# Credit sales pay less: the leasing partner pays its own commission on top.
_COMMISSION_CONFIGS: dict[PaymentMethod, CommissionConfig] = {
    PaymentMethod.CASH: CommissionConfig(
        base_percentage=1.0,
        bonus_percentage=0.5,
        min_amount=100_000,
        max_amount=5_000_000,
    ),
    PaymentMethod.CREDIT: CommissionConfig(
        base_percentage=0.5,
        bonus_percentage=0.25,
        min_amount=50_000,
        max_amount=3_000_000,
    ),
}

DEFAULT_COMMISSION_TIERS: tuple[TieredCommission, ...] = (
    TieredCommission(threshold=50_000_000, percentage=1.0),
    TieredCommission(threshold=100_000_000, percentage=1.25),
    TieredCommission(threshold=200_000_000, percentage=1.5),
    TieredCommission(threshold=math.inf, percentage=2.0),
)

FALLBACK_TIER_PERCENTAGE = 1.0


def get_commission_config(payment_method: PaymentMethod | str) -> CommissionConfig:
    return _COMMISSION_CONFIGS[PaymentMethod(payment_method)]


def calculate_commission(
    selling_price: float,
    payment_method: PaymentMethod | str,
    is_target_met: bool = False,
) -> int:
    """
    Percentage of the selling price, clamped to the method's [min, max] amount.

    The floor is applied before the ceiling.
    """
    config = get_commission_config(payment_method)

    percentage = config.base_percentage
    if is_target_met:
        percentage += config.bonus_percentage

    commission = selling_price * (percentage / 100)
    commission = max(config.min_amount, commission)
    commission = min(config.max_amount, commission)
    return round_half_up(commission)


def calculate_commission_from_profit(
    selling_price: float,
    purchase_price: float,
    commission_percentage: float = 10,
) -> int:
    """Share of the gross margin; no commission on a sale at or below cost."""
    profit = selling_price - purchase_price
    if profit <= 0:
        return 0
    return round_half_up(profit * (commission_percentage / 100))


def calculate_tiered_commission(
    selling_price: float,
    tiers: Sequence[TieredCommission] = DEFAULT_COMMISSION_TIERS,
) -> int:
    # Tiers must be ordered by ascending threshold; the first one covering the price wins.
    tier = next((t for t in tiers if selling_price <= t.threshold), None)
    percentage = (tier.percentage if tier is not None else 0) or FALLBACK_TIER_PERCENTAGE
    return round_half_up(selling_price * (percentage / 100))
