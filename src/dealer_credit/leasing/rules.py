from __future__ import annotations

import math
from dataclasses import dataclass, field

from dealer_credit.util.money import format_percent, group_thousands, round_half_up
from dealer_credit.vehicle import VehicleCategory, VehicleCondition, as_category, as_condition

_MOTOR = VehicleCategory.MOTOR
_MOBIL = VehicleCategory.MOBIL
_BARU = VehicleCondition.BARU
_BEKAS = VehicleCondition.BEKAS

# Used vehicles get shorter tenors and a higher minimum down payment.
_TENORS: dict[tuple[VehicleCategory, VehicleCondition], tuple[int, ...]] = {
    (_MOTOR, _BARU): (12, 18, 24, 30, 36),
    (_MOTOR, _BEKAS): (12, 18, 24),
    (_MOBIL, _BARU): (12, 24, 36, 48, 60),
    (_MOBIL, _BEKAS): (12, 24, 36, 48),
}

_DP_LIMITS: dict[tuple[VehicleCategory, VehicleCondition], tuple[float, float]] = {
    (_MOTOR, _BARU): (10, 50),
    (_MOTOR, _BEKAS): (20, 50),
    (_MOBIL, _BARU): (15, 50),
    (_MOBIL, _BEKAS): (25, 50),
}

# Percent flat per year, before the tenor premium.
_BASE_INTEREST_RATES: dict[tuple[VehicleCategory, VehicleCondition], float] = {
    (_MOTOR, _BARU): 15,
    (_MOTOR, _BEKAS): 18,
    (_MOBIL, _BARU): 12,
    (_MOBIL, _BEKAS): 15,
}

# Percent of vehicle price per year.
_ANNUAL_INSURANCE_RATES: dict[tuple[VehicleCategory, VehicleCondition], float] = {
    (_MOTOR, _BARU): 2.5,
    (_MOTOR, _BEKAS): 3.0,
    (_MOBIL, _BARU): 2.8,
    (_MOBIL, _BEKAS): 3.5,
}

_MIN_VEHICLE_PRICE: dict[VehicleCategory, int] = {
    _MOTOR: 5_000_000,
    _MOBIL: 50_000_000,
}

TENOR_PREMIUM_PER_YEAR = 0.5


@dataclass(frozen=True)
class DpLimits:
    min: float
    max: float


@dataclass(frozen=True)
class LeasingRateConfig:
    tenor: int
    interest_rate: float
    min_dp_percentage: float
    max_dp_percentage: float
    admin_fee: int
    insurance_rate: float


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _key(
    category: VehicleCategory | str, condition: VehicleCondition | str
) -> tuple[VehicleCategory, VehicleCondition]:
    return as_category(category), as_condition(condition)


def get_available_tenors(category: VehicleCategory | str, condition: VehicleCondition | str) -> list[int]:
    """Tenors (months) offered for a vehicle class, ascending."""
    return list(_TENORS[_key(category, condition)])


def get_dp_limits(category: VehicleCategory | str, condition: VehicleCondition | str) -> DpLimits:
    lo, hi = _DP_LIMITS[_key(category, condition)]
    return DpLimits(min=lo, max=hi)


def get_default_interest_rate(
    category: VehicleCategory | str,
    condition: VehicleCondition | str,
    tenor_months: int,
) -> float:
    """
    Default flat annual rate (percent) when no leasing partner rate is available.

    Every full year of tenor adds TENOR_PREMIUM_PER_YEAR percentage points.
    """
    base = _BASE_INTEREST_RATES[_key(category, condition)]
    premium = math.floor(tenor_months / 12) * TENOR_PREMIUM_PER_YEAR
    return base + premium


def calculate_default_admin_fee(vehicle_price: float, category: VehicleCategory | str) -> int:
    if as_category(category) is _MOTOR:
        # Stepped flat fee.
        if vehicle_price < 20_000_000:
            return 500_000
        if vehicle_price < 50_000_000:
            return 750_000
        return 1_000_000

    fee = vehicle_price * 0.01
    return max(1_000_000, round_half_up(fee / 100_000) * 100_000)


def get_annual_insurance_rate(category: VehicleCategory | str, condition: VehicleCondition | str) -> float:
    return _ANNUAL_INSURANCE_RATES[_key(category, condition)]


def calculate_default_insurance_fee(
    vehicle_price: float,
    category: VehicleCategory | str,
    condition: VehicleCondition | str,
    tenor_months: int,
) -> int:
    """Total premium over the whole tenor, rounded to the nearest 100,000."""
    annual_rate = get_annual_insurance_rate(category, condition)
    years = tenor_months / 12
    total_premium = vehicle_price * (annual_rate / 100) * years
    return round_half_up(total_premium / 100_000) * 100_000


def validate_credit_application(
    vehicle_price: float,
    down_payment: float,
    tenor: int,
    category: VehicleCategory | str,
    condition: VehicleCondition | str,
) -> ValidationResult:
    """
    Check an application against dealer policy.

    All checks run; errors block the application, warnings are advisory. A down payment
    above the usual maximum is only a warning.
    """
    cat, cond = _key(category, condition)
    errors: list[str] = []
    warnings: list[str] = []

    if tenor not in _TENORS[(cat, cond)]:
        errors.append(f"Tenor {tenor} bulan tidak tersedia untuk {cat.value} {cond.value}")

    limits = get_dp_limits(cat, cond)
    # A non-positive price already fails the price floor below; count its DP as 0%.
    dp_percentage = (down_payment / vehicle_price) * 100 if vehicle_price > 0 else 0.0
    if dp_percentage < limits.min:
        errors.append(f"DP minimal {format_percent(limits.min)}% untuk {cat.value} {cond.value}")
    if dp_percentage > limits.max:
        warnings.append(f"DP {dp_percentage:.1f}% melebihi batas umum {format_percent(limits.max)}%")

    min_price = _MIN_VEHICLE_PRICE[cat]
    if vehicle_price < min_price:
        errors.append(f"Harga {cat.value} minimal Rp {group_thousands(min_price)}")

    if tenor > 36 and cat is _MOTOR:
        warnings.append("Tenor > 36 bulan untuk motor tidak umum")
    if tenor > 48 and cond is _BEKAS:
        warnings.append("Tenor > 48 bulan untuk kendaraan bekas berisiko tinggi")

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def get_credit_config(
    vehicle_price: float,
    category: VehicleCategory | str,
    condition: VehicleCondition | str,
    tenor: int,
) -> LeasingRateConfig:
    """Recommended defaults used to pre-fill a credit calculation."""
    limits = get_dp_limits(category, condition)
    return LeasingRateConfig(
        tenor=tenor,
        interest_rate=get_default_interest_rate(category, condition, tenor),
        min_dp_percentage=limits.min,
        max_dp_percentage=limits.max,
        admin_fee=calculate_default_admin_fee(vehicle_price, category),
        insurance_rate=get_annual_insurance_rate(category, condition),
    )
