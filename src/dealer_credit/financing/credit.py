from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from dealer_credit.util.money import format_percent, group_thousands, round_half_up


@dataclass(frozen=True)
class CreditCalculationInput:
    vehicle_price: float
    down_payment: float
    tenor: int  # months
    interest_rate: float  # flat percent per year, e.g. 15 for 15%
    admin_fee: float = 0
    insurance_fee: float = 0


@dataclass(frozen=True)
class CreditCalculationResult:
    vehicle_price: float
    down_payment: float
    down_payment_percentage: float
    principal_amount: float  # vehicle price minus down payment
    tenor: int
    interest_rate: float
    total_interest: float
    total_credit: int  # principal plus interest
    monthly_payment: int
    admin_fee: float
    insurance_fee: float
    total_payment: float  # down payment + total credit + admin + insurance


@dataclass(frozen=True)
class DownPaymentCheck:
    is_valid: bool
    message: str | None = None


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    opening_balance: int
    monthly_payment: int
    principal: int
    interest: int
    closing_balance: int


def _monthly_rate(annual_rate_percent: float) -> float:
    return annual_rate_percent / 100 / 12


def calculate_monthly_payment_flat(principal: float, annual_rate_percent: float, tenor_months: int) -> int:
    """
    Flat-rate installment.

    total_interest = principal * rate * tenor / 12
    payment = (principal + total_interest) / tenor
    """
    if principal <= 0 or tenor_months <= 0:
        return 0

    total_interest = (principal * (annual_rate_percent / 100) * tenor_months) / 12
    return round_half_up((principal + total_interest) / tenor_months)


def calculate_monthly_payment_effective(principal: float, annual_rate_percent: float, tenor_months: int) -> int:
    """
    Annuity installment on the declining balance.

    M = P * r(1+r)^n / ((1+r)^n - 1), r = annual rate / 12
    """
    if principal <= 0 or tenor_months <= 0:
        return 0
    if annual_rate_percent == 0:
        return round_half_up(principal / tenor_months)

    r = _monthly_rate(annual_rate_percent)
    factor = (1 + r) ** tenor_months
    return round_half_up(principal * (r * factor) / (factor - 1))


def calculate_total_credit(monthly_payment: int, tenor_months: int) -> int:
    return monthly_payment * tenor_months


def _rate_conversion_factor(tenor_months: int) -> float:
    # 1.8 at 0 months up to 2.0 at 120 months.
    return 1.8 + (tenor_months / 120) * 0.2


def flat_to_effective_rate(flat_rate: float, tenor_months: int) -> float:
    """Approximate effective rate for a flat rate. Not an exact inverse of the payment formulas."""
    return flat_rate * _rate_conversion_factor(tenor_months)


def effective_to_flat_rate(effective_rate: float, tenor_months: int) -> float:
    """Approximate flat rate for an effective rate, see flat_to_effective_rate."""
    return effective_rate / _rate_conversion_factor(tenor_months)


def calculate_dp_percentage(vehicle_price: float, down_payment: float) -> float:
    # Two decimals.
    if vehicle_price <= 0:
        return 0
    return round_half_up((down_payment / vehicle_price) * 100 * 100) / 100


def calculate_dp_from_percentage(vehicle_price: float, dp_percentage: float) -> int:
    return round_half_up(vehicle_price * (dp_percentage / 100))


def validate_down_payment(
    vehicle_price: float,
    down_payment: float,
    min_dp_percentage: float = 10,
    max_dp_percentage: float = 50,
) -> DownPaymentCheck:
    """
    Category-independent down payment bounds check.

    Use leasing.rules.validate_credit_application for the full dealer policy.
    """
    dp_percentage = calculate_dp_percentage(vehicle_price, down_payment)

    if dp_percentage < min_dp_percentage:
        min_amount = calculate_dp_from_percentage(vehicle_price, min_dp_percentage)
        return DownPaymentCheck(
            is_valid=False,
            message=(
                f"DP minimal {format_percent(min_dp_percentage)}% dari harga kendaraan "
                f"(Rp {group_thousands(min_amount)})"
            ),
        )
    if dp_percentage > max_dp_percentage:
        return DownPaymentCheck(
            is_valid=False,
            message=f"DP maksimal {format_percent(max_dp_percentage)}% dari harga kendaraan",
        )
    return DownPaymentCheck(is_valid=True)


def calculate_credit(credit: CreditCalculationInput) -> CreditCalculationResult:
    """
    Full credit breakdown for a validated application.

    The installment always uses the flat method. Inputs are not validated here: a down
    payment at or above the price gives a non-positive principal, which simply flows
    through the arithmetic.
    """
    principal_amount = credit.vehicle_price - credit.down_payment
    dp_percentage = calculate_dp_percentage(credit.vehicle_price, credit.down_payment)
    monthly_payment = calculate_monthly_payment_flat(principal_amount, credit.interest_rate, credit.tenor)
    total_credit = calculate_total_credit(monthly_payment, credit.tenor)
    total_interest = total_credit - principal_amount
    total_payment = credit.down_payment + total_credit + credit.admin_fee + credit.insurance_fee

    return CreditCalculationResult(
        vehicle_price=credit.vehicle_price,
        down_payment=credit.down_payment,
        down_payment_percentage=dp_percentage,
        principal_amount=principal_amount,
        tenor=credit.tenor,
        interest_rate=credit.interest_rate,
        total_interest=total_interest,
        total_credit=total_credit,
        monthly_payment=monthly_payment,
        admin_fee=credit.admin_fee,
        insurance_fee=credit.insurance_fee,
        total_payment=total_payment,
    )


def format_rupiah(amount: float) -> str:
    """
    Indonesian Rupiah with no decimals, e.g. "Rp\\u00a01.500.000" or "-Rp\\u00a01.500".
    """
    n = round_half_up(amount)
    sign = "-" if n < 0 else ""
    return f"{sign}Rp\u00a0{group_thousands(abs(n))}"


def iter_amortization(principal: float, annual_rate_percent: float, tenor_months: int) -> Iterator[AmortizationRow]:
    """
    Yield one row per month using the effective (annuity) installment.

    Rounding drift is not corrected: the last closing balance can be a few units off zero,
    only clamped so it never goes negative.
    """
    monthly_rate = _monthly_rate(annual_rate_percent)
    monthly_payment = calculate_monthly_payment_effective(principal, annual_rate_percent, tenor_months)

    balance = principal
    for month in range(1, tenor_months + 1):
        interest = round_half_up(balance * monthly_rate)
        principal_paid = monthly_payment - interest
        closing = max(0, balance - principal_paid)

        yield AmortizationRow(
            month=month,
            opening_balance=round_half_up(balance),
            monthly_payment=monthly_payment,
            principal=principal_paid,
            interest=interest,
            closing_balance=round_half_up(closing),
        )
        balance = closing


def generate_amortization_table(
    principal: float, annual_rate_percent: float, tenor_months: int
) -> list[AmortizationRow]:
    return list(iter_amortization(principal, annual_rate_percent, tenor_months))
