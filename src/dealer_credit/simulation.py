from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any

from dealer_credit.financing.credit import (
    AmortizationRow,
    CreditCalculationInput,
    CreditCalculationResult,
    calculate_credit,
    generate_amortization_table,
)
from dealer_credit.leasing.rules import (
    calculate_default_admin_fee,
    calculate_default_insurance_fee,
    get_default_interest_rate,
    validate_credit_application,
)
from dealer_credit.vehicle import VehicleCategory, VehicleCondition, as_category, as_condition

logger = logging.getLogger(__name__)


class SimulationInputError(ValueError):
    """Request fields are missing, negative or out of range."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class CreditValidationError(ValueError):
    """The application breaks dealer financing policy."""

    def __init__(self, errors: list[str], warnings: list[str] | None = None):
        super().__init__("; ".join(errors))
        self.errors = errors
        self.warnings = warnings or []


@dataclass(frozen=True)
class CreditSimulationRequest:
    vehicle_price: float
    down_payment: float
    tenor: int
    category: VehicleCategory | str = VehicleCategory.MOTOR
    condition: VehicleCondition | str = VehicleCondition.BARU
    # None means "use the dealer default".
    interest_rate: float | None = None
    admin_fee: float | None = None
    insurance_fee: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreditSimulationRequest:
        missing = [k for k in ("vehicle_price", "down_payment", "tenor") if data.get(k) is None]
        if missing:
            raise SimulationInputError([f"{k} is required" for k in missing])

        def _opt_float(name: str) -> float | None:
            v = data.get(name)
            return None if v is None else float(v)

        try:
            tenor = float(data["tenor"])
            return cls(
                vehicle_price=float(data["vehicle_price"]),
                down_payment=float(data["down_payment"]),
                tenor=int(tenor) if tenor.is_integer() else tenor,
                category=data.get("category") or VehicleCategory.MOTOR,
                condition=data.get("condition") or VehicleCondition.BARU,
                interest_rate=_opt_float("interest_rate"),
                admin_fee=_opt_float("admin_fee"),
                insurance_fee=_opt_float("insurance_fee"),
            )
        except (TypeError, ValueError) as e:
            raise SimulationInputError([f"invalid number: {e}"]) from e


@dataclass(frozen=True)
class CreditSimulation:
    result: CreditCalculationResult
    category: VehicleCategory
    condition: VehicleCondition
    warnings: list[str] = field(default_factory=list)
    amortization: list[AmortizationRow] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = asdict(self.result)
        out["category"] = self.category.value
        out["condition"] = self.condition.value
        out["warnings"] = list(self.warnings)
        if self.amortization is not None:
            out["amortization"] = [asdict(r) for r in self.amortization]
        return out


def _is_whole(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def check_request(request: CreditSimulationRequest) -> list[str]:
    """Shape checks that come before any policy validation."""
    errors: list[str] = []

    def _finite(name: str, value: float | None) -> bool:
        if value is None or math.isfinite(value):
            return True
        errors.append(f"{name} must be a finite number")
        return False

    if _finite("vehicle_price", request.vehicle_price) and request.vehicle_price <= 0:
        errors.append("vehicle_price must be > 0")
    if _finite("down_payment", request.down_payment) and request.down_payment < 0:
        errors.append("down_payment must be >= 0")
    if not _is_whole(request.tenor) or request.tenor <= 0:
        errors.append("tenor must be a positive whole number of months")
    rate = request.interest_rate
    if _finite("interest_rate", rate) and rate is not None and not (0 <= rate <= 100):
        errors.append("interest_rate must be in [0, 100]")
    if _finite("admin_fee", request.admin_fee) and request.admin_fee is not None and request.admin_fee < 0:
        errors.append("admin_fee must be >= 0")
    insurance_fee = request.insurance_fee
    if _finite("insurance_fee", insurance_fee) and insurance_fee is not None and insurance_fee < 0:
        errors.append("insurance_fee must be >= 0")
    return errors


def simulate_credit(request: CreditSimulationRequest, *, with_amortization: bool = False) -> CreditSimulation:
    """
    Validate a request against dealer policy, fill in default rate and fees, and run
    the credit calculation.

    An interest rate of 0 is treated as "not given" and replaced by the default rate.
    Fees of 0 are kept.
    """
    problems = check_request(request)
    if problems:
        raise SimulationInputError(problems)

    category = as_category(request.category)
    condition = as_condition(request.condition)
    tenor = int(request.tenor)

    validation = validate_credit_application(
        request.vehicle_price, request.down_payment, tenor, category, condition
    )
    if not validation.is_valid:
        logger.debug("credit application rejected: %s", validation.errors)
        raise CreditValidationError(validation.errors, validation.warnings)

    try:
        interest_rate = request.interest_rate or get_default_interest_rate(category, condition, tenor)
        admin_fee = request.admin_fee
        if admin_fee is None:
            admin_fee = calculate_default_admin_fee(request.vehicle_price, category)
        insurance_fee = request.insurance_fee
        if insurance_fee is None:
            insurance_fee = calculate_default_insurance_fee(request.vehicle_price, category, condition, tenor)

        result = calculate_credit(
            CreditCalculationInput(
                vehicle_price=request.vehicle_price,
                down_payment=request.down_payment,
                tenor=tenor,
                interest_rate=interest_rate,
                admin_fee=admin_fee,
                insurance_fee=insurance_fee,
            )
        )
        amortization = None
        if with_amortization:
            amortization = generate_amortization_table(result.principal_amount, interest_rate, tenor)
    except OverflowError as e:
        # Finite inputs near the float limit can still overflow once multiplied out.
        raise SimulationInputError([f"amounts too large to calculate: {e}"]) from e

    logger.debug(
        "simulated %s %s price=%s tenor=%s monthly=%s",
        category.value,
        condition.value,
        request.vehicle_price,
        tenor,
        result.monthly_payment,
    )

    return CreditSimulation(
        result=result,
        category=category,
        condition=condition,
        warnings=validation.warnings,
        amortization=amortization,
    )
