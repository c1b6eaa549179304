from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import asdict
from typing import Any

import pandas as pd

from dealer_credit.commission.rules import (
    calculate_commission,
    calculate_commission_from_profit,
    calculate_tiered_commission,
    get_commission_config,
)
from dealer_credit.config import load_settings
from dealer_credit.financing.credit import format_rupiah, generate_amortization_table
from dealer_credit.leasing.rules import (
    calculate_default_insurance_fee,
    get_available_tenors,
    get_credit_config,
    get_dp_limits,
)
from dealer_credit.logging_config import configure_logging
from dealer_credit.reporting import amortization_frame, simulate_frame
from dealer_credit.simulation import CreditSimulationRequest, CreditValidationError, simulate_credit

logger = logging.getLogger(__name__)

EXIT_VALIDATION_FAILED = 2


def _mkdirp(path: str) -> None:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def cmd_simulate(args: argparse.Namespace) -> int:
    request = CreditSimulationRequest(
        vehicle_price=args.price,
        down_payment=args.down_payment,
        tenor=args.tenor,
        category=args.category,
        condition=args.condition,
        interest_rate=args.interest_rate,
        admin_fee=args.admin_fee,
        insurance_fee=args.insurance_fee,
    )
    try:
        sim = simulate_credit(request, with_amortization=args.amortization)
    except CreditValidationError as e:
        _print_json({"error": "Credit validation failed", "details": e.errors, "warnings": e.warnings})
        return EXIT_VALIDATION_FAILED
    except ValueError as e:
        raise SystemExit(str(e)) from e

    out = sim.to_dict()
    out["monthly_payment_display"] = format_rupiah(sim.result.monthly_payment)
    out["total_payment_display"] = format_rupiah(sim.result.total_payment)
    _print_json(out)
    return 0


def cmd_rules(args: argparse.Namespace) -> int:
    try:
        tenors = get_available_tenors(args.category, args.condition)
        limits = get_dp_limits(args.category, args.condition)
        config = get_credit_config(args.price, args.category, args.condition, args.tenor)
        insurance_fee = calculate_default_insurance_fee(args.price, args.category, args.condition, args.tenor)
    except ValueError as e:
        raise SystemExit(str(e)) from e

    _print_json(
        {
            "available_tenors": tenors,
            "dp_limits": asdict(limits),
            "credit_config": asdict(config),
            "default_insurance_fee": insurance_fee,
        }
    )
    return 0


def cmd_amortize(args: argparse.Namespace) -> int:
    rows = generate_amortization_table(args.principal, args.interest_rate, args.tenor)
    if args.out_csv:
        _mkdirp(args.out_csv)
        amortization_frame(rows).to_csv(args.out_csv, index=False)
        _print_json({"out_csv": args.out_csv, "n_rows": len(rows)})
        return 0
    _print_json({"rows": [asdict(r) for r in rows]})
    return 0


def cmd_commission(args: argparse.Namespace) -> int:
    try:
        config = get_commission_config(args.payment_method)
        by_method = calculate_commission(args.selling_price, args.payment_method, args.target_met)
    except ValueError as e:
        raise SystemExit(str(e)) from e

    out: dict[str, Any] = {
        "selling_price": args.selling_price,
        "payment_method": args.payment_method,
        "config": asdict(config),
        "commission": by_method,
        "tiered_commission": calculate_tiered_commission(args.selling_price),
        "profit_commission": None,
    }
    if args.purchase_price is not None:
        out["profit_commission"] = calculate_commission_from_profit(
            args.selling_price, args.purchase_price, args.profit_percent
        )
    _print_json(out)
    return 0


def cmd_simulate_batch(args: argparse.Namespace) -> int:
    df = pd.read_csv(args.csv)
    try:
        out_df = simulate_frame(df)
    except ValueError as e:
        raise SystemExit(f"{args.csv}: {e}") from e
    _mkdirp(args.out_csv)
    out_df.to_csv(args.out_csv, index=False)
    n_rejected = int((out_df["errors"] != "").sum())
    _print_json({"out_csv": args.out_csv, "n_rows": int(len(out_df)), "n_rejected": n_rejected})
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dealer-credit")
    p.add_argument("--log-level", default=None, help="Overrides DEALER_CREDIT_LOG_LEVEL.")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("simulate", help="Validate a credit application and compute its installments.")
    s.add_argument("--price", type=float, required=True, help="Vehicle price.")
    s.add_argument("--down-payment", type=float, required=True)
    s.add_argument("--tenor", type=int, required=True, help="Months.")
    s.add_argument("--category", choices=["motor", "mobil"], default="motor")
    s.add_argument("--condition", choices=["baru", "bekas"], default="baru")
    s.add_argument("--interest-rate", type=float, default=None, help="Flat percent per year; default from rules.")
    s.add_argument("--admin-fee", type=float, default=None)
    s.add_argument("--insurance-fee", type=float, default=None)
    s.add_argument("--amortization", action="store_true", default=False, help="Include an amortization table.")
    s.set_defaults(func=cmd_simulate)

    r = sub.add_parser("rules", help="Show tenors, DP limits and default rate/fees for a vehicle.")
    r.add_argument("--price", type=float, required=True)
    r.add_argument("--category", choices=["motor", "mobil"], required=True)
    r.add_argument("--condition", choices=["baru", "bekas"], required=True)
    r.add_argument("--tenor", type=int, required=True)
    r.set_defaults(func=cmd_rules)

    a = sub.add_parser("amortize", help="Amortization table using the effective (annuity) method.")
    a.add_argument("--principal", type=float, required=True)
    a.add_argument("--interest-rate", type=float, required=True, help="Percent per year.")
    a.add_argument("--tenor", type=int, required=True)
    a.add_argument("--out-csv", default=None)
    a.set_defaults(func=cmd_amortize)

    c = sub.add_parser("commission", help="Sales commission under each payout strategy.")
    c.add_argument("--selling-price", type=float, required=True)
    c.add_argument("--payment-method", choices=["cash", "credit"], required=True)
    c.add_argument("--target-met", action="store_true", default=False)
    c.add_argument("--purchase-price", type=float, default=None, help="Enables the profit-based commission.")
    c.add_argument("--profit-percent", type=float, default=10.0)
    c.set_defaults(func=cmd_commission)

    b = sub.add_parser("simulate-batch", help="Simulate every application row of a CSV.")
    b.add_argument("--csv", required=True)
    b.add_argument("--out-csv", required=True)
    b.set_defaults(func=cmd_simulate_batch)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    settings = load_settings()
    configure_logging(args.log_level or settings.log_level, settings.log_file)
    logger.debug("running %s", args.cmd)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
