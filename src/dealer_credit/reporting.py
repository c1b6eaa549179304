from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, fields
from typing import Any

import pandas as pd

from dealer_credit.financing.credit import AmortizationRow, CreditCalculationResult
from dealer_credit.simulation import CreditSimulationRequest, simulate_credit

logger = logging.getLogger(__name__)

AMORTIZATION_COLUMNS = [f.name for f in fields(AmortizationRow)]
REQUIRED_APPLICATION_COLUMNS = ["vehicle_price", "down_payment", "tenor", "category", "condition"]
_RESULT_COLUMNS = [
    f.name
    for f in fields(CreditCalculationResult)
    if f.name not in ("vehicle_price", "down_payment", "tenor")
]


def amortization_frame(rows: Iterable[AmortizationRow]) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in rows], columns=AMORTIZATION_COLUMNS)


def _row_to_request(row: dict[str, Any]) -> CreditSimulationRequest:
    # CSV cells that are empty come back as NaN.
    clean = {k: v for k, v in row.items() if not pd.isna(v)}
    return CreditSimulationRequest.from_dict(clean)


def simulate_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Simulate every application row.

    Output keeps the input columns and adds the credit breakdown, a warnings column and
    an errors column. Rows that fail validation get empty results and their errors;
    they do not stop the batch.
    """
    missing = [c for c in REQUIRED_APPLICATION_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"missing columns: {', '.join(missing)}")

    out_rows: list[dict[str, Any]] = []
    n_failed = 0
    for row in df.to_dict(orient="records"):
        out: dict[str, Any] = dict(row)
        for c in _RESULT_COLUMNS:
            out.setdefault(c, None)
        try:
            sim = simulate_credit(_row_to_request(row))
        except ValueError as e:
            n_failed += 1
            errors = getattr(e, "errors", None) or [str(e)]
            out["warnings"] = "; ".join(getattr(e, "warnings", []) or [])
            out["errors"] = "; ".join(errors)
        else:
            result = asdict(sim.result)
            for c in _RESULT_COLUMNS:
                out[c] = result[c]
            out["warnings"] = "; ".join(sim.warnings)
            out["errors"] = ""
        out_rows.append(out)

    logger.info("simulated %d applications, %d rejected", len(out_rows), n_failed)
    columns = list(df.columns) + [c for c in _RESULT_COLUMNS if c not in df.columns] + ["warnings", "errors"]
    return pd.DataFrame(out_rows, columns=columns)
