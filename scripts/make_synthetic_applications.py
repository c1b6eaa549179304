from __future__ import annotations

import argparse
import os

import numpy as np
import pandas as pd

from dealer_credit.leasing.rules import get_available_tenors


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", required=True)
    ap.add_argument("--rows", type=int, default=1000)
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument(
        "--off-policy-frac",
        type=float,
        default=0.1,
        help="Share of rows with a tenor or down payment outside dealer policy.",
    )
    args = ap.parse_args()

    rng = np.random.default_rng(args.seed)

    category = rng.choice(["motor", "mobil"], size=args.rows, p=[0.7, 0.3])
    condition = rng.choice(["baru", "bekas"], size=args.rows, p=[0.6, 0.4])

    # Prices in whole rupiah, rounded to 100k like dealer price lists.
    motor_price = rng.lognormal(mean=np.log(22_000_000), sigma=0.35, size=args.rows)
    mobil_price = rng.lognormal(mean=np.log(220_000_000), sigma=0.45, size=args.rows)
    price = np.where(category == "motor", motor_price, mobil_price)
    price = np.where(condition == "bekas", price * 0.7, price)
    price = (np.round(price / 100_000) * 100_000).astype(np.int64)

    dp_pct = rng.uniform(0.1, 0.45, size=args.rows)
    dp_pct = np.where(condition == "bekas", dp_pct + 0.1, dp_pct)
    off_policy = rng.random(args.rows) < args.off_policy_frac
    dp_pct = np.where(off_policy, rng.uniform(0.0, 0.1, size=args.rows), dp_pct)
    down_payment = (np.round(price * dp_pct / 100_000) * 100_000).astype(np.int64)

    tenor = np.array(
        [rng.choice(get_available_tenors(c, k)) for c, k in zip(category, condition)],
        dtype=np.int64,
    )

    df = pd.DataFrame(
        {
            "vehicle_price": price,
            "down_payment": down_payment,
            "tenor": tenor,
            "category": category,
            "condition": condition,
        }
    )

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    df.to_csv(args.out, index=False)
    print(f"wrote {args.out} rows={len(df)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
