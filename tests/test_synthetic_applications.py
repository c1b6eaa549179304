from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import pandas as pd

from dealer_credit.leasing.rules import get_available_tenors
from dealer_credit.reporting import REQUIRED_APPLICATION_COLUMNS

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "make_synthetic_applications.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("make_synthetic_applications", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_generated_tenors_follow_leasing_rules(tmp_path, monkeypatch):
    out = tmp_path / "apps.csv"
    monkeypatch.setattr(sys, "argv", ["make_synthetic_applications", "--out", str(out), "--rows", "300", "--seed", "7"])

    assert _load_script().main() == 0

    df = pd.read_csv(out)
    assert len(df) == 300
    assert list(df.columns) == REQUIRED_APPLICATION_COLUMNS
    for row in df.itertuples(index=False):
        assert row.tenor in get_available_tenors(row.category, row.condition)
