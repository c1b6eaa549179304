from __future__ import annotations

import pytest

from dealer_credit.leasing.rules import (
    calculate_default_admin_fee,
    calculate_default_insurance_fee,
    get_available_tenors,
    get_credit_config,
    get_default_interest_rate,
    get_dp_limits,
    validate_credit_application,
)
from dealer_credit.vehicle import VehicleCategory, VehicleCondition

ALL_CLASSES = [(c, k) for c in ("motor", "mobil") for k in ("baru", "bekas")]


@pytest.mark.parametrize(
    "category,condition,expected",
    [
        ("motor", "baru", [12, 18, 24, 30, 36]),
        ("motor", "bekas", [12, 18, 24]),
        ("mobil", "baru", [12, 24, 36, 48, 60]),
        ("mobil", "bekas", [12, 24, 36, 48]),
    ],
)
def test_available_tenors(category, condition, expected):
    assert get_available_tenors(category, condition) == expected


@pytest.mark.parametrize("category,condition", ALL_CLASSES)
def test_tables_are_consistent(category, condition):
    tenors = get_available_tenors(category, condition)
    assert tenors and tenors == sorted(tenors)
    limits = get_dp_limits(category, condition)
    assert limits.min <= limits.max


def test_enum_members_and_strings_are_interchangeable():
    assert get_dp_limits(VehicleCategory.MOBIL, VehicleCondition.BEKAS) == get_dp_limits("mobil", "bekas")
    assert get_dp_limits("mobil", "bekas").min == 25


def test_returned_tenor_list_is_a_copy():
    tenors = get_available_tenors("motor", "baru")
    tenors.append(99)
    assert 99 not in get_available_tenors("motor", "baru")


def test_unknown_category_is_rejected():
    with pytest.raises(ValueError):
        get_available_tenors("truk", "baru")
    with pytest.raises(ValueError):
        get_default_interest_rate("motor", "rusak", 12)


def test_default_interest_rate_adds_tenor_premium():
    assert get_default_interest_rate("motor", "baru", 11) == 15
    assert get_default_interest_rate("motor", "baru", 24) == 16.0
    assert get_default_interest_rate("mobil", "baru", 36) == 13.5
    assert get_default_interest_rate("mobil", "bekas", 60) == 17.5


def test_motor_admin_fee_steps():
    assert calculate_default_admin_fee(19_999_999, "motor") == 500_000
    assert calculate_default_admin_fee(20_000_000, "motor") == 750_000
    assert calculate_default_admin_fee(49_999_999, "motor") == 750_000
    assert calculate_default_admin_fee(50_000_000, "motor") == 1_000_000


def test_mobil_admin_fee_is_one_percent_with_floor():
    assert calculate_default_admin_fee(150_000_000, "mobil") == 1_500_000
    assert calculate_default_admin_fee(80_000_000, "mobil") == 1_000_000
    assert calculate_default_admin_fee(432_000_000, "mobil") == 4_300_000


def test_default_insurance_fee():
    # 20M * 2.5% * 2 years
    assert calculate_default_insurance_fee(20_000_000, "motor", "baru", 24) == 1_000_000
    # 200M * 3.5% * 3 years
    assert calculate_default_insurance_fee(200_000_000, "mobil", "bekas", 36) == 21_000_000
    # 18M * 2.5% * 1.5 years = 675,000 -> nearest 100k
    assert calculate_default_insurance_fee(18_000_000, "motor", "baru", 18) == 700_000


def test_application_at_exact_minimums_is_valid():
    v = validate_credit_application(5_000_000, 500_000, 12, "motor", "baru")
    assert v.is_valid
    assert v.errors == []
    assert v.warnings == []


def test_all_checks_run_and_accumulate():
    v = validate_credit_application(4_000_000, 400_000, 36, "motor", "bekas")
    assert not v.is_valid
    assert v.errors == [
        "Tenor 36 bulan tidak tersedia untuk motor bekas",
        "DP minimal 20% untuk motor bekas",
        "Harga motor minimal Rp 5.000.000",
    ]


def test_high_down_payment_is_only_a_warning():
    v = validate_credit_application(25_000_000, 15_000_000, 24, "motor", "baru")
    assert v.is_valid
    assert v.warnings == ["DP 60.0% melebihi batas umum 50%"]


def test_long_tenor_warnings():
    motor = validate_credit_application(25_000_000, 5_000_000, 48, "motor", "baru")
    assert not motor.is_valid
    assert "Tenor > 36 bulan untuk motor tidak umum" in motor.warnings

    mobil = validate_credit_application(100_000_000, 30_000_000, 60, "mobil", "bekas")
    assert mobil.errors == ["Tenor 60 bulan tidak tersedia untuk mobil bekas"]
    assert mobil.warnings == ["Tenor > 48 bulan untuk kendaraan bekas berisiko tinggi"]


def test_mobil_price_floor():
    v = validate_credit_application(45_000_000, 9_000_000, 24, "mobil", "baru")
    assert v.errors == ["Harga mobil minimal Rp 50.000.000"]


def test_credit_config_prefills_defaults():
    cfg = get_credit_config(25_000_000, "motor", "baru", 24)
    assert cfg.tenor == 24
    assert cfg.interest_rate == 16.0
    assert cfg.min_dp_percentage == 10
    assert cfg.max_dp_percentage == 50
    assert cfg.admin_fee == 750_000
    assert cfg.insurance_rate == 2.5

    assert get_credit_config(300_000_000, "mobil", "bekas", 48).insurance_rate == 3.5
