from __future__ import annotations

from enum import Enum


class VehicleCategory(str, Enum):
    MOTOR = "motor"
    MOBIL = "mobil"


class VehicleCondition(str, Enum):
    BARU = "baru"  # new
    BEKAS = "bekas"  # used


def as_category(value: VehicleCategory | str) -> VehicleCategory:
    # Raises ValueError for anything outside the closed set.
    return VehicleCategory(value)


def as_condition(value: VehicleCondition | str) -> VehicleCondition:
    return VehicleCondition(value)
