from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going towards +infinity.

    Matches JavaScript's Math.round, which the published rate sheets were computed with:
    round_half_up(2.5) == 3, round_half_up(-2.5) == -2.
    """
    return int(math.floor(value + 0.5))


def group_thousands(amount: float) -> str:
    """
    Indonesian digit grouping with zero decimals, e.g. 1500000 -> "1.500.000".
    """
    n = round_half_up(amount)
    return f"{n:,}".replace(",", ".")


def format_percent(value: float) -> str:
    # 10.0 -> "10", 12.5 -> "12.5"
    return f"{value:g}"
