"""Currency rounding shared by every calculator."""

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest whole currency unit, halves toward +infinity.
    
    Python's round() rounds halves to even; document figures follow the
    half-up convention instead (2.5 -> 3, -2.5 -> -2).
    """
    return int(math.floor(value + 0.5))
