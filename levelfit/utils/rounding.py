"""Numeric rounding shared by every XP calculation"""
import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero

    XP multipliers compose in floating point and are rounded exactly once, at
    the final award. Python's round() uses banker's rounding, which would turn
    a 2.5 XP award into 2.
    """
    if value >= 0:
        return math.floor(value + 0.5)
    return -math.floor(-value + 0.5)


def clamp(value, low, high):
    """Clamp value into [low, high]"""
    return max(low, min(high, value))
