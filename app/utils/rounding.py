import math


def round_half_up(value: float) -> int:
    """Half-up to the nearest integer; Python's round() rounds halves to even."""
    return int(math.floor(value + 0.5))


def round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100
