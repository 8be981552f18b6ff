from __future__ import annotations

import math

MM = float
KG = float

# Shared tolerance for every volume / void ratio comparison.
EPSILON = 1e-9


def parse_float(value: str) -> float:
    text = value.strip()
    if not text:
        raise ValueError("empty input")
    text = text.replace(",", ".")
    return float(text)


def format_float(value: float, ndigits: int = 2) -> str:
    return f"{value:.{ndigits}f}"


def format_void_ratio(ratio: float) -> str:
    return f"{round(ratio * 1000) / 10}%"


def floor_count(length: float, pitch: float) -> int:
    """How many ``pitch`` sized slots fit in ``length``."""
    if pitch <= 0 or length <= 0:
        return 0
    return max(int(math.floor((length + EPSILON) / pitch)), 0)


def compare_floats(a: float, b: float, eps: float = EPSILON) -> int:
    """Return -1, 0 or 1; values within ``eps`` compare equal."""
    if abs(a - b) <= eps:
        return 0
    return -1 if a < b else 1


def is_close(a: float, b: float, eps: float = EPSILON) -> bool:
    return compare_floats(a, b, eps) == 0
