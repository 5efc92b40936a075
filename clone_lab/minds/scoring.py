"""Numeric helpers shared by the scoring code.

Python's round() is banker's rounding; the scores here round half up.
"""

import math


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    """Round to the nearest integer (half up) and clamp to [0, 100]."""
    return int(clamp(round_half_up(value), 0, 100))


def clamp_confidence(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def weighted_average(scores: dict[str, float], weights: dict[str, float]) -> float:
    """Weighted mean over the keys present in both mappings, two decimals."""
    total_weight = 0.0
    total = 0.0
    for key, weight in weights.items():
        if key in scores:
            total += scores[key] * weight
            total_weight += weight
    if total_weight == 0:
        return 0.0
    return round_half_up(total / total_weight, 2)


def mean(values) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)
