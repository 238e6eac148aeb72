"""Fibonacci Retracement Levels.

Retracement levels over the recent high/low range, used for pattern
confidence and the wave analysis narrative.
"""

from __future__ import annotations

from typing import Sequence

from src.elliott.config import FIB_RATIOS
from src.elliott.models import FibonacciLevel, PriceInput, as_price_array


def calculate_fibonacci_levels(high: float, low: float) -> list[FibonacciLevel]:
    """Retracement levels from ``high`` (ratio 0) down to ``low`` (ratio 1)."""
    diff = high - low
    return [
        FibonacciLevel(ratio=ratio, price=high - diff * ratio, label=label)
        for ratio, label in FIB_RATIOS
    ]


def recent_fibonacci_levels(series: PriceInput, lookback: int = 20) -> list[FibonacciLevel]:
    """Levels over the high/low of the last ``lookback`` samples."""
    prices = as_price_array(series)
    if len(prices) == 0:
        return []
    recent = prices[-lookback:]
    return calculate_fibonacci_levels(float(recent.max()), float(recent.min()))


def nearest_fibonacci_level(price: float, levels: Sequence[FibonacciLevel]) -> FibonacciLevel | None:
    """Level closest to ``price``; the first one wins a tie."""
    nearest = None
    min_distance = float("inf")
    for level in levels:
        distance = abs(price - level.price)
        if distance < min_distance:
            min_distance = distance
            nearest = level
    return nearest


def nearest_fibonacci_ratio(price: float, levels: Sequence[FibonacciLevel]) -> float:
    """Ratio of the level closest to ``price`` (0.5 when there are no levels)."""
    nearest = nearest_fibonacci_level(price, levels)
    return nearest.ratio if nearest is not None else 0.5
