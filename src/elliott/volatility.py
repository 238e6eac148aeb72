"""Volatility Normalizer.

ATR-like volatility unit from closing prices only. Upstream data has no
intraday high/low, so the true range reduces to the absolute
close-to-close change.
"""

import numpy as np

from src.elliott.models import PriceInput, as_price_array


def compute_volatility_unit(series: PriceInput, period: int = 14) -> float:
    """Compute the mean absolute close-to-close change.

    Args:
        series: Price series.
        period: Number of most recent deltas to average.

    Returns:
        Volatility unit >= 0. 0.0 if fewer than ``period + 1`` samples,
        which callers treat as "no normalization available".
    """
    if period < 1:
        raise ValueError(f"period must be at least 1, got {period}")

    prices = as_price_array(series)
    if len(prices) < period + 1:
        return 0.0

    true_ranges = np.abs(np.diff(prices))
    return float(np.mean(true_ranges[-period:]))


def volatility_distance(distance: float, volatility_unit: float) -> float:
    """Express a price distance in volatility units (0.0 when unavailable)."""
    if volatility_unit <= 0:
        return 0.0
    return abs(distance) / volatility_unit
