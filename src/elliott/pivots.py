"""Pivot Detection.

Finds strict local price extrema used to segment a series into legs.
"""

import logging

import numpy as np

from src.elliott.models import PriceInput, as_price_array

logger = logging.getLogger(__name__)


def detect_pivots(series: PriceInput, window: int = 3) -> list[int]:
    """Find pivot indices (strict local maxima and minima).

    A point at index ``i`` (``window <= i < len - window``) is a pivot when
    it is strictly greater, or strictly smaller, than every point within
    ``window`` samples on both sides. Equal neighbours disqualify it, so
    flat runs never produce pivots.

    Args:
        series: Price series (PriceSeries, points, floats, array or pandas Series).
        window: Samples checked on each side.

    Returns:
        Strictly increasing pivot indices. Empty if ``len(series) <= 2 * window``.
    """
    if window < 1:
        raise ValueError(f"window must be at least 1, got {window}")

    prices = as_price_array(series)
    n = len(prices)
    if n <= 2 * window:
        return []

    pivots = [
        i for i in range(window, n - window)
        if _is_pivot_high(prices, i, window) or _is_pivot_low(prices, i, window)
    ]
    logger.debug(f"Detected {len(pivots)} pivots in {n} samples (window={window})")
    return pivots


def _is_pivot_high(data: np.ndarray, i: int, window: int) -> bool:
    return all(data[i] > data[i - j] and data[i] > data[i + j] for j in range(1, window + 1))


def _is_pivot_low(data: np.ndarray, i: int, window: int) -> bool:
    return all(data[i] < data[i - j] and data[i] < data[i + j] for j in range(1, window + 1))
