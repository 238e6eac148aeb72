"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.elliott.models import PriceSeries  # noqa: E402
from src.signal_fusion.models import AnalyticalSignal  # noqa: E402


# Rally with three up-legs and two pullbacks. Pivots at 9, 15, 19, 25, 29, 35.
IMPULSE_PRICES = (
    [100.0] * 9
    + [99.0]
    + [101.0, 102.0, 103.0, 104.0, 105.0, 106.0]
    + [105.0, 104.5, 104.0, 103.9]
    + [105.0, 106.0, 107.0, 108.0, 109.0, 110.0]
    + [109.0, 108.5, 108.0, 107.8]
    + [109.0, 110.0, 111.0, 112.0, 113.0, 114.0]
    + [113.5, 113.0, 112.8, 112.5]
)

# Trough, peak, trough, peak: three waves ending in a strong up-leg.
# Pivots at 6, 13, 19, 26.
THREE_WAVE_PRICES = (
    [102.0, 101.5, 101.0, 100.5, 100.2, 100.1]
    + [100.0]
    + [101.0, 102.0, 103.0, 104.0, 105.0, 106.0]
    + [107.0]
    + [106.5, 106.0, 105.5, 105.2, 105.1]
    + [105.0]
    + [106.0, 107.0, 108.0, 109.0, 110.0, 111.0]
    + [112.0]
    + [111.8, 111.6, 111.5]
)


@pytest.fixture
def impulse_prices():
    return list(IMPULSE_PRICES)


@pytest.fixture
def impulse_series():
    return PriceSeries.from_prices(IMPULSE_PRICES)


@pytest.fixture
def three_wave_series():
    return PriceSeries.from_prices(THREE_WAVE_PRICES)


@pytest.fixture
def random_walk():
    """Seeded random walk, 200 samples."""
    rng = np.random.RandomState(42)
    steps = rng.normal(0, 1, 200)
    return 100.0 + np.cumsum(steps) * 0.5 + 50.0


@pytest.fixture
def bullish_signals():
    return {
        "technical": AnalyticalSignal(score=70, confidence=90, name="technical"),
        "sentiment": AnalyticalSignal(score=70, confidence=90, name="sentiment"),
        "macro": AnalyticalSignal(score=70, confidence=90, name="macro"),
    }
