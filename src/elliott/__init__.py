"""Price-Pattern Segmentation.

Pivot detection, Elliott-style wave classification, a close-only
volatility unit and Fibonacci retracements, condensed into a pattern
signal for the fusion engine.

Example:
    from src.elliott import PriceSeries, WaveAnalyzer

    series = PriceSeries.from_prices([100, 101, 103, 102, 104, ...])
    analysis = WaveAnalyzer().analyze(series, symbol="AAPL")
    print(f"Wave {analysis.current_wave}: {analysis.recommendation.value}")
"""

from src.elliott.config import (
    CORRECTION_LABELS,
    DEFAULT_WAVE_CONFIG,
    FIB_RATIOS,
    IMPULSE_LABELS,
    UNKNOWN_LABEL,
    LabelMode,
    Trend,
    WaveConfig,
    WaveKind,
    WaveSignal,
)
from src.elliott.models import (
    FibonacciLevel,
    PricePoint,
    PriceSeries,
    Wave,
    WaveAnalysis,
)
from src.elliott.pivots import detect_pivots
from src.elliott.volatility import compute_volatility_unit
from src.elliott.fibonacci import calculate_fibonacci_levels, recent_fibonacci_levels
from src.elliott.classifier import WaveClassifier, WaveSegmentation
from src.elliott.analyzer import WaveAnalyzer

__all__ = [
    # Config
    "CORRECTION_LABELS",
    "DEFAULT_WAVE_CONFIG",
    "FIB_RATIOS",
    "IMPULSE_LABELS",
    "UNKNOWN_LABEL",
    "LabelMode",
    "Trend",
    "WaveConfig",
    "WaveKind",
    "WaveSignal",
    # Models
    "FibonacciLevel",
    "PricePoint",
    "PriceSeries",
    "Wave",
    "WaveAnalysis",
    # Components
    "detect_pivots",
    "compute_volatility_unit",
    "calculate_fibonacci_levels",
    "recent_fibonacci_levels",
    "WaveClassifier",
    "WaveSegmentation",
    "WaveAnalyzer",
]
