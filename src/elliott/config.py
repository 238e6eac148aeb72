"""Configuration for Price-Pattern Segmentation."""

from dataclasses import dataclass
from enum import Enum


class WaveKind(str, Enum):
    """Elliott wave kind."""
    IMPULSE = "impulse"
    CORRECTION = "correction"


class Trend(str, Enum):
    """Overall trend over the working pivot window."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class LabelMode(str, Enum):
    """Which labeling branch produced the wave labels."""
    IMPULSE = "impulse"
    CORRECTION = "correction"
    MIXED = "mixed"
    NONE = "none"


class WaveSignal(str, Enum):
    """Directional call derived from the current wave alone."""
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


IMPULSE_LABELS: tuple[str, ...] = ("1", "2", "3", "4", "5")
CORRECTION_LABELS: tuple[str, ...] = ("A", "B", "C")
UNKNOWN_LABEL = "Unknown"

FIB_RATIOS: tuple[tuple[float, str], ...] = (
    (0.0, "0% (High)"),
    (0.236, "23.6%"),
    (0.382, "38.2%"),
    (0.5, "50%"),
    (0.618, "61.8%"),
    (0.786, "78.6%"),
    (1.0, "100% (Low)"),
)
KEY_FIB_RATIOS: tuple[float, ...] = (0.382, 0.5, 0.618)


@dataclass(frozen=True)
class WaveConfig:
    """Wave segmentation and analysis configuration.

    Attributes:
        pivot_window: Samples checked on each side of a pivot candidate.
        volatility_period: Close-to-close deltas averaged for the volatility unit.
        max_pivots: Most recent pivots kept in the working window.
        min_pivots: Pivots taken when fewer than max_pivots exist.
        min_pivots_for_waves: Below this many pivots no waves are built.
        trend_threshold_pct: Overall change (%) needed for a bullish/bearish trend.
        strong_wave_pct: Wave move (%) of its start price that counts as strong.
        strong_wave_lookback: Recent waves inspected for strong moves.
        min_strong_waves: Strong moves needed to enter impulse/correction mode.
        fib_lookback: Recent samples used for the Fibonacci high/low.
        recommendation_window: Recent samples used for the fallback price change.
        pullback_min_atr: Lower pullback bound (in volatility units) for a wave 2/4 BUY.
        pullback_max_atr: Pullback (in volatility units) at which wave 2/4 becomes HOLD.
        correction_drop_atr: Wave C drop (in volatility units) considered significant.
        bearish_context_score: Sentiment/macro below this turn wave B into SELL.
        improving_sentiment_score: Sentiment at or above this allows a wave C BUY.
        weak_wave_pct: Latest-wave move below this fraction reduces confidence.
    """

    pivot_window: int = 3
    volatility_period: int = 14
    max_pivots: int = 10
    min_pivots: int = 5
    min_pivots_for_waves: int = 3
    trend_threshold_pct: float = 5.0
    strong_wave_pct: float = 3.0
    strong_wave_lookback: int = 5
    min_strong_waves: int = 2
    fib_lookback: int = 20
    recommendation_window: int = 10
    pullback_min_atr: float = 1.2
    pullback_max_atr: float = 2.5
    correction_drop_atr: float = 1.5
    bearish_context_score: float = 40.0
    improving_sentiment_score: float = 50.0
    weak_wave_pct: float = 0.02

    def __post_init__(self) -> None:
        if self.pivot_window < 1:
            raise ValueError("pivot_window must be at least 1")
        if self.volatility_period < 1:
            raise ValueError("volatility_period must be at least 1")
        if self.min_pivots > self.max_pivots:
            raise ValueError("min_pivots must not exceed max_pivots")


DEFAULT_WAVE_CONFIG = WaveConfig()
