"""Wave Analyzer.

Runs pivot detection, wave classification, volatility normalization and
Fibonacci levels over one price series and condenses the result into a
pattern score and confidence for the fusion engine.
"""

import logging
from typing import Optional

import numpy as np

from src.elliott.classifier import WaveClassifier
from src.elliott.config import (
    DEFAULT_WAVE_CONFIG,
    KEY_FIB_RATIOS,
    UNKNOWN_LABEL,
    WaveConfig,
    WaveKind,
    WaveSignal,
)
from src.elliott.fibonacci import (
    nearest_fibonacci_level,
    recent_fibonacci_levels,
)
from src.elliott.models import FibonacciLevel, PriceInput, Wave, WaveAnalysis, as_price_array
from src.elliott.pivots import detect_pivots
from src.elliott.volatility import compute_volatility_unit, volatility_distance
from src.logging_config.performance import log_performance

logger = logging.getLogger(__name__)

PREDICTIONS = {
    "1": "Wave 1 complete - expect pullback in Wave 2, then strong rally in Wave 3",
    "2": "Wave 2 pullback - watching for Wave 3 rally (typically strongest move)",
    "3": "Wave 3 in progress - strong upward momentum expected to continue",
    "4": "Wave 4 consolidation - preparing for final Wave 5 push higher",
    "5": "Wave 5 (final impulse) - approaching trend exhaustion, prepare for correction",
    "A": "Wave A correction started - expect counter-trend bounce in Wave B",
    "B": "Wave B bounce (often a bull trap) - watching for Wave C decline",
    "C": "Wave C decline - correction nearing completion, reversal possible",
}
NO_PREDICTION = "Insufficient data for prediction"

# Confidence
BASE_CONFIDENCE = 50.0
NO_WAVE_CONFIDENCE = 30.0
MAX_WAVE_COUNT_BONUS = 30.0
WAVE_COUNT_BONUS = 5.0
FIB_PROXIMITY_BONUSES = ((0.5, 20.0), (1.0, 10.0), (2.0, 5.0))
WEAK_WAVE_PENALTY = 15.0
MIN_CONFIDENCE = 30.0
MAX_CONFIDENCE = 95.0

# Pattern score
NEUTRAL_SCORE = 50.0
SIGNAL_ADJUSTMENT = 30.0
LABEL_ADJUSTMENTS = {"1": 15.0, "3": 15.0, "5": -10.0, "C": 10.0}


class WaveAnalyzer:
    """Turns a price series into a wave analysis and pattern signal.

    Example:
        analyzer = WaveAnalyzer()
        analysis = analyzer.analyze(series, sentiment_score=62, symbol="AAPL")
        signal = analysis.to_signal()
    """

    def __init__(self, config: Optional[WaveConfig] = None) -> None:
        self.config = config or DEFAULT_WAVE_CONFIG
        self.classifier = WaveClassifier(self.config)

    @log_performance()
    def analyze(
        self,
        series: PriceInput,
        sentiment_score: Optional[float] = None,
        macro_score: Optional[float] = None,
        symbol: str = "",
    ) -> WaveAnalysis:
        """Analyze one price series.

        Insufficient history never raises; it yields no waves, label
        "Unknown", a neutral score of 50 and the minimum confidence.

        Args:
            series: Chronological closing prices.
            sentiment_score: Optional 0-100 sentiment used for waves B and C.
            macro_score: Optional 0-100 macro score used for wave B.
            symbol: Instrument symbol for the narrative.

        Returns:
            WaveAnalysis with pattern score and confidence.
        """
        prices = as_price_array(series)
        current_price = float(prices[-1]) if len(prices) else 0.0

        unit = compute_volatility_unit(prices, self.config.volatility_period)
        pivots = detect_pivots(prices, self.config.pivot_window)
        segmentation = self.classifier.segment(prices, pivots)
        waves = segmentation.waves

        levels = recent_fibonacci_levels(prices, self.config.fib_lookback)
        nearest = nearest_fibonacci_level(current_price, levels)

        confidence = self.pattern_confidence(waves, current_price, nearest, unit)
        recommendation = self.recommend(waves, prices, unit, sentiment_score, macro_score)
        score = self.pattern_score(recommendation, segmentation.current_label)

        analysis = WaveAnalysis(
            symbol=symbol,
            current_price=current_price,
            pivots=pivots,
            waves=waves,
            current_wave=segmentation.current_label,
            trend=segmentation.trend,
            label_mode=segmentation.mode,
            recommendation=recommendation,
            fibonacci_levels=levels,
            fib_level=nearest.ratio if nearest is not None else 0.5,
            confidence=confidence,
            volatility_unit=unit,
            pattern_score=score,
            prediction=self.predict(waves),
            analysis=self.narrative(symbol, waves, levels, segmentation.current_label),
        )

        if not waves:
            logger.info(
                f"{symbol or 'series'}: insufficient structure for waves "
                f"({len(prices)} samples, {len(pivots)} pivots)"
            )
        else:
            logger.info(
                f"{symbol or 'series'}: wave {analysis.current_wave} "
                f"({segmentation.mode.value}), {recommendation.value}, "
                f"score={score:.0f}, confidence={confidence:.0f}"
            )
        return analysis

    # ── scoring ───────────────────────────────────────────────────

    def pattern_confidence(
        self,
        waves: list[Wave],
        current_price: float,
        nearest: Optional[FibonacciLevel],
        volatility_unit: float,
    ) -> float:
        """Pattern clarity confidence in [30, 95].

        The Fibonacci proximity bonus is measured in volatility units, so a
        zero unit (flat or short history) earns no bonus at all rather than
        the closest-band bonus.
        """
        if not waves:
            return NO_WAVE_CONFIDENCE

        confidence = BASE_CONFIDENCE + min(MAX_WAVE_COUNT_BONUS, WAVE_COUNT_BONUS * len(waves))

        if nearest is not None and volatility_unit > 0:
            distance = volatility_distance(current_price - nearest.price, volatility_unit)
            for limit, bonus in FIB_PROXIMITY_BONUSES:
                if distance < limit:
                    confidence += bonus
                    break

        last = waves[-1]
        if last.magnitude / last.start_price < self.config.weak_wave_pct:
            confidence -= WEAK_WAVE_PENALTY

        return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))

    def recommend(
        self,
        waves: list[Wave],
        prices: np.ndarray,
        volatility_unit: float,
        sentiment_score: Optional[float] = None,
        macro_score: Optional[float] = None,
    ) -> WaveSignal:
        """Directional call from the latest wave."""
        if not waves:
            return WaveSignal.HOLD

        cfg = self.config
        last = waves[-1]
        recent = prices[-cfg.recommendation_window:]
        price_change = float(recent[-1] - recent[0]) if len(recent) else 0.0
        has_unit = volatility_unit > 0

        if last.kind == WaveKind.IMPULSE:
            if last.label in ("1", "3"):
                return WaveSignal.BUY
            if last.label == "5":
                return WaveSignal.SELL
            if last.label in ("2", "4"):
                if has_unit:
                    pullback = last.magnitude
                    if cfg.pullback_min_atr * volatility_unit <= pullback < cfg.pullback_max_atr * volatility_unit:
                        return WaveSignal.BUY
                    if pullback >= cfg.pullback_max_atr * volatility_unit:
                        return WaveSignal.HOLD
                return WaveSignal.BUY if price_change < 0 else WaveSignal.HOLD
            return WaveSignal.HOLD

        if last.label == "A":
            return WaveSignal.HOLD
        if last.label == "B":
            sentiment_negative = sentiment_score is not None and sentiment_score < cfg.bearish_context_score
            macro_bearish = macro_score is not None and macro_score < cfg.bearish_context_score
            return WaveSignal.SELL if sentiment_negative or macro_bearish else WaveSignal.HOLD
        if last.label == "C":
            improving = sentiment_score is not None and sentiment_score >= cfg.improving_sentiment_score
            if has_unit and last.magnitude >= cfg.correction_drop_atr * volatility_unit:
                return WaveSignal.BUY if improving else WaveSignal.HOLD
            return WaveSignal.BUY if price_change < 0 and improving else WaveSignal.HOLD
        return WaveSignal.HOLD

    @staticmethod
    def pattern_score(recommendation: WaveSignal, current_wave: str) -> float:
        """0-100 pattern score from the recommendation and the current label."""
        score = NEUTRAL_SCORE
        if recommendation == WaveSignal.BUY:
            score += SIGNAL_ADJUSTMENT
        elif recommendation == WaveSignal.SELL:
            score -= SIGNAL_ADJUSTMENT
        score += LABEL_ADJUSTMENTS.get(current_wave, 0.0)
        return max(0.0, min(100.0, score))

    # ── narrative ─────────────────────────────────────────────────

    @staticmethod
    def predict(waves: list[Wave]) -> str:
        if not waves:
            return NO_PREDICTION
        last = waves[-1]
        if last.label in PREDICTIONS:
            return PREDICTIONS[last.label]
        if last.kind == WaveKind.IMPULSE:
            return "Upward momentum expected in impulse wave"
        return "Correction phase - exercise caution"

    @staticmethod
    def narrative(
        symbol: str,
        waves: list[Wave],
        levels: list[FibonacciLevel],
        current_wave: str = UNKNOWN_LABEL,
    ) -> str:
        lines = [
            f"Elliott Wave Analysis for {symbol}:",
            "",
            f"Current Wave: {current_wave}",
            f"Total Identified Waves: {len(waves)}",
            "",
        ]
        if any(w.label == "5" for w in waves):
            lines.append(
                "Wave 5 detected - potentially reaching end of impulse sequence. "
                "Consider taking profits or preparing for correction."
            )
            lines.append("")
        if any(w.label == "C" for w in waves):
            lines.append("Wave C detected - correction may be completing. Watch for reversal signals.")
            lines.append("")

        lines.append("Key Fibonacci Levels:")
        for level in levels:
            if level.ratio in KEY_FIB_RATIOS:
                lines.append(f"{level.label}: ${level.price:.2f}")
        return "\n".join(lines)
