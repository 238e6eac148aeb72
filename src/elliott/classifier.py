"""Wave Classifier.

Groups pivots into a labeled Elliott-style wave sequence. Elliott-Wave
theory has no closed-form classifier from price alone; this is a
deterministic heuristic in three mutually exclusive branches:

- Impulse: bullish trend with repeated strong up-legs, labels 1-5
- Correction: bearish trend, or neutral with repeated strong down-legs, labels A-C
- Mixed: neither holds; seeded from the direction of the latest leg

Every branch terminates in a label for every wave in the window.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

import numpy as np

from src.elliott.config import (
    CORRECTION_LABELS,
    DEFAULT_WAVE_CONFIG,
    IMPULSE_LABELS,
    UNKNOWN_LABEL,
    LabelMode,
    Trend,
    WaveConfig,
    WaveKind,
)
from src.elliott.models import PriceInput, Wave, as_price_array

logger = logging.getLogger(__name__)


@dataclass
class WaveSegmentation:
    """Full classifier output.

    Attributes:
        waves: Labeled waves over the working pivot window.
        current_label: Label of the most recent wave, or "Unknown".
        trend: Overall trend over the working window.
        mode: Labeling branch taken.
        window_pivots: Pivot indices retained in the working window.
    """

    waves: list[Wave] = field(default_factory=list)
    current_label: str = UNKNOWN_LABEL
    trend: Trend = Trend.NEUTRAL
    mode: LabelMode = LabelMode.NONE
    window_pivots: list[int] = field(default_factory=list)


class WaveClassifier:
    """Classifies pivot runs into impulse or corrective waves."""

    def __init__(self, config: Optional[WaveConfig] = None) -> None:
        self.config = config or DEFAULT_WAVE_CONFIG

    def classify(self, series: PriceInput, pivots: Sequence[int]) -> tuple[list[Wave], str]:
        """Build and label waves from pivots.

        Args:
            series: Price series the pivots index into.
            pivots: Strictly increasing pivot indices.

        Returns:
            (waves, current_label). ``([], "Unknown")`` with fewer than 3 pivots.
        """
        result = self.segment(series, pivots)
        return result.waves, result.current_label

    def segment(self, series: PriceInput, pivots: Sequence[int]) -> WaveSegmentation:
        """Like :meth:`classify`, also reporting trend and labeling mode."""
        prices = as_price_array(series)
        if len(pivots) < self.config.min_pivots_for_waves:
            return WaveSegmentation()

        recent = self.working_window(pivots)
        trend = self.detect_trend(prices, recent)

        waves = [
            Wave(
                start_index=start,
                end_index=end,
                start_price=float(prices[start]),
                end_price=float(prices[end]),
            )
            for start, end in zip(recent[:-1], recent[1:])
        ]

        waves, mode = self._label(waves, prices, trend)
        current = waves[-1].label if waves else UNKNOWN_LABEL
        logger.debug(
            f"Classified {len(waves)} waves: trend={trend.value}, mode={mode.value}, current={current}"
        )
        return WaveSegmentation(
            waves=waves,
            current_label=current,
            trend=trend,
            mode=mode,
            window_pivots=list(recent),
        )

    def working_window(self, pivots: Sequence[int]) -> list[int]:
        """The most recent pivots; older structure is discarded."""
        count = min(self.config.max_pivots, max(self.config.min_pivots, len(pivots)))
        return list(pivots[-count:])

    def detect_trend(self, prices: np.ndarray, pivots: Sequence[int]) -> Trend:
        """Overall trend from magnitude and swing count together.

        The change runs from the first window pivot to the last observed
        price; swings are counted between consecutive pivots (a flat swing
        counts as down).
        """
        if len(pivots) < 2:
            return Trend.NEUTRAL

        first_price = float(prices[pivots[0]])
        current_price = float(prices[-1])
        overall_change = (current_price - first_price) / first_price * 100.0

        up_swings = 0
        down_swings = 0
        for start, end in zip(pivots[:-1], pivots[1:]):
            if prices[end] > prices[start]:
                up_swings += 1
            else:
                down_swings += 1

        threshold = self.config.trend_threshold_pct
        if overall_change > threshold and up_swings > down_swings:
            return Trend.BULLISH
        if overall_change < -threshold and down_swings > up_swings:
            return Trend.BEARISH
        return Trend.NEUTRAL

    # ── labeling ──────────────────────────────────────────────────

    def _label(
        self,
        waves: list[Wave],
        prices: np.ndarray,
        trend: Trend,
    ) -> tuple[list[Wave], LabelMode]:
        if not waves:
            return waves, LabelMode.NONE

        recent = waves[-self.config.strong_wave_lookback:]
        strong = self.config.strong_wave_pct
        strong_up = sum(1 for w in recent if w.change_pct > strong)
        strong_down = sum(1 for w in recent if -w.change_pct > strong)

        minimum = self.config.min_strong_waves
        if trend == Trend.BULLISH and strong_up >= minimum:
            return self._label_impulse(waves), LabelMode.IMPULSE
        if trend == Trend.BEARISH or (trend == Trend.NEUTRAL and strong_down >= minimum):
            return self._label_correction(waves), LabelMode.CORRECTION
        return self._label_mixed(waves, float(prices[-1])), LabelMode.MIXED

    @staticmethod
    def _label_impulse(waves: list[Wave]) -> list[Wave]:
        """Last up-to-5 waves get 1..5 oldest first; older waves continue the cycle."""
        start = max(0, len(waves) - len(IMPULSE_LABELS))
        return [
            replace(
                w,
                kind=WaveKind.IMPULSE,
                label=IMPULSE_LABELS[(i - start) % len(IMPULSE_LABELS)],
            )
            for i, w in enumerate(waves)
        ]

    @staticmethod
    def _label_correction(waves: list[Wave]) -> list[Wave]:
        """Last up-to-3 waves get A..C oldest first; older waves continue the cycle."""
        start = max(0, len(waves) - len(CORRECTION_LABELS))
        return [
            replace(
                w,
                kind=WaveKind.CORRECTION,
                label=CORRECTION_LABELS[(i - start) % len(CORRECTION_LABELS)],
            )
            for i, w in enumerate(waves)
        ]

    @staticmethod
    def _label_mixed(waves: list[Wave], current_price: float) -> list[Wave]:
        """Seed the last wave from its direction and fan labels backwards.

        Upward: last wave is "3", earlier waves step down and clamp at "1",
        so the wave before it is "2" and never a second "3".
        Downward: last wave is "A", earlier waves wrap through C, B, A
        instead of all collapsing to "A".
        Known heuristic weak point; kept deterministic.
        """
        last = len(waves) - 1
        is_upward = current_price - waves[last].start_price > 0
        seed = IMPULSE_LABELS.index("3")

        labeled = []
        for i, w in enumerate(waves):
            distance = last - i
            if is_upward:
                label = IMPULSE_LABELS[max(0, seed - distance)]
                labeled.append(replace(w, kind=WaveKind.IMPULSE, label=label))
            else:
                label = CORRECTION_LABELS[(-distance) % len(CORRECTION_LABELS)]
                labeled.append(replace(w, kind=WaveKind.CORRECTION, label=label))
        return labeled
