"""Signal Fusion - merges four analytical signals into one decision.

Implements the critical-risk veto, context-adaptive weighting,
conflict and confidence gating, recommendation mapping, position
sizing, price targets and rationale generation.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from src.logging_config.performance import log_performance
from src.signal_fusion.config import (
    DEFAULT_FUSION_CONFIG,
    FusionConfig,
    Recommendation,
)
from src.signal_fusion.models import FusionInput, FusionOutput
from src.signal_fusion.rationale import RationaleGenerator
from src.signal_fusion.risk import assess_critical_risk
from src.signal_fusion.targets import calculate_price_targets
from src.signal_fusion.weights import AdaptiveWeights, classify_instrument

logger = logging.getLogger(__name__)


class FusionEngine:
    """Fuses pattern, technical, sentiment and macro signals.

    Pipeline:
      1) Detect critical risk (veto precondition)
      2) Classify the instrument context
      3) Compute adaptive weights (context shift, confidence discount, renormalize)
      4) Weighted composite score, capped while a critical risk is active
      5) Gate on conflicting signals and low confidence (AVOID)
      6) Map the final composite to BUY / HOLD / SELL with a confidence
      7) Position size multiplier
      8) Entry, stop and targets
      9) Rationale

    The engine holds only its configuration; ``fuse`` is a pure function
    of its input and may be called concurrently.

    Args:
        config: FusionConfig with weights, thresholds and target multiples.
    """

    def __init__(self, config: Optional[FusionConfig] = None) -> None:
        self.config = config or DEFAULT_FUSION_CONFIG
        self._weights = AdaptiveWeights(self.config)
        self._rationale = RationaleGenerator(conflict_spread=self.config.conflict_spread)

    # ── public API ────────────────────────────────────────────────

    @log_performance()
    def fuse(self, fusion_input: FusionInput) -> FusionOutput:
        """Fuse one instrument snapshot into a recommendation.

        Args:
            fusion_input: The four signals plus price and context.

        Returns:
            A fresh FusionOutput.
        """
        cfg = self.config
        scores = fusion_input.scores()
        confidences = fusion_input.confidences(cfg.default_confidence)
        vix = fusion_input.vix_level if fusion_input.vix_level is not None else cfg.default_vix

        risk = assess_critical_risk(fusion_input, cfg)
        critical_flag = risk.critical

        instrument_type = classify_instrument(fusion_input.industry, cfg)

        weights = self._weights.get_weights(instrument_type, vix, critical_flag, confidences)

        composite = sum(scores[name] * weights.get(name) for name in scores)
        final_composite = composite
        if critical_flag and composite > cfg.veto_cap:
            final_composite = cfg.veto_cap

        conflicting = self.has_conflicting_signals(scores.values())
        mean_confidence = sum(confidences.values()) / len(confidences)
        low_confidence = mean_confidence < cfg.low_confidence_threshold

        if conflicting or low_confidence:
            recommendation = Recommendation.AVOID
            confidence = max(cfg.min_confidence, mean_confidence * cfg.avoid_confidence_factor)
        else:
            recommendation, confidence = self._map_recommendation(final_composite)

        if critical_flag:
            confidence = max(cfg.min_confidence, confidence - cfg.critical_confidence_penalty)

        position_size = self._position_size(scores["macro"], scores["sentiment"])

        targets = calculate_price_targets(
            fusion_input.current_price,
            recommendation,
            final_composite,
            fusion_input.volatility_unit,
            cfg.targets,
        )

        rationale = self._rationale.generate(
            scores,
            final_composite,
            recommendation,
            weights,
            critical_flag,
            conflicting=conflicting,
            low_confidence=low_confidence,
        )

        log = logger.warning if recommendation == Recommendation.AVOID else logger.info
        log(
            f"{fusion_input.symbol or 'instrument'}: {recommendation.value} "
            f"(composite={composite:.1f}, final={final_composite:.1f}, "
            f"confidence={confidence:.0f}, critical={critical_flag})",
            extra={"recommendation": recommendation.value, "composite": round(final_composite, 2)},
        )

        return FusionOutput(
            recommendation=recommendation,
            confidence=confidence,
            composite_score=composite,
            final_composite=final_composite,
            entry=targets.entry,
            stop=targets.stop,
            target1=targets.target1,
            target2=targets.target2,
            rationale=rationale,
            adjusted_weights=weights,
            critical_flag=critical_flag,
            position_size_multiplier=position_size,
            breakdown=scores,
            instrument_type=instrument_type,
            conflicting_signals=conflicting,
            low_confidence=low_confidence,
        )

    def has_conflicting_signals(self, scores: Iterable[float]) -> bool:
        """True when the spread between the highest and lowest score is too wide."""
        values = list(scores)
        return (max(values) - min(values)) > self.config.conflict_spread

    # ── internal helpers ──────────────────────────────────────────

    def _map_recommendation(self, final_composite: float) -> tuple[Recommendation, float]:
        """Map the final composite to a directional outcome and its confidence.

        BUY/SELL confidence grows with distance from the midpoint plus a
        flat bonus; HOLD confidence peaks at the midpoint.
        """
        cfg = self.config
        if final_composite >= cfg.buy_threshold:
            confidence = min(cfg.max_confidence, final_composite + cfg.directional_confidence_bonus)
            return Recommendation.BUY, confidence
        if final_composite <= cfg.sell_threshold:
            confidence = min(
                cfg.max_confidence,
                (100.0 - final_composite) + cfg.directional_confidence_bonus,
            )
            return Recommendation.SELL, confidence
        return Recommendation.HOLD, 100.0 - abs(final_composite - 50.0) * 2.0

    def _position_size(self, macro_score: float, sentiment_score: float) -> float:
        threshold = self.config.reduced_size_threshold
        if macro_score < threshold and sentiment_score < threshold:
            return self.config.reduced_size_multiplier
        return 1.0
