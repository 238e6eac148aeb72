"""Adaptive Signal Weights - Context-based weight allocation.

Different instrument contexts favor different signals:
- Growth: sentiment and macro move prices more than structure
- Defensive: slower technical and macro signals dominate
- High volatility: structural patterns break down, macro takes over
- Critical risk: fast-moving sentiment and technicals are distrusted

Weights are shifted by context, discounted by each signal's own
confidence, then renormalized to a convex combination.
"""

import logging
from typing import Optional

from src.signal_fusion.config import (
    DEFAULT_FUSION_CONFIG,
    FusionConfig,
    InstrumentType,
    SignalName,
)
from src.signal_fusion.models import SignalWeights

logger = logging.getLogger(__name__)


def classify_instrument(
    industry: Optional[str],
    config: Optional[FusionConfig] = None,
) -> InstrumentType:
    """Classify an instrument as growth, defensive or neutral.

    A keyword matches anywhere in the lowercased industry name, so
    "Nanotechnology" is growth. Short keywords are not word-bounded
    either: "ai" makes "Retail" growth. Growth keywords are checked first.
    """
    config = config or DEFAULT_FUSION_CONFIG
    name = industry or ""
    if not name.strip():
        return InstrumentType.NEUTRAL
    if _matches_any(name, config.growth_industries):
        return InstrumentType.GROWTH
    if _matches_any(name, config.defensive_industries):
        return InstrumentType.DEFENSIVE
    return InstrumentType.NEUTRAL


def _matches_any(name: str, keywords: tuple[str, ...]) -> bool:
    name = name.lower()
    return any(keyword in name for keyword in keywords)


class AdaptiveWeights:
    """Compute adaptive signal weights for one fusion call.

    Weight calculation:
    1. Start with base weights
    2. Apply context shifts in fixed order (instrument type, volatility, critical risk)
    3. Floor at zero, then multiply by confidence / 100
    4. Renormalize to sum to 1.0
    """

    MIN_WEIGHT = 0.0

    def __init__(self, config: Optional[FusionConfig] = None):
        self.config = config or DEFAULT_FUSION_CONFIG

    def get_weights(
        self,
        instrument_type: InstrumentType,
        vix_level: float,
        critical_flag: bool,
        confidences: dict[str, float],
    ) -> SignalWeights:
        """Get adjusted weights for the given context.

        Args:
            instrument_type: Growth / defensive / neutral classification.
            vix_level: Market volatility index (already defaulted).
            critical_flag: Whether the critical-risk veto is active.
            confidences: Signal name -> confidence (0-100).

        Returns:
            SignalWeights summing to 1.0.
        """
        shifted = self.context_weights(instrument_type, vix_level, critical_flag)

        discounted = {
            name: weight * (confidences[name] / 100.0)
            for name, weight in shifted.items()
        }

        weights = self._normalize(discounted)
        if weights is None:
            # Every source reported zero confidence; fall back to context only
            logger.debug("All confidences are zero, using undiscounted context weights")
            weights = self._normalize(shifted) or self._normalize(dict(self.config.base_weights))

        logger.debug(
            "Adjusted weights: "
            + ", ".join(f"{k}={v:.3f}" for k, v in weights.items())
        )
        return SignalWeights.from_dict(weights)

    def context_weights(
        self,
        instrument_type: InstrumentType,
        vix_level: float,
        critical_flag: bool,
    ) -> dict[str, float]:
        """Base weights after the context shifts, floored at zero."""
        weights = {s.value: float(self.config.base_weights[s.value]) for s in SignalName}

        applied = []
        if instrument_type == InstrumentType.GROWTH:
            applied.append("growth")
        elif instrument_type == InstrumentType.DEFENSIVE:
            applied.append("defensive")
        if vix_level > self.config.high_vix_threshold:
            applied.append("high_volatility")
        if critical_flag:
            applied.append("critical_risk")

        for condition in applied:
            for name, delta in self.config.context_shifts.get(condition, {}).items():
                weights[name] += delta

        return {name: max(self.MIN_WEIGHT, w) for name, w in weights.items()}

    @staticmethod
    def _normalize(weights: dict[str, float]) -> Optional[dict[str, float]]:
        total = sum(weights.values())
        if total <= 0:
            return None
        return {name: w / total for name, w in weights.items()}
