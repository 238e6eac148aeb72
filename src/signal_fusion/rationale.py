"""Rationale Generator.

Deterministic, human-readable explanation of a fusion decision. The
text is derived from the decision and never feeds back into it.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.signal_fusion.config import Recommendation, SignalName
from src.signal_fusion.models import FusionOutput, SignalWeights

DISPLAY_NAMES: dict[SignalName, str] = {
    SignalName.PATTERN: "Pattern",
    SignalName.TECHNICAL: "Technical",
    SignalName.SENTIMENT: "Sentiment",
    SignalName.MACRO: "Macro",
}

SUPPORTING_SCORE = 60.0
BEARISH_SCORE = 40.0
CAUTION_SCORE = 40.0
BALANCED_VARIANCE = 200.0


@dataclass(frozen=True)
class Factor:
    """A signal's score and adjusted weight, as shown in the rationale."""

    signal: SignalName
    score: float
    weight: float

    @property
    def name(self) -> str:
        return DISPLAY_NAMES[self.signal]

    @property
    def label(self) -> str:
        return self.name.lower()


def rank_factors(scores: dict[str, float], weights: SignalWeights) -> list[Factor]:
    """Factors sorted by score, highest first; ties keep signal order."""
    factors = [Factor(s, scores[s.value], weights.get(s)) for s in SignalName]
    return sorted(factors, key=lambda f: -f.score)


class RationaleGenerator:
    """Builds the rationale text for a fusion decision."""

    def __init__(self, conflict_spread: float = 50.0):
        self.conflict_spread = conflict_spread

    def generate(
        self,
        scores: dict[str, float],
        final_composite: float,
        recommendation: Recommendation,
        weights: SignalWeights,
        critical_flag: bool,
        conflicting: bool = False,
        low_confidence: bool = False,
    ) -> str:
        """Explain a decision.

        Args:
            scores: Raw score per signal name.
            final_composite: Composite after the veto cap.
            recommendation: Decision being explained.
            weights: Adjusted weights used for the composite.
            critical_flag: Whether the critical-risk veto was active.
            conflicting: Whether the score spread triggered AVOID.
            low_confidence: Whether low mean confidence triggered AVOID.
        """
        parts: list[str] = []
        if critical_flag:
            parts.append(
                "CRITICAL RISK DETECTED: upside is capped because of significant risk "
                "factors (fraud, investigation, extreme sentiment, or macro shock)."
            )

        factors = rank_factors(scores, weights)
        strongest, weakest = factors[0], factors[-1]

        if recommendation == Recommendation.AVOID:
            parts.extend(self._avoid(strongest, weakest, conflicting, low_confidence))
        elif recommendation == Recommendation.BUY:
            parts.extend(self._buy(factors, strongest, weakest, final_composite))
        elif recommendation == Recommendation.SELL:
            parts.extend(self._sell(factors, strongest, weakest, final_composite))
        else:
            parts.extend(self._hold(factors, strongest, weakest, final_composite))

        return " ".join(parts)

    def _avoid(
        self,
        strongest: Factor,
        weakest: Factor,
        conflicting: bool,
        low_confidence: bool,
    ) -> list[str]:
        parts = [
            "AVOID signal detected due to conflicting data sources or insufficient "
            "confidence in the analysis."
        ]
        if not conflicting and not low_confidence:
            conflicting = strongest.score - weakest.score > self.conflict_spread

        if conflicting:
            parts.append(
                f"Major divergence detected: {strongest.name} shows {strongest.score:.0f}/100 "
                f"(weighted at {strongest.weight * 100:.0f}%) while {weakest.name} shows "
                f"{weakest.score:.0f}/100 (weighted at {weakest.weight * 100:.0f}%)."
            )
            parts.append(
                "This lack of consensus across analytical dimensions suggests waiting "
                "for clearer alignment before taking a position."
            )
        if low_confidence or not conflicting:
            parts.append(
                "Low data confidence across multiple analytical sources prevents a "
                "reliable recommendation at this time."
            )
            parts.append(
                "Consider waiting for more data or conducting additional due diligence "
                "before investing."
            )
        return parts

    def _buy(
        self,
        factors: list[Factor],
        strongest: Factor,
        weakest: Factor,
        composite: float,
    ) -> list[str]:
        parts = [
            f"Strong buy signal detected with a composite score of {composite:.1f}/100.",
            f"This recommendation is primarily driven by {strongest.label} analysis, "
            f"which scores {strongest.score:.0f}/100 (weighted at {strongest.weight * 100:.0f}%).",
        ]
        supporting = [
            f for f in factors
            if f.score >= SUPPORTING_SCORE and f.signal != strongest.signal
        ]
        if supporting:
            names = " and ".join(f.label for f in supporting)
            verb = "shows" if len(supporting) == 1 else "show"
            parts.append(f"Supporting this view, {names} also {verb} bullish indicators.")
        if weakest.score < CAUTION_SCORE:
            parts.append(
                f"However, {weakest.label} factors ({weakest.score:.0f}/100, weighted at "
                f"{weakest.weight * 100:.0f}%) suggest caution and should be monitored closely."
            )
        parts.append("The weighted average of all factors aligns toward accumulation at current levels.")
        return parts

    def _sell(
        self,
        factors: list[Factor],
        strongest: Factor,
        weakest: Factor,
        composite: float,
    ) -> list[str]:
        parts = [
            f"Sell signal detected with a composite score of {composite:.1f}/100.",
            f"The bearish outlook is primarily influenced by {weakest.label} analysis "
            f"showing concerning trends at {weakest.score:.0f}/100 "
            f"(weighted at {weakest.weight * 100:.0f}%).",
        ]
        bearish = [f for f in factors if f.score <= BEARISH_SCORE]
        if len(bearish) > 1:
            names = ", ".join(f.label for f in bearish)
            parts.append(
                f"Multiple factors ({names}) are signaling weakness, creating a "
                f"confluence of negative indicators."
            )
        if strongest.score > SUPPORTING_SCORE:
            parts.append(
                f"Despite positive {strongest.label} readings ({strongest.score:.0f}/100), "
                f"the overall weighted analysis suggests risk reduction."
            )
        parts.append("Consider taking profits or implementing protective strategies.")
        return parts

    def _hold(
        self,
        factors: list[Factor],
        strongest: Factor,
        weakest: Factor,
        composite: float,
    ) -> list[str]:
        parts = [
            f"Neutral outlook with a composite score of {composite:.1f}/100.",
            f"The analysis reveals mixed signals: {strongest.label} is relatively positive "
            f"({strongest.score:.0f}/100, weighted at {strongest.weight * 100:.0f}%) while "
            f"{weakest.label} shows weakness ({weakest.score:.0f}/100, weighted at "
            f"{weakest.weight * 100:.0f}%).",
        ]
        variance = sum((f.score - 50.0) ** 2 for f in factors) / len(factors)
        if variance < BALANCED_VARIANCE:
            parts.append("All factors are relatively balanced, suggesting the market is in equilibrium.")
        else:
            parts.append(
                "Divergent signals across different analytical dimensions suggest "
                "waiting for a clearer trend to emerge."
            )
        parts.append("A wait-and-see approach is recommended until stronger directional conviction develops.")
        return parts


def format_breakdown(output: FusionOutput) -> str:
    """One-line score and adjusted-weight breakdown."""
    segments = []
    for signal in SignalName:
        score = output.breakdown.get(signal.value, 0.0)
        weight = output.adjusted_weights.get(signal)
        segments.append(
            f"{DISPLAY_NAMES[signal]}: {score:.0f}/100 ({weight * 100:.0f}% weight)"
        )
    return " | ".join(segments)
