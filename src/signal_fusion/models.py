"""Data models for Signal Fusion.

Value objects exchanged with external collaborators: the analytical
signals going in and the fused recommendation coming out. Inputs are
validated on construction and never clamped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from src.signal_fusion.config import InstrumentType, Recommendation, SignalName
from src.signal_fusion.exceptions import InvalidInputError, InvalidSignalError

def _check_range(value: float, name: str, low: float = 0.0, high: float = 100.0) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidSignalError(f"{name} must be a number, got {value!r}", field=name) from None
    if not math.isfinite(value) or value < low or value > high:
        raise InvalidSignalError(
            f"{name} must be within [{low:g}, {high:g}], got {value}", field=name
        )
    return value


@dataclass(frozen=True)
class AnalyticalSignal:
    """One analytical dimension, already normalized by its producer.

    Attributes:
        score: 0 (maximally bearish) to 100 (maximally bullish).
        confidence: Producer's own confidence, 0 to 100. None leaves it to
            the fusion engine's configured default.
        name: Optional signal name, used to label validation errors.
    """

    score: float
    confidence: Optional[float] = None
    name: str = "signal"

    def __post_init__(self) -> None:
        object.__setattr__(self, "score", _check_range(self.score, f"{self.name}.score"))
        if self.confidence is not None:
            object.__setattr__(
                self, "confidence", _check_range(self.confidence, f"{self.name}.confidence")
            )

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "confidence": self.confidence}


@dataclass(frozen=True)
class SignalWeights:
    """Adjusted weight per analytical dimension."""

    pattern: float
    technical: float
    sentiment: float
    macro: float

    @classmethod
    def from_dict(cls, weights: dict[str, float]) -> "SignalWeights":
        return cls(**{s.value: float(weights[s.value]) for s in SignalName})

    @property
    def total(self) -> float:
        return self.pattern + self.technical + self.sentiment + self.macro

    def get(self, name: SignalName | str) -> float:
        return getattr(self, SignalName(name).value)

    def to_dict(self) -> dict[str, float]:
        return {s.value: getattr(self, s.value) for s in SignalName}


@dataclass(frozen=True)
class FusionInput:
    """Everything the fusion engine needs for one instrument snapshot.

    Attributes:
        pattern: Pattern/structure signal from the wave analyzer.
        technical: Oscillator/momentum signal.
        sentiment: News/social sentiment signal.
        macro: Macro regime signal.
        current_price: Last traded price, must be positive.
        symbol: Instrument symbol, informational only.
        industry: Industry name used for growth/defensive classification.
        vix_level: Market-wide volatility index; engine default when None.
        critical_risks: Free-text risk phrases extracted from news.
        volatility_unit: ATR-like unit; percentage fallbacks when None or 0.
    """

    pattern: AnalyticalSignal
    technical: AnalyticalSignal
    sentiment: AnalyticalSignal
    macro: AnalyticalSignal
    current_price: float
    symbol: str = ""
    industry: Optional[str] = None
    vix_level: Optional[float] = None
    critical_risks: tuple[str, ...] = ()
    volatility_unit: Optional[float] = None

    def __post_init__(self) -> None:
        for sig in SignalName:
            value = getattr(self, sig.value)
            if not isinstance(value, AnalyticalSignal):
                raise InvalidSignalError(
                    f"{sig.value} must be an AnalyticalSignal, got {type(value).__name__}",
                    field=sig.value,
                )

        try:
            price = float(self.current_price)
        except (TypeError, ValueError):
            raise InvalidInputError(
                f"current_price must be a number, got {self.current_price!r}",
                field="current_price",
            ) from None
        if not math.isfinite(price) or price <= 0:
            raise InvalidInputError(
                f"current_price must be positive, got {self.current_price}",
                field="current_price",
            )
        object.__setattr__(self, "current_price", price)

        for name in ("vix_level", "volatility_unit"):
            value = getattr(self, name)
            if value is None:
                continue
            value = float(value)
            if not math.isfinite(value) or value < 0:
                raise InvalidInputError(f"{name} must be non-negative, got {value}", field=name)
            object.__setattr__(self, name, value)

        risks = self.critical_risks or ()
        if isinstance(risks, str):
            risks = (risks,)
        object.__setattr__(self, "critical_risks", tuple(risks))

    @classmethod
    def from_scores(
        cls,
        pattern: float,
        technical: float,
        sentiment: float,
        macro: float,
        current_price: float,
        confidences: Optional[dict[str, float]] = None,
        **kwargs: Any,
    ) -> "FusionInput":
        """Build an input from bare scores.

        Signals missing from ``confidences`` get the engine's default
        confidence when fused.
        """
        confidences = confidences or {}
        scores = {"pattern": pattern, "technical": technical, "sentiment": sentiment, "macro": macro}
        signals = {
            name: AnalyticalSignal(
                score=score,
                confidence=confidences.get(name),
                name=name,
            )
            for name, score in scores.items()
        }
        return cls(current_price=current_price, **signals, **kwargs)

    def signal(self, name: SignalName | str) -> AnalyticalSignal:
        return getattr(self, SignalName(name).value)

    def scores(self) -> dict[str, float]:
        return {s.value: self.signal(s).score for s in SignalName}

    def confidences(self, default: float) -> dict[str, float]:
        """Confidence per signal, with ``default`` for signals that carry none."""
        values = {}
        for s in SignalName:
            confidence = self.signal(s).confidence
            values[s.value] = default if confidence is None else confidence
        return values


@dataclass(frozen=True)
class PriceTargets:
    """Entry, stop and two targets, rounded for display."""

    entry: float
    stop: float
    target1: float
    target2: float

    def to_dict(self) -> dict[str, float]:
        return {
            "entry": self.entry,
            "stop": self.stop,
            "target1": self.target1,
            "target2": self.target2,
        }


@dataclass(frozen=True)
class FusionOutput:
    """Fused recommendation for one instrument snapshot.

    Constructed fresh per call and never mutated.

    Attributes:
        recommendation: BUY / HOLD / SELL / AVOID.
        confidence: Decision confidence, 0 to 100.
        composite_score: Weighted sum before the critical-risk veto.
        final_composite: Composite after the veto cap.
        entry: Suggested entry price.
        stop: Suggested stop price.
        target1: First price target.
        target2: Second price target.
        rationale: Deterministic explanation of the decision.
        adjusted_weights: Context- and confidence-adjusted weights (sum 1.0).
        critical_flag: Whether a critical risk was detected.
        position_size_multiplier: 1.0 normal, reduced on double bearish tailwinds.
        breakdown: Raw score per signal.
        instrument_type: growth / defensive / neutral.
        conflicting_signals: Whether the score spread exceeded the conflict limit.
        low_confidence: Whether mean confidence fell below the limit.
    """

    recommendation: Recommendation
    confidence: float
    composite_score: float
    final_composite: float
    entry: float
    stop: float
    target1: float
    target2: float
    rationale: str
    adjusted_weights: SignalWeights
    critical_flag: bool
    position_size_multiplier: float
    breakdown: dict[str, float] = field(default_factory=dict)
    instrument_type: InstrumentType = InstrumentType.NEUTRAL
    conflicting_signals: bool = False
    low_confidence: bool = False

    @property
    def targets(self) -> PriceTargets:
        return PriceTargets(self.entry, self.stop, self.target1, self.target2)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        return {
            "recommendation": self.recommendation.value,
            "confidence": round(self.confidence, 2),
            "composite_score": round(self.composite_score, 2),
            "final_composite": round(self.final_composite, 2),
            "entry": self.entry,
            "stop": self.stop,
            "target1": self.target1,
            "target2": self.target2,
            "rationale": self.rationale,
            "adjusted_weights": {k: round(v, 4) for k, v in self.adjusted_weights.to_dict().items()},
            "critical_flag": self.critical_flag,
            "position_size_multiplier": self.position_size_multiplier,
            "breakdown": dict(self.breakdown),
            "instrument_type": self.instrument_type.value,
            "conflicting_signals": self.conflicting_signals,
            "low_confidence": self.low_confidence,
        }
