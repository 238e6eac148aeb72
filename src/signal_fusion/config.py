"""Signal Fusion Configuration.

Policy constants for critical-risk screening, context-adaptive weights,
decision thresholds and price targets. All values are tunable; the
defaults reproduce the production behaviour.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class SignalName(str, Enum):
    """The four fused analytical dimensions, in tie-break order."""
    PATTERN = "pattern"
    TECHNICAL = "technical"
    SENTIMENT = "sentiment"
    MACRO = "macro"


class InstrumentType(str, Enum):
    """Instrument context used to shift base weights."""
    GROWTH = "growth"
    DEFENSIVE = "defensive"
    NEUTRAL = "neutral"


class Recommendation(str, Enum):
    """Fused recommendation outcome."""
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    AVOID = "AVOID"

    def __str__(self) -> str:
        return self.value


SIGNAL_ORDER: tuple[SignalName, ...] = tuple(SignalName)

# Base weights, pattern/structure signal primary (must sum to 1.0)
BASE_WEIGHTS: dict[str, float] = {
    "pattern": 0.40,
    "technical": 0.25,
    "sentiment": 0.20,
    "macro": 0.15,
}

# Context shifts, applied in this order when their condition holds
CONTEXT_SHIFTS: dict[str, dict[str, float]] = {
    "growth": {"sentiment": 0.10, "macro": 0.10, "pattern": -0.10, "technical": -0.10},
    "defensive": {"technical": 0.15, "macro": 0.15, "pattern": -0.15, "sentiment": -0.15},
    "high_volatility": {"pattern": -0.15, "macro": 0.15},
    "critical_risk": {"technical": -0.10, "sentiment": -0.10, "pattern": 0.10},
}

SEVERE_RISK_TERMS: tuple[str, ...] = (
    "fraud",
    "investigation",
    "sec probe",
    "lawsuit",
    "bankruptcy",
    "delisting",
    "accounting fraud",
    "insider trading",
    "regulatory action",
    "criminal investigation",
    "class action",
    "recall",
    "safety issue",
)

# Terms used to pick risk phrases out of raw news headlines
HEADLINE_RISK_TERMS: tuple[str, ...] = (
    "fraud",
    "investigation",
    "lawsuit",
    "sec",
    "probe",
    "bankruptcy",
    "recall",
    "delisting",
)

GROWTH_INDUSTRIES: tuple[str, ...] = (
    "technology", "software", "internet", "biotech",
    "crypto", "ai", "saas", "semiconductor",
)

DEFENSIVE_INDUSTRIES: tuple[str, ...] = (
    "utilities", "consumer staples", "healthcare",
    "telecom", "reit", "dividend",
)


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class TargetConfig:
    """Price target multiples.

    ATR-based offsets are multiples of the volatility unit. Percentage
    offsets are the fallback when no volatility unit is available.
    """
    atr_entry: float = 0.5
    atr_stop: float = 2.0
    atr_target1: float = 2.0
    atr_target2: float = 4.0
    atr_neutral_stop: float = 1.5
    atr_neutral_target1: float = 1.0
    atr_neutral_target2: float = 2.0
    pct_entry: float = 0.02
    pct_stop: float = 0.10
    pct_buy_target1: float = 0.15
    pct_buy_target2: float = 0.30
    pct_sell_target1: float = 0.10
    pct_sell_target2: float = 0.20
    pct_neutral_stop: float = 0.07
    pct_neutral_target1: float = 0.05
    pct_neutral_target2: float = 0.10
    decimals: int = 2


@dataclass(frozen=True)
class FusionConfig:
    """Fusion engine policy.

    Attributes:
        base_weights: Starting weight per signal name.
        context_shifts: Additive shifts keyed by context condition.
        high_vix_threshold: VIX above which the high-volatility shift applies.
        panic_vix_threshold: VIX above which the critical flag is raised.
        default_vix: VIX assumed when none is supplied.
        default_confidence: Confidence assumed for a signal with none.
        sentiment_panic_threshold: Sentiment below which the critical flag is raised.
        veto_cap: Composite ceiling while a critical risk is active.
        conflict_spread: Max-min score spread above which signals conflict.
        low_confidence_threshold: Mean confidence below which data is low-confidence.
        buy_threshold: Final composite at or above which the outcome is BUY.
        sell_threshold: Final composite at or below which the outcome is SELL.
        reduced_size_threshold: Macro and sentiment both below this halve position size.
        reduced_size_multiplier: Position size multiplier when reduced.
        critical_confidence_penalty: Confidence removed while a critical risk is active.
        min_confidence: Confidence floor for penalized and AVOID outcomes.
        max_confidence: Confidence ceiling for BUY/SELL outcomes.
        directional_confidence_bonus: Flat bonus added to BUY/SELL confidence.
        avoid_confidence_factor: Share of mean confidence reported for AVOID.
    """

    base_weights: Mapping[str, float] = field(default_factory=lambda: _frozen(BASE_WEIGHTS))
    context_shifts: Mapping[str, Mapping[str, float]] = field(
        default_factory=lambda: _frozen({k: _frozen(v) for k, v in CONTEXT_SHIFTS.items()})
    )
    severe_risk_terms: tuple[str, ...] = SEVERE_RISK_TERMS
    headline_risk_terms: tuple[str, ...] = HEADLINE_RISK_TERMS
    growth_industries: tuple[str, ...] = GROWTH_INDUSTRIES
    defensive_industries: tuple[str, ...] = DEFENSIVE_INDUSTRIES
    high_vix_threshold: float = 25.0
    panic_vix_threshold: float = 40.0
    default_vix: float = 20.0
    default_confidence: float = 75.0
    sentiment_panic_threshold: float = 20.0
    veto_cap: float = 55.0
    conflict_spread: float = 50.0
    low_confidence_threshold: float = 50.0
    buy_threshold: float = 65.0
    sell_threshold: float = 44.0
    reduced_size_threshold: float = 45.0
    reduced_size_multiplier: float = 0.5
    critical_confidence_penalty: float = 25.0
    min_confidence: float = 30.0
    max_confidence: float = 95.0
    directional_confidence_bonus: float = 10.0
    avoid_confidence_factor: float = 0.8
    targets: TargetConfig = field(default_factory=TargetConfig)

    def __post_init__(self) -> None:
        missing = [s.value for s in SignalName if s.value not in self.base_weights]
        if missing:
            raise ValueError(f"base_weights missing signals: {missing}")
        if self.sell_threshold >= self.buy_threshold:
            raise ValueError("sell_threshold must be below buy_threshold")


DEFAULT_FUSION_CONFIG = FusionConfig()
