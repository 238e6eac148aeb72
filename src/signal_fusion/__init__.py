"""Adaptive Signal Fusion Engine.

Fuses four analytical signals (pattern, technical, sentiment, macro) into
one recommendation with context-adaptive weights, a critical-risk veto,
volatility-scaled price targets and a plain-language rationale.

Pipeline: weigh -> fuse -> veto -> recommend -> target -> explain

Example:
    from src.signal_fusion import FusionEngine, FusionInput

    engine = FusionEngine()
    result = engine.fuse(FusionInput.from_scores(70, 70, 70, 70, current_price=100.0))
    print(result.recommendation, result.confidence, result.rationale)
"""

from src.signal_fusion.config import (
    BASE_WEIGHTS,
    CONTEXT_SHIFTS,
    DEFAULT_FUSION_CONFIG,
    SEVERE_RISK_TERMS,
    SIGNAL_ORDER,
    FusionConfig,
    InstrumentType,
    Recommendation,
    SignalName,
    TargetConfig,
)
from src.signal_fusion.exceptions import (
    InvalidInputError,
    InvalidSeriesError,
    InvalidSignalError,
    WaveFusionError,
)
from src.signal_fusion.models import (
    AnalyticalSignal,
    FusionInput,
    FusionOutput,
    PriceTargets,
    SignalWeights,
)
from src.signal_fusion.risk import (
    RiskAssessment,
    assess_critical_risk,
    extract_risk_phrases,
)
from src.signal_fusion.weights import AdaptiveWeights, classify_instrument
from src.signal_fusion.targets import calculate_price_targets
from src.signal_fusion.rationale import RationaleGenerator, format_breakdown
from src.signal_fusion.fusion import FusionEngine

__all__ = [
    # Config
    "BASE_WEIGHTS",
    "CONTEXT_SHIFTS",
    "DEFAULT_FUSION_CONFIG",
    "SEVERE_RISK_TERMS",
    "SIGNAL_ORDER",
    "FusionConfig",
    "InstrumentType",
    "Recommendation",
    "SignalName",
    "TargetConfig",
    # Errors
    "WaveFusionError",
    "InvalidSignalError",
    "InvalidInputError",
    "InvalidSeriesError",
    # Models
    "AnalyticalSignal",
    "FusionInput",
    "FusionOutput",
    "PriceTargets",
    "SignalWeights",
    # Risk
    "RiskAssessment",
    "assess_critical_risk",
    "extract_risk_phrases",
    # Weights
    "AdaptiveWeights",
    "classify_instrument",
    # Targets
    "calculate_price_targets",
    # Rationale
    "RationaleGenerator",
    "format_breakdown",
    # Engine
    "FusionEngine",
]
