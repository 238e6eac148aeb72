"""Price Target Calculation.

Entry, stop and two targets around the current price. Offsets are
multiples of the volatility unit when one is available, otherwise
fixed percentages scaled by the composite score.
"""

from typing import Optional

from src.signal_fusion.config import Recommendation, TargetConfig
from src.signal_fusion.models import PriceTargets


def calculate_price_targets(
    current_price: float,
    recommendation: Recommendation,
    score: float,
    volatility_unit: Optional[float] = None,
    config: Optional[TargetConfig] = None,
) -> PriceTargets:
    """Calculate entry, stop and target prices.

    Args:
        current_price: Last traded price.
        recommendation: Fused recommendation; SELL flips direction,
            HOLD and AVOID use a narrower symmetric band.
        score: Final composite score (0-100), used by the percentage fallback.
        volatility_unit: ATR-like unit. None or 0 selects the fallback.
        config: Target multiples.

    Returns:
        PriceTargets rounded to ``config.decimals`` places.
    """
    config = config or TargetConfig()

    if volatility_unit and volatility_unit > 0:
        entry, stop, target1, target2 = _atr_targets(
            current_price, recommendation, volatility_unit, config
        )
    else:
        entry, stop, target1, target2 = _percentage_targets(
            current_price, recommendation, score, config
        )

    return PriceTargets(
        entry=round(entry, config.decimals),
        stop=round(stop, config.decimals),
        target1=round(target1, config.decimals),
        target2=round(target2, config.decimals),
    )


def _atr_targets(
    price: float,
    recommendation: Recommendation,
    atr: float,
    config: TargetConfig,
) -> tuple[float, float, float, float]:
    if recommendation == Recommendation.BUY:
        entry = price - config.atr_entry * atr
        return (
            entry,
            entry - config.atr_stop * atr,
            entry + config.atr_target1 * atr,
            entry + config.atr_target2 * atr,
        )
    if recommendation == Recommendation.SELL:
        # Short position
        entry = price + config.atr_entry * atr
        return (
            entry,
            entry + config.atr_stop * atr,
            entry - config.atr_target1 * atr,
            entry - config.atr_target2 * atr,
        )
    return (
        price,
        price - config.atr_neutral_stop * atr,
        price + config.atr_neutral_target1 * atr,
        price + config.atr_neutral_target2 * atr,
    )


def _percentage_targets(
    price: float,
    recommendation: Recommendation,
    score: float,
    config: TargetConfig,
) -> tuple[float, float, float, float]:
    strength = score / 100.0
    if recommendation == Recommendation.BUY:
        entry = price * (1 - config.pct_entry)
        return (
            entry,
            entry * (1 - config.pct_stop),
            entry * (1 + strength * config.pct_buy_target1),
            entry * (1 + strength * config.pct_buy_target2),
        )
    if recommendation == Recommendation.SELL:
        entry = price * (1 + config.pct_entry)
        weakness = 1 - strength
        return (
            entry,
            entry * (1 + config.pct_stop),
            entry * (1 - weakness * config.pct_sell_target1),
            entry * (1 - weakness * config.pct_sell_target2),
        )
    return (
        price,
        price * (1 - config.pct_neutral_stop),
        price * (1 + config.pct_neutral_target1),
        price * (1 + config.pct_neutral_target2),
    )
