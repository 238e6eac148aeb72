"""Critical Risk Screening.

Detects the conditions that activate the critical-risk veto and picks
risk phrases out of raw news headlines.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from src.signal_fusion.config import DEFAULT_FUSION_CONFIG, FusionConfig
from src.signal_fusion.models import FusionInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskAssessment:
    """Why the critical flag was (or was not) raised.

    Attributes:
        matched_terms: Severe terms found in the supplied risk phrases.
        extreme_sentiment: Sentiment below the panic threshold.
        market_panic: VIX above the panic threshold.
    """

    matched_terms: tuple[str, ...] = field(default_factory=tuple)
    extreme_sentiment: bool = False
    market_panic: bool = False

    @property
    def critical(self) -> bool:
        return bool(self.matched_terms) or self.extreme_sentiment or self.market_panic

    @property
    def reasons(self) -> list[str]:
        reasons = []
        if self.matched_terms:
            reasons.append(f"risk terms: {', '.join(self.matched_terms)}")
        if self.extreme_sentiment:
            reasons.append("extreme negative sentiment")
        if self.market_panic:
            reasons.append("market-wide volatility shock")
        return reasons


def match_severe_terms(phrases: Iterable[str], terms: Iterable[str]) -> tuple[str, ...]:
    """Return the severe terms contained in any phrase, case-insensitively."""
    lowered = [p.lower() for p in phrases if p]
    matched = []
    for term in terms:
        if any(term in phrase for phrase in lowered):
            matched.append(term)
    return tuple(matched)


def assess_critical_risk(
    fusion_input: FusionInput,
    config: Optional[FusionConfig] = None,
) -> RiskAssessment:
    """Evaluate the three critical-risk conditions for one input."""
    config = config or DEFAULT_FUSION_CONFIG
    vix = fusion_input.vix_level if fusion_input.vix_level is not None else config.default_vix

    assessment = RiskAssessment(
        matched_terms=match_severe_terms(fusion_input.critical_risks, config.severe_risk_terms),
        extreme_sentiment=fusion_input.sentiment.score < config.sentiment_panic_threshold,
        market_panic=vix > config.panic_vix_threshold,
    )
    if assessment.critical:
        logger.warning(
            f"Critical risk for {fusion_input.symbol or 'instrument'}: "
            f"{'; '.join(assessment.reasons)}"
        )
    return assessment


def extract_risk_phrases(
    headlines: Iterable[str],
    config: Optional[FusionConfig] = None,
) -> list[str]:
    """Pick the headlines that mention a risk term.

    Terms match on word boundaries, plural allowed, so that "sec" does
    not match "sector". Headlines are returned unchanged, in input order.
    """
    config = config or DEFAULT_FUSION_CONFIG
    pattern = re.compile(
        r"\b(" + "|".join(re.escape(t) for t in config.headline_risk_terms) + r")s?\b",
        re.IGNORECASE,
    )
    return [h for h in headlines if h and pattern.search(h)]
