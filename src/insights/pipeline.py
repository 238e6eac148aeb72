"""Insight Pipeline.

End-to-end evaluation of one instrument: wave analysis, pattern signal,
headline risk screening and signal fusion. Batches evaluate each
instrument independently so one bad input never sinks the others.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from src.elliott.analyzer import WaveAnalyzer
from src.elliott.config import WaveConfig
from src.elliott.models import PriceInput, WaveAnalysis
from src.logging_config.context import AnalysisContext, generate_run_id
from src.logging_config.performance import PerformanceTimer
from src.signal_fusion.config import FusionConfig
from src.signal_fusion.exceptions import WaveFusionError
from src.signal_fusion.fusion import FusionEngine
from src.signal_fusion.models import AnalyticalSignal, FusionInput, FusionOutput
from src.signal_fusion.risk import extract_risk_phrases

logger = logging.getLogger(__name__)


@dataclass
class InsightRequest:
    """Inputs for one instrument.

    Attributes:
        symbol: Instrument symbol.
        series: Chronological closing prices.
        technical: Technical signal from an upstream analyzer.
        sentiment: Sentiment signal from an upstream analyzer.
        macro: Macro signal from an upstream analyzer.
        industry: Industry name for growth/defensive classification.
        vix_level: Market-wide volatility index, if known.
        headlines: Raw news headlines screened for risk terms.
        risk_phrases: Risk phrases already extracted upstream.
    """

    symbol: str
    series: PriceInput
    technical: AnalyticalSignal
    sentiment: AnalyticalSignal
    macro: AnalyticalSignal
    industry: Optional[str] = None
    vix_level: Optional[float] = None
    headlines: Sequence[str] = ()
    risk_phrases: Sequence[str] = ()

    def __post_init__(self) -> None:
        # A bare string is one headline, not a sequence of characters
        if isinstance(self.headlines, str):
            self.headlines = (self.headlines,)
        if isinstance(self.risk_phrases, str):
            self.risk_phrases = (self.risk_phrases,)


@dataclass
class InstrumentInsight:
    """Wave analysis and fused decision for one instrument."""

    symbol: str
    wave_analysis: WaveAnalysis
    pattern_signal: AnalyticalSignal
    fusion: FusionOutput
    risk_phrases: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "wave_analysis": self.wave_analysis.to_dict(),
            "pattern_signal": self.pattern_signal.to_dict(),
            "fusion": self.fusion.to_dict(),
            "risk_phrases": list(self.risk_phrases),
        }


@dataclass
class BatchResult:
    """Outcome of a batch run.

    Attributes:
        insights: Successful insights in request order.
        errors: Failure details per symbol, one entry per failed request.
            Each entry carries the request's position in the batch.
    """

    insights: list[InstrumentInsight] = field(default_factory=list)
    errors: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return len(self.insights)

    @property
    def failed(self) -> int:
        return sum(len(entries) for entries in self.errors.values())

    def get(self, symbol: str) -> Optional[InstrumentInsight]:
        for insight in self.insights:
            if insight.symbol == symbol:
                return insight
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "insights": [i.to_dict() for i in self.insights],
            "errors": {symbol: list(entries) for symbol, entries in self.errors.items()},
        }


class InsightEngine:
    """Runs the wave analyzer and fusion engine for one or many instruments.

    Example:
        engine = InsightEngine()
        insight = engine.generate(InsightRequest(
            symbol="AAPL", series=prices,
            technical=AnalyticalSignal(68, 80),
            sentiment=AnalyticalSignal(61, 70),
            macro=AnalyticalSignal(55, 75),
        ))
        print(insight.fusion.recommendation, insight.fusion.rationale)
    """

    def __init__(
        self,
        wave_config: Optional[WaveConfig] = None,
        fusion_config: Optional[FusionConfig] = None,
    ) -> None:
        self.analyzer = WaveAnalyzer(wave_config)
        self.engine = FusionEngine(fusion_config)

    def generate(self, request: InsightRequest) -> InstrumentInsight:
        """Evaluate one instrument end to end."""
        analysis = self.analyzer.analyze(
            request.series,
            sentiment_score=request.sentiment.score,
            macro_score=request.macro.score,
            symbol=request.symbol,
        )
        pattern = analysis.to_signal()

        phrases = list(request.risk_phrases)
        for headline in extract_risk_phrases(request.headlines, self.engine.config):
            if headline not in phrases:
                phrases.append(headline)

        fusion = self.engine.fuse(
            FusionInput(
                pattern=pattern,
                technical=request.technical,
                sentiment=request.sentiment,
                macro=request.macro,
                current_price=analysis.current_price,
                symbol=request.symbol,
                industry=request.industry,
                vix_level=request.vix_level,
                critical_risks=tuple(phrases),
                volatility_unit=analysis.volatility_unit,
            )
        )
        return InstrumentInsight(
            symbol=request.symbol,
            wave_analysis=analysis,
            pattern_signal=pattern,
            fusion=fusion,
            risk_phrases=tuple(phrases),
        )

    def generate_batch(self, requests: Iterable[InsightRequest]) -> BatchResult:
        """Evaluate instruments independently, isolating failures."""
        result = BatchResult()
        run_id = generate_run_id()

        with PerformanceTimer("insight batch") as timer:
            for index, request in enumerate(requests):
                with AnalysisContext(run_id=run_id, symbol=request.symbol):
                    try:
                        result.insights.append(self.generate(request))
                        continue
                    except WaveFusionError as e:
                        logger.exception(f"Insight failed for {request.symbol}: {e.message}")
                        error = e.to_dict()
                    except Exception as e:
                        logger.exception(f"Insight failed for {request.symbol}: {e}")
                        error = {"error": type(e).__name__, "message": str(e)}
                    error["index"] = index
                    result.errors.setdefault(request.symbol, []).append(error)

        logger.info(
            f"Insight batch {run_id}: {result.succeeded} succeeded, "
            f"{result.failed} failed in {timer.duration_ms:.1f}ms"
        )
        return result
