"""Tests for the end-to-end insight pipeline and batch isolation."""

import logging

from src.elliott import WaveConfig
from src.insights import BatchResult, InsightEngine, InsightRequest, InstrumentInsight
from src.signal_fusion import FusionConfig, Recommendation


def _request(symbol, series, bullish_signals, **kwargs):
    return InsightRequest(symbol=symbol, series=series, **bullish_signals, **kwargs)


class TestInsightEngine:
    """Single-instrument evaluation."""

    def test_generate(self, three_wave_series, bullish_signals):
        insight = InsightEngine().generate(_request("UP", three_wave_series, bullish_signals))

        assert isinstance(insight, InstrumentInsight)
        assert insight.wave_analysis.current_wave == "3"
        assert insight.pattern_signal.score == 95.0
        assert insight.pattern_signal.confidence == insight.wave_analysis.confidence
        assert insight.fusion.breakdown["pattern"] == 95.0
        assert insight.fusion.recommendation == Recommendation.BUY
        # ATR-based targets from the series' volatility unit
        unit = insight.wave_analysis.volatility_unit
        assert insight.fusion.entry == round(111.5 - 0.5 * unit, 2)

    def test_headlines_feed_the_veto(self, three_wave_series, bullish_signals):
        insight = InsightEngine().generate(
            _request(
                "UP", three_wave_series, bullish_signals,
                headlines=["Regulators launch fraud investigation", "New product launch"],
            )
        )
        assert insight.risk_phrases == ("Regulators launch fraud investigation",)
        assert insight.fusion.critical_flag
        assert insight.fusion.final_composite <= 55

    def test_single_headline_string(self, three_wave_series, bullish_signals):
        insight = InsightEngine().generate(
            _request("UP", three_wave_series, bullish_signals, headlines="SEC investigation opened")
        )
        assert insight.risk_phrases == ("SEC investigation opened",)
        assert insight.fusion.critical_flag

    def test_explicit_and_screened_phrases_merge(self, three_wave_series, bullish_signals):
        insight = InsightEngine().generate(
            _request(
                "UP", three_wave_series, bullish_signals,
                risk_phrases=["Product recall"],
                headlines=["Product recall", "Lawsuit filed"],
            )
        )
        assert insight.risk_phrases == ("Product recall", "Lawsuit filed")

    def test_custom_configs(self, impulse_series, bullish_signals):
        engine = InsightEngine(
            wave_config=WaveConfig(pivot_window=2),
            fusion_config=FusionConfig(buy_threshold=90.0),
        )
        assert engine.analyzer.config.pivot_window == 2
        assert engine.engine.config.buy_threshold == 90.0
        insight = engine.generate(_request("CFG", impulse_series, bullish_signals))
        assert insight.fusion.recommendation != Recommendation.BUY

    def test_to_dict(self, impulse_series, bullish_signals):
        data = InsightEngine().generate(_request("IMP", impulse_series, bullish_signals)).to_dict()
        assert data["symbol"] == "IMP"
        assert data["wave_analysis"]["current_wave"] == "5"
        assert data["pattern_signal"] == {"score": 10.0, "confidence": 85.0}
        assert "recommendation" in data["fusion"]


class TestBatch:
    """Independent evaluation across instruments."""

    def test_failure_is_isolated(self, impulse_series, three_wave_series, bullish_signals, caplog):
        requests = [
            _request("IMP", impulse_series, bullish_signals),
            _request("EMPTY", [], bullish_signals),
            _request("BAD", [100.0, -1.0, 102.0], bullish_signals),
            _request("UP", three_wave_series, bullish_signals),
        ]
        with caplog.at_level(logging.ERROR, logger="src.insights.pipeline"):
            result = InsightEngine().generate_batch(requests)

        assert isinstance(result, BatchResult)
        assert [i.symbol for i in result.insights] == ["IMP", "UP"]
        assert set(result.errors) == {"EMPTY", "BAD"}
        assert result.errors["EMPTY"][0]["error"] == "InvalidInputError"
        assert result.errors["EMPTY"][0]["field"] == "current_price"
        assert result.errors["EMPTY"][0]["index"] == 1
        assert result.errors["BAD"][0]["error"] == "InvalidSeriesError"
        assert result.errors["BAD"][0]["index"] == 2
        assert result.succeeded == 2
        assert result.failed == 2
        assert "Insight failed for EMPTY" in caplog.text

    def test_batch_matches_single(self, impulse_series, bullish_signals):
        engine = InsightEngine()
        request = _request("IMP", impulse_series, bullish_signals)
        single = engine.generate(request)
        batch = engine.generate_batch([request])
        assert batch.get("IMP").fusion == single.fusion
        assert batch.get("MISSING") is None

    def test_empty_batch(self):
        result = InsightEngine().generate_batch([])
        assert result.insights == []
        assert result.errors == {}
        assert result.to_dict() == {"insights": [], "errors": {}}

    def test_unexpected_error_recorded(self, bullish_signals):
        request = _request("ODD", object(), bullish_signals)
        result = InsightEngine().generate_batch([request])
        assert "ODD" in result.errors
        assert result.errors["ODD"] == [
            {"error": "TypeError", "message": result.errors["ODD"][0]["message"], "index": 0}
        ]

    def test_repeated_symbol_keeps_every_failure(self, three_wave_series, bullish_signals):
        requests = [
            _request("DUP", [], bullish_signals),
            _request("DUP", three_wave_series, bullish_signals),
            _request("DUP", [100.0, 0.0], bullish_signals),
        ]
        result = InsightEngine().generate_batch(requests)

        assert result.succeeded == 1
        assert result.failed == 2
        assert [e["index"] for e in result.errors["DUP"]] == [0, 2]
        assert [e["error"] for e in result.errors["DUP"]] == [
            "InvalidInputError", "InvalidSeriesError",
        ]
        assert len(result.to_dict()["errors"]["DUP"]) == 2
