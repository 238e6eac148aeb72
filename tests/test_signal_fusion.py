"""Tests for the Adaptive Signal Fusion Engine.

Covers signal validation, adaptive weights, the critical-risk veto,
AVOID gating, recommendation mapping, position sizing and price targets.
"""

from __future__ import annotations

import pytest

from src.signal_fusion import (
    AdaptiveWeights,
    AnalyticalSignal,
    FusionConfig,
    FusionEngine,
    FusionInput,
    InstrumentType,
    InvalidInputError,
    InvalidSignalError,
    Recommendation,
    SignalName,
    SignalWeights,
    TargetConfig,
    WaveFusionError,
    calculate_price_targets,
    classify_instrument,
)


def _input(pattern=70, technical=70, sentiment=70, macro=70, confidence=90, **kwargs):
    kwargs.setdefault("current_price", 100.0)
    return FusionInput.from_scores(
        pattern, technical, sentiment, macro,
        confidences={name.value: confidence for name in SignalName},
        **kwargs,
    )


# ── TestAnalyticalSignal ──────────────────────────────────────────────


class TestAnalyticalSignal:
    """Validation of signals and inputs."""

    def test_defaults(self):
        sig = AnalyticalSignal(score=60)
        assert sig.confidence is None
        assert sig.to_dict() == {"score": 60.0, "confidence": None}

    def test_input_fills_missing_confidence(self):
        fi = FusionInput.from_scores(70, 70, 70, 70, current_price=10.0, confidences={"macro": 20})
        assert fi.confidences(75.0) == {
            "pattern": 75.0, "technical": 75.0, "sentiment": 75.0, "macro": 20.0,
        }

    @pytest.mark.parametrize("score", [-1, 100.5, float("nan"), float("inf")])
    def test_score_out_of_range(self, score):
        with pytest.raises(InvalidSignalError) as exc_info:
            AnalyticalSignal(score=score, name="technical")
        assert exc_info.value.field == "technical.score"
        assert "technical.score" in str(exc_info.value)

    def test_confidence_out_of_range(self):
        with pytest.raises(InvalidSignalError) as exc_info:
            AnalyticalSignal(score=50, confidence=120, name="macro")
        assert exc_info.value.field == "macro.confidence"

    def test_non_numeric_score(self):
        with pytest.raises(InvalidSignalError):
            AnalyticalSignal(score="high")

    def test_from_scores_names_offending_signal(self):
        with pytest.raises(InvalidSignalError) as exc_info:
            FusionInput.from_scores(70, 70, 140, 70, current_price=10.0)
        assert exc_info.value.field == "sentiment.score"

    @pytest.mark.parametrize("price", [0, -5.0, float("nan")])
    def test_bad_price(self, price):
        with pytest.raises(InvalidInputError) as exc_info:
            _input(current_price=price)
        assert exc_info.value.field == "current_price"

    def test_negative_vix(self):
        with pytest.raises(InvalidInputError) as exc_info:
            _input(vix_level=-1)
        assert exc_info.value.field == "vix_level"

    def test_wrong_signal_type(self):
        good = AnalyticalSignal(50)
        with pytest.raises(InvalidSignalError):
            FusionInput(pattern=50, technical=good, sentiment=good, macro=good, current_price=1.0)

    def test_error_to_dict(self):
        with pytest.raises(WaveFusionError) as exc_info:
            AnalyticalSignal(score=-3, name="pattern")
        data = exc_info.value.to_dict()
        assert data["error"] == "InvalidSignalError"
        assert data["field"] == "pattern.score"
        assert data["details"][0]["field"] == "pattern.score"

    def test_risk_phrases_stored_as_tuple(self):
        fi = _input(critical_risks=["a", "b"])
        assert fi.critical_risks == ("a", "b")

    def test_single_risk_phrase_kept_whole(self):
        fi = _input(critical_risks="SEC investigation opened")
        assert fi.critical_risks == ("SEC investigation opened",)


# ── TestClassifyInstrument ────────────────────────────────────────────


class TestClassifyInstrument:
    """Industry keyword classification."""

    @pytest.mark.parametrize("industry,expected", [
        ("Technology", InstrumentType.GROWTH),
        ("Semiconductors", InstrumentType.GROWTH),
        ("Biotechnology", InstrumentType.GROWTH),
        ("Nanotechnology", InstrumentType.GROWTH),
        ("AI Infrastructure", InstrumentType.GROWTH),
        ("Utilities - Regulated Electric", InstrumentType.DEFENSIVE),
        ("Consumer Staples", InstrumentType.DEFENSIVE),
        ("Healthcare Providers", InstrumentType.DEFENSIVE),
        ("Banks", InstrumentType.NEUTRAL),
        ("Oil & Gas Integrated", InstrumentType.NEUTRAL),
        ("", InstrumentType.NEUTRAL),
        (None, InstrumentType.NEUTRAL),
    ])
    def test_classification(self, industry, expected):
        assert classify_instrument(industry) == expected

    def test_keywords_match_inside_words(self):
        # "ai" inside "Retail", "reit" inside "Equity REITs"
        assert classify_instrument("Retail") == InstrumentType.GROWTH
        assert classify_instrument("Equity REITs") == InstrumentType.DEFENSIVE

    def test_custom_keywords(self):
        config = FusionConfig(growth_industries=("robotics",), defensive_industries=())
        assert classify_instrument("Industrial Robotics", config) == InstrumentType.GROWTH
        assert classify_instrument("Technology", config) == InstrumentType.NEUTRAL


# ── TestAdaptiveWeights ───────────────────────────────────────────────


class TestAdaptiveWeights:
    """Context shifts, confidence discount and normalization."""

    FULL = {name.value: 100.0 for name in SignalName}

    def test_base_weights(self):
        w = AdaptiveWeights().get_weights(InstrumentType.NEUTRAL, 20.0, False, self.FULL)
        assert w.pattern == pytest.approx(0.40)
        assert w.technical == pytest.approx(0.25)
        assert w.sentiment == pytest.approx(0.20)
        assert w.macro == pytest.approx(0.15)

    def test_growth_shift(self):
        w = AdaptiveWeights().get_weights(InstrumentType.GROWTH, 20.0, False, self.FULL)
        assert w.pattern == pytest.approx(0.30)
        assert w.technical == pytest.approx(0.15)
        assert w.sentiment == pytest.approx(0.30)
        assert w.macro == pytest.approx(0.25)

    def test_high_volatility_shift(self):
        w = AdaptiveWeights().get_weights(InstrumentType.NEUTRAL, 30.0, False, self.FULL)
        assert w.pattern == pytest.approx(0.25)
        assert w.macro == pytest.approx(0.30)

    def test_vix_at_threshold_no_shift(self):
        w = AdaptiveWeights().get_weights(InstrumentType.NEUTRAL, 25.0, False, self.FULL)
        assert w.pattern == pytest.approx(0.40)

    def test_defensive_and_critical_floor_at_zero(self):
        weights = AdaptiveWeights().context_weights(InstrumentType.DEFENSIVE, 20.0, True)
        assert weights["sentiment"] == 0.0
        assert all(v >= 0 for v in weights.values())

    def test_confidence_discount(self):
        conf = {"pattern": 50.0, "technical": 100.0, "sentiment": 100.0, "macro": 100.0}
        w = AdaptiveWeights().get_weights(InstrumentType.NEUTRAL, 20.0, False, conf)
        # 0.20 / (0.20 + 0.25 + 0.20 + 0.15)
        assert w.pattern == pytest.approx(0.25)
        assert w.total == pytest.approx(1.0)

    def test_all_zero_confidence_falls_back(self):
        zero = {name.value: 0.0 for name in SignalName}
        w = AdaptiveWeights().get_weights(InstrumentType.NEUTRAL, 20.0, False, zero)
        assert w.pattern == pytest.approx(0.40)
        assert w.total == pytest.approx(1.0)

    @pytest.mark.parametrize("instrument", list(InstrumentType))
    @pytest.mark.parametrize("vix", [10.0, 30.0])
    @pytest.mark.parametrize("critical", [False, True])
    def test_weights_sum_to_one(self, instrument, vix, critical):
        conf = {"pattern": 30.0, "technical": 80.0, "sentiment": 55.0, "macro": 90.0}
        w = AdaptiveWeights().get_weights(instrument, vix, critical, conf)
        assert w.total == pytest.approx(1.0, abs=1e-9)
        assert all(w.get(s) >= 0 for s in SignalName)


# ── TestFusionScenarios ───────────────────────────────────────────────


class TestFusionScenarios:
    """End-to-end fusion decisions."""

    def setup_method(self):
        self.engine = FusionEngine()

    def test_aligned_bullish_buys(self):
        out = self.engine.fuse(_input(vix_level=18))
        assert out.recommendation == Recommendation.BUY
        assert out.confidence >= 80
        assert out.confidence == pytest.approx(80.0)
        assert out.position_size_multiplier == 1.0
        assert out.final_composite == pytest.approx(70.0)
        assert not out.critical_flag

    def test_divergent_signals_avoid(self):
        out = self.engine.fuse(_input(pattern=75, technical=80, sentiment=20, macro=50))
        assert out.recommendation == Recommendation.AVOID
        assert out.conflicting_signals
        assert "Major divergence detected" in out.rationale
        assert out.confidence == pytest.approx(72.0)

    def test_critical_risk_vetoes(self):
        out = self.engine.fuse(
            _input(vix_level=18, critical_risks=["SEC investigation opened"])
        )
        assert out.critical_flag
        assert out.final_composite <= 55
        assert out.final_composite == pytest.approx(55.0)
        assert out.composite_score == pytest.approx(70.0)
        assert out.recommendation in (Recommendation.HOLD, Recommendation.AVOID)
        assert out.recommendation == Recommendation.HOLD
        assert out.confidence == pytest.approx(90.0 - 25.0)
        assert out.rationale.startswith("CRITICAL RISK DETECTED")

    def test_sentiment_panic_is_critical(self):
        out = self.engine.fuse(_input(pattern=40, technical=40, sentiment=15, macro=40))
        assert out.critical_flag

    def test_market_panic_is_critical(self):
        out = self.engine.fuse(_input(vix_level=45))
        assert out.critical_flag
        assert out.final_composite <= 55

    def test_risk_phrase_string_still_vetoes(self):
        out = self.engine.fuse(
            FusionInput.from_scores(
                70, 70, 70, 70, current_price=100.0,
                critical_risks="SEC investigation opened",
            )
        )
        assert out.critical_flag
        assert out.final_composite == pytest.approx(55.0)
        assert out.recommendation == Recommendation.HOLD

    def test_missing_confidence_uses_engine_default(self):
        fi = FusionInput.from_scores(70, 70, 70, 70, current_price=100.0)
        assert self.engine.fuse(fi).recommendation == Recommendation.BUY

        out = FusionEngine(FusionConfig(default_confidence=40.0)).fuse(fi)
        assert out.low_confidence
        assert out.recommendation == Recommendation.AVOID
        assert out.confidence == pytest.approx(32.0)

    def test_default_vix_only_when_missing(self):
        out = self.engine.fuse(_input(vix_level=0))
        assert not out.critical_flag
        assert out.adjusted_weights.pattern == pytest.approx(0.40)

    def test_low_confidence_avoid(self):
        out = self.engine.fuse(_input(confidence=40))
        assert out.recommendation == Recommendation.AVOID
        assert out.low_confidence
        assert "Low data confidence" in out.rationale
        assert out.confidence == pytest.approx(32.0)

    def test_avoid_precedes_buy(self):
        out = self.engine.fuse(_input(pattern=100, technical=100, sentiment=45, macro=100))
        assert out.final_composite >= 65
        assert out.recommendation == Recommendation.AVOID

    def test_bearish_sells(self):
        out = self.engine.fuse(_input(pattern=30, technical=35, sentiment=30, macro=30))
        assert out.recommendation == Recommendation.SELL
        assert out.position_size_multiplier == 0.5
        # Short position targets sit below entry
        assert out.target1 < out.entry < out.stop

    def test_neutral_holds(self):
        out = self.engine.fuse(_input(pattern=50, technical=55, sentiment=50, macro=50))
        assert out.recommendation == Recommendation.HOLD
        assert "Neutral outlook" in out.rationale

    def test_thresholds_are_inclusive(self):
        assert self.engine._map_recommendation(65.0)[0] == Recommendation.BUY
        assert self.engine._map_recommendation(44.0)[0] == Recommendation.SELL
        assert self.engine._map_recommendation(64.9)[0] == Recommendation.HOLD
        assert self.engine._map_recommendation(50.0) == (Recommendation.HOLD, 100.0)

    def test_buy_confidence_capped(self):
        rec, conf = self.engine._map_recommendation(99.0)
        assert rec == Recommendation.BUY
        assert conf == 95.0

    def test_weights_sum_to_one(self):
        out = self.engine.fuse(_input(industry="Software", vix_level=30))
        assert out.adjusted_weights.total == pytest.approx(1.0)
        assert out.instrument_type == InstrumentType.GROWTH

    def test_deterministic(self):
        fi = _input(pattern=62, technical=58, sentiment=47, macro=66, industry="Banks")
        assert self.engine.fuse(fi) == self.engine.fuse(fi)

    def test_to_dict(self):
        data = self.engine.fuse(_input(vix_level=18)).to_dict()
        assert data["recommendation"] == "BUY"
        assert set(data["adjusted_weights"]) == {"pattern", "technical", "sentiment", "macro"}
        assert data["breakdown"]["pattern"] == 70.0

    def test_custom_config(self):
        engine = FusionEngine(FusionConfig(buy_threshold=75.0))
        assert engine.fuse(_input(vix_level=18)).recommendation == Recommendation.HOLD

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            FusionConfig(buy_threshold=40.0, sell_threshold=44.0)
        with pytest.raises(ValueError):
            FusionConfig(base_weights={"pattern": 1.0})


# ── TestPriceTargets ──────────────────────────────────────────────────


class TestPriceTargets:
    """Volatility-scaled targets and percentage fallbacks."""

    def test_buy_with_unit(self):
        t = calculate_price_targets(100.0, Recommendation.BUY, 70.0, volatility_unit=2.0)
        assert (t.entry, t.stop, t.target1, t.target2) == (99.0, 95.0, 103.0, 107.0)

    def test_sell_with_unit(self):
        t = calculate_price_targets(100.0, Recommendation.SELL, 30.0, volatility_unit=2.0)
        assert (t.entry, t.stop, t.target1, t.target2) == (101.0, 105.0, 97.0, 93.0)

    def test_hold_with_unit(self):
        t = calculate_price_targets(100.0, Recommendation.HOLD, 50.0, volatility_unit=2.0)
        assert (t.entry, t.stop, t.target1, t.target2) == (100.0, 97.0, 102.0, 104.0)

    def test_buy_fallback(self):
        t = calculate_price_targets(100.0, Recommendation.BUY, 80.0)
        assert t.entry == 98.0
        assert t.stop == pytest.approx(88.2)
        assert t.target1 == pytest.approx(109.76)
        assert t.target2 == pytest.approx(121.52)

    def test_zero_unit_uses_fallback(self):
        a = calculate_price_targets(100.0, Recommendation.BUY, 80.0, volatility_unit=0.0)
        b = calculate_price_targets(100.0, Recommendation.BUY, 80.0, volatility_unit=None)
        assert a == b

    def test_sell_fallback(self):
        t = calculate_price_targets(100.0, Recommendation.SELL, 30.0)
        assert t.entry == 102.0
        assert t.stop == pytest.approx(112.2)
        assert t.target1 == pytest.approx(94.86)
        assert t.target2 == pytest.approx(87.72)

    def test_avoid_fallback(self):
        t = calculate_price_targets(100.0, Recommendation.AVOID, 50.0)
        assert (t.entry, t.stop, t.target1, t.target2) == (100.0, 93.0, 105.0, 110.0)

    def test_rounding(self):
        t = calculate_price_targets(
            33.333, Recommendation.HOLD, 50.0, volatility_unit=1.0,
            config=TargetConfig(decimals=1),
        )
        assert t.entry == 33.3

    def test_engine_uses_volatility_unit(self):
        out = FusionEngine().fuse(_input(vix_level=18, volatility_unit=2.0))
        assert out.entry == 99.0
        assert out.targets.to_dict()["target2"] == 107.0


# ── TestSignalWeights ─────────────────────────────────────────────────


class TestSignalWeights:

    def test_from_dict_and_get(self):
        w = SignalWeights.from_dict({"pattern": 0.4, "technical": 0.3, "sentiment": 0.2, "macro": 0.1})
        assert w.get("technical") == 0.3
        assert w.get(SignalName.MACRO) == 0.1
        assert w.total == pytest.approx(1.0)
        assert w.to_dict()["pattern"] == 0.4
