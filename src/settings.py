"""Centralized settings for wave fusion.

Uses pydantic-settings to load from environment variables (prefixed
WAVEFUSION_) with defaults matching the frozen config dataclasses.
Settings are read once by the caller and turned into config objects;
nothing global is mutated.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings

from src.elliott.config import WaveConfig
from src.logging_config.config import LoggingConfig, LogFormat, LogLevel
from src.signal_fusion.config import FusionConfig


class Settings(BaseSettings):
    """Wave fusion settings loaded from environment variables."""

    # --- Logging ---
    log_level: LogLevel = LogLevel.INFO
    log_format: LogFormat = LogFormat.JSON
    slow_threshold_ms: float = 1000.0

    # --- Wave segmentation ---
    pivot_window: int = 3
    volatility_period: int = 14
    max_pivots: int = 10
    min_pivots: int = 5
    trend_threshold_pct: float = 5.0
    strong_wave_pct: float = 3.0
    fib_lookback: int = 20

    # --- Fusion ---
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
    critical_confidence_penalty: float = 25.0

    model_config = {
        "env_prefix": "WAVEFUSION_",
        "env_file": ".env",
        "extra": "ignore",
    }

    def wave_config(self) -> WaveConfig:
        """Build the wave segmentation config."""
        return WaveConfig(
            pivot_window=self.pivot_window,
            volatility_period=self.volatility_period,
            max_pivots=self.max_pivots,
            min_pivots=self.min_pivots,
            trend_threshold_pct=self.trend_threshold_pct,
            strong_wave_pct=self.strong_wave_pct,
            fib_lookback=self.fib_lookback,
        )

    def fusion_config(self) -> FusionConfig:
        """Build the fusion engine config."""
        return FusionConfig(
            high_vix_threshold=self.high_vix_threshold,
            panic_vix_threshold=self.panic_vix_threshold,
            default_vix=self.default_vix,
            default_confidence=self.default_confidence,
            sentiment_panic_threshold=self.sentiment_panic_threshold,
            veto_cap=self.veto_cap,
            conflict_spread=self.conflict_spread,
            low_confidence_threshold=self.low_confidence_threshold,
            buy_threshold=self.buy_threshold,
            sell_threshold=self.sell_threshold,
            critical_confidence_penalty=self.critical_confidence_penalty,
        )

    def logging_config(self) -> LoggingConfig:
        """Build the logging config."""
        return LoggingConfig(
            level=self.log_level,
            format=self.log_format,
            slow_threshold_ms=self.slow_threshold_ms,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
