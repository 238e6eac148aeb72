"""Structured Logging & Analysis Tracing.

Provides structured JSON logging, run ID and symbol propagation,
and performance timing for wave fusion analysis.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel, get_active_config
from src.logging_config.context import AnalysisContext, generate_run_id
from src.logging_config.performance import PerformanceTimer, log_performance
from src.logging_config.setup import configure_logging

__all__ = [
    "AnalysisContext",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PerformanceTimer",
    "configure_logging",
    "generate_run_id",
    "get_active_config",
    "log_performance",
]
