"""Logging Setup.

Root logger configuration for analysis runs: one JSON object per line
for batch jobs, or a colored single-line format for interactive use.
Both formats append the bound analysis context (run_id, symbol, ...).
"""

import json
import logging
import os
import sys
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from src.logging_config.config import (
    DEFAULT_LOGGING_CONFIG,
    LogFormat,
    LoggingConfig,
    LogLevel,
    set_active_config,
)
from src.logging_config.context import get_context_dict

LEVEL_ENV_VAR = "WAVEFUSION_LOG_LEVEL"
FORMAT_ENV_VAR = "WAVEFUSION_LOG_FORMAT"

# Attributes passed via ``extra=`` that become JSON keys
EXTRA_FIELDS = ("duration_ms", "extra_data", "recommendation", "composite")


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: timestamp, level, logger, message, service, optional caller
    info, the analysis context, exception details and EXTRA_FIELDS.
    """

    def __init__(self, service_name: str = "wavefusion", include_caller: bool = True):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _record_time(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }
        if self.include_caller:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)

        entry.update(get_context_dict())

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        entry.update({key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)})
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored ``HH:MM:SS.mmm LEVEL logger: message [context]`` lines."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        clock = _record_time(record).strftime("%H:%M:%S.%f")[:-3]
        line = (
            f"{color}{clock} {record.levelname:8s}{self.RESET} "
            f"{record.name}: {record.getMessage()}"
        )

        ctx = get_context_dict()
        if ctx:
            line += " [" + ", ".join(f"{k}={v}" for k, v in ctx.items()) + "]"

        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def resolve_config(config: Optional[LoggingConfig] = None) -> LoggingConfig:
    """Apply WAVEFUSION_LOG_LEVEL / WAVEFUSION_LOG_FORMAT overrides to ``config``.

    Unknown values are ignored.
    """
    config = config or DEFAULT_LOGGING_CONFIG

    level = os.environ.get(LEVEL_ENV_VAR, "").upper()
    if level in LogLevel.__members__:
        config = replace(config, level=LogLevel(level))

    fmt = os.environ.get(FORMAT_ENV_VAR, "").lower()
    if fmt in {f.value for f in LogFormat}:
        config = replace(config, format=LogFormat(fmt))

    return config


def configure_logging(config: Optional[LoggingConfig] = None) -> LoggingConfig:
    """Install a single stdout handler on the root logger.

    The effective config (after env overrides) also becomes the active
    config, so its slow_threshold_ms applies to ``log_performance`` and
    ``PerformanceTimer`` calls without an explicit threshold.

    Returns:
        The effective configuration.
    """
    config = resolve_config(config)

    if config.format == LogFormat.JSON:
        formatter: logging.Formatter = StructuredFormatter(
            service_name=config.service_name,
            include_caller=config.include_caller,
        )
    else:
        formatter = ConsoleFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.level.value))

    # numpy/pandas warnings are routed through logging
    logging.captureWarnings(True)
    set_active_config(config)
    return config
