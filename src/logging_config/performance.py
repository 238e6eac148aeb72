"""Performance Logging.

Decorator and context manager for timing analysis steps
and logging slow operations.
"""

import functools
import logging
import time
from typing import Any, Callable, Optional

from src.logging_config.config import get_active_config

logger = logging.getLogger(__name__)


def log_performance(
    threshold_ms: Optional[float] = None,
    logger_name: Optional[str] = None,
    include_args: bool = False,
) -> Callable:
    """Decorator that logs function execution time.

    Logs all calls at DEBUG level, slow calls (above threshold) at WARNING
    and failures at ERROR. Exceptions always propagate.

    Args:
        threshold_ms: Slow operation threshold in milliseconds. When None,
            the active config's slow_threshold_ms is read on every call.
        logger_name: Custom logger name. Defaults to function's module.
        include_args: Whether to include function arguments in log.

    Example:
        @log_performance()
        def analyze(series):
            ...
    """

    def decorator(func: Callable) -> Callable:
        _logger = logging.getLogger(logger_name or func.__module__)
        func_name = f"{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                _logger.error(
                    f"{func_name} failed after {duration_ms:.1f}ms: {type(exc).__name__}",
                    extra={"duration_ms": round(duration_ms, 2)},
                )
                raise

            duration_ms = (time.perf_counter() - start) * 1000
            extra = {"duration_ms": round(duration_ms, 2)}
            if include_args:
                extra["extra_data"] = _summarize_args(args, kwargs)

            if duration_ms >= _resolve_threshold(threshold_ms):
                _logger.warning(
                    f"Slow operation: {func_name} took {duration_ms:.1f}ms",
                    extra=extra,
                )
            else:
                _logger.debug(
                    f"{func_name} completed in {duration_ms:.1f}ms",
                    extra=extra,
                )
            return result

        return wrapper

    return decorator


def _resolve_threshold(threshold_ms: Optional[float]) -> float:
    if threshold_ms is None:
        return get_active_config().slow_threshold_ms
    return threshold_ms


def _summarize_args(args: tuple, kwargs: dict, max_len: int = 100) -> str:
    """Create a short summary of function arguments for logging."""
    parts = []
    for arg in args[:3]:
        rep = repr(arg)
        if len(rep) > max_len:
            rep = rep[:max_len] + "..."
        parts.append(rep)
    if len(args) > 3:
        parts.append(f"... +{len(args) - 3} more args")

    for key, val in list(kwargs.items())[:3]:
        rep = repr(val)
        if len(rep) > max_len:
            rep = rep[:max_len] + "..."
        parts.append(f"{key}={rep}")

    return ", ".join(parts)


class PerformanceTimer:
    """Context manager for timing code blocks.

    Example:
        with PerformanceTimer("insight batch") as timer:
            result = engine.generate_batch(requests)
        print(f"Batch took {timer.duration_ms:.1f}ms")
    """

    def __init__(
        self,
        operation_name: str,
        threshold_ms: Optional[float] = None,
        logger_name: Optional[str] = None,
    ):
        self.operation_name = operation_name
        self.threshold_ms = threshold_ms
        self._logger = logging.getLogger(logger_name) if logger_name else logger
        self.start_time: float = 0
        self.duration_ms: float = 0

    def __enter__(self) -> "PerformanceTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        extra = {"duration_ms": round(self.duration_ms, 2)}

        if exc_type is not None:
            self._logger.error(
                f"{self.operation_name} failed after {self.duration_ms:.1f}ms: {exc_type.__name__}",
                extra=extra,
            )
        elif self.duration_ms >= _resolve_threshold(self.threshold_ms):
            self._logger.warning(
                f"Slow operation: {self.operation_name} took {self.duration_ms:.1f}ms",
                extra=extra,
            )
        else:
            self._logger.debug(
                f"{self.operation_name} completed in {self.duration_ms:.1f}ms",
                extra=extra,
            )
