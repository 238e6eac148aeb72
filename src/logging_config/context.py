"""Analysis Context Management.

Context-local binding of run IDs, instrument symbols and extra keys
to log entries, using contextvars.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


_run_id_var: ContextVar[str] = ContextVar("run_id", default="")
_symbol_var: ContextVar[str] = ContextVar("symbol", default="")
_extra_context_var: ContextVar[dict] = ContextVar("extra_context", default={})


def generate_run_id() -> str:
    """Generate a unique run ID using UUID4."""
    return str(uuid.uuid4())


def get_run_id() -> str:
    """Get the current run ID from context."""
    return _run_id_var.get()


def get_symbol() -> str:
    """Get the symbol currently being analyzed."""
    return _symbol_var.get()


def get_context_dict() -> dict[str, Any]:
    """Get all context variables as a dictionary for log binding."""
    ctx = {}
    run_id = _run_id_var.get()
    if run_id:
        ctx["run_id"] = run_id
    symbol = _symbol_var.get()
    if symbol:
        ctx["symbol"] = symbol
    extra = _extra_context_var.get()
    if extra:
        ctx.update(extra)
    return ctx


@dataclass
class AnalysisContext:
    """Context manager for analysis-scoped logging context.

    Binds run_id and symbol to all log entries within the context and
    restores the previous values on exit, so contexts nest.

    Example:
        with AnalysisContext(run_id="batch-1", symbol="AAPL"):
            logger.info("fusing signals")  # includes run_id, symbol
    """

    run_id: str = ""
    symbol: str = ""
    extra: dict[str, Any] = field(default_factory=dict)
    started_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    _tokens: list = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.run_id:
            self.run_id = generate_run_id()

    def __enter__(self) -> "AnalysisContext":
        self._tokens = [
            (_run_id_var, _run_id_var.set(self.run_id)),
            (_symbol_var, _symbol_var.set(self.symbol)),
            (_extra_context_var, _extra_context_var.set(self.extra.copy())),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since context was created."""
        delta = datetime.now(timezone.utc) - self.started_at
        return delta.total_seconds() * 1000

    def bind(self, **kwargs: Any) -> None:
        """Add extra key-value pairs to the context."""
        current = _extra_context_var.get()
        updated = {**current, **kwargs}
        _extra_context_var.set(updated)
        self.extra.update(kwargs)
