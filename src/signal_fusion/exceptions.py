"""Exception Hierarchy.

Typed exceptions raised when fusion or price-series input fails
validation at the boundary. Inputs are never clamped silently.
"""

from typing import Any, Dict, List, Optional


class WaveFusionError(Exception):
    """Base exception for all wave fusion errors.

    All custom exceptions inherit from this, allowing a caller to catch
    the entire hierarchy with one handler.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        if field and not details:
            details = [{"field": field, "issue": message}]
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "field": self.field,
            "details": self.details,
        }


class InvalidSignalError(WaveFusionError):
    """Raised when an analytical signal score or confidence is out of range."""

    def __init__(self, message: str = "Invalid analytical signal", field: Optional[str] = None):
        super().__init__(message, field=field)


class InvalidInputError(WaveFusionError):
    """Raised when a non-signal fusion input (price, VIX, volatility) is invalid."""

    def __init__(self, message: str = "Invalid fusion input", field: Optional[str] = None):
        super().__init__(message, field=field)


class InvalidSeriesError(WaveFusionError):
    """Raised when a price series is malformed."""

    def __init__(
        self,
        message: str = "Invalid price series",
        field: Optional[str] = None,
        index: Optional[int] = None,
    ):
        super().__init__(message, field=field)
        self.index = index
        if index is not None:
            for detail in self.details:
                detail["index"] = index
