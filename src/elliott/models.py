"""Data models for Price-Pattern Segmentation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from src.elliott.config import (
    KEY_FIB_RATIOS,
    UNKNOWN_LABEL,
    LabelMode,
    Trend,
    WaveKind,
    WaveSignal,
)
from src.signal_fusion.exceptions import InvalidSeriesError
from src.signal_fusion.models import AnalyticalSignal

DAY_SECONDS = 86_400


@dataclass(frozen=True)
class PricePoint:
    """One closing-style price sample."""

    timestamp: int
    price: float

    def __post_init__(self) -> None:
        price = float(self.price)
        if not math.isfinite(price) or price <= 0:
            raise InvalidSeriesError(f"price must be positive, got {self.price}", field="price")
        object.__setattr__(self, "price", price)
        object.__setattr__(self, "timestamp", int(self.timestamp))

    @property
    def date(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp, "price": self.price}


@dataclass(frozen=True)
class PriceSeries:
    """Chronological, immutable sequence of price points.

    Timestamps must be strictly increasing (no duplicates).
    """

    points: tuple[PricePoint, ...] = ()

    def __post_init__(self) -> None:
        points = tuple(self.points)
        for i in range(1, len(points)):
            if points[i].timestamp <= points[i - 1].timestamp:
                raise InvalidSeriesError(
                    f"timestamps must be strictly increasing at index {i} "
                    f"({points[i - 1].timestamp} -> {points[i].timestamp})",
                    field="timestamp",
                    index=i,
                )
        object.__setattr__(self, "points", points)

    # ── constructors ──────────────────────────────────────────────

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[int, float]]) -> "PriceSeries":
        """Build from ``(timestamp, price)`` pairs."""
        return cls(tuple(PricePoint(int(ts), float(price)) for ts, price in pairs))

    @classmethod
    def from_prices(
        cls,
        prices: Iterable[float],
        start: int = 0,
        step: int = DAY_SECONDS,
    ) -> "PriceSeries":
        """Build from bare prices spaced ``step`` seconds apart."""
        return cls(tuple(PricePoint(start + i * step, float(p)) for i, p in enumerate(prices)))

    @classmethod
    def from_frame(
        cls,
        data: Union[pd.DataFrame, pd.Series],
        price_column: str = "close",
        timestamp_column: Optional[str] = None,
    ) -> "PriceSeries":
        """Build from a pandas frame or series of closing prices.

        Timestamps come from ``timestamp_column`` when given, otherwise from
        a DatetimeIndex, otherwise from the integer index. Rows with a
        missing price are dropped.

        Args:
            data: DataFrame with a price column, or a Series of prices.
            price_column: Column holding closing prices (case-insensitive).
            timestamp_column: Optional column holding timestamps.
        """
        if isinstance(data, pd.DataFrame):
            columns = {str(c).lower(): c for c in data.columns}
            if price_column.lower() not in columns:
                raise InvalidSeriesError(
                    f"missing price column '{price_column}'", field=price_column
                )
            prices = data[columns[price_column.lower()]]
            if timestamp_column is not None:
                if timestamp_column not in data.columns:
                    raise InvalidSeriesError(
                        f"missing timestamp column '{timestamp_column}'", field=timestamp_column
                    )
                stamps = data[timestamp_column]
            else:
                stamps = pd.Series(data.index, index=data.index)
        else:
            prices = data
            stamps = pd.Series(data.index, index=data.index)

        mask = prices.notna().to_numpy()
        prices = prices[mask]
        stamps = stamps[mask]
        return cls(
            tuple(
                PricePoint(_to_epoch_seconds(ts), float(price))
                for ts, price in zip(stamps.tolist(), prices.tolist())
            )
        )

    # ── accessors ─────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index: int) -> PricePoint:
        return self.points[index]

    def __iter__(self):
        return iter(self.points)

    @property
    def prices(self) -> np.ndarray:
        return np.array([p.price for p in self.points], dtype=float)

    @property
    def timestamps(self) -> list[int]:
        return [p.timestamp for p in self.points]

    @property
    def last_price(self) -> float:
        if not self.points:
            raise InvalidSeriesError("price series is empty", field="points")
        return self.points[-1].price

    def to_frame(self) -> pd.DataFrame:
        """Series as a DataFrame indexed by UTC datetime."""
        index = pd.to_datetime(self.timestamps, unit="s", utc=True)
        return pd.DataFrame({"close": self.prices}, index=index)


PriceInput = Union[PriceSeries, Sequence[PricePoint], Sequence[float], np.ndarray, pd.Series]


def _to_epoch_seconds(value: Any) -> int:
    if isinstance(value, (pd.Timestamp, datetime, np.datetime64)):
        ts = pd.Timestamp(value)
        if ts.tzinfo is None:
            ts = ts.tz_localize("UTC")
        return int(ts.timestamp())
    return int(value)


def as_price_array(series: PriceInput) -> np.ndarray:
    """Coerce any supported price input to a float array of prices.

    Bare prices are checked the same way PricePoint checks them: every
    value must be finite and positive.
    """
    if isinstance(series, PriceSeries):
        return series.prices
    if isinstance(series, pd.Series):
        prices = series.to_numpy(dtype=float)
    elif isinstance(series, np.ndarray):
        prices = series.astype(float)
    else:
        values = list(series)
        if values and isinstance(values[0], PricePoint):
            return np.array([p.price for p in values], dtype=float)
        prices = np.array(values, dtype=float)

    bad = np.flatnonzero(~np.isfinite(prices) | (prices <= 0))
    if bad.size:
        i = int(bad[0])
        raise InvalidSeriesError(
            f"price must be positive at index {i}, got {prices[i]}", field="price", index=i
        )
    return prices


@dataclass(frozen=True)
class Wave:
    """One labeled price leg between consecutive pivots."""

    start_index: int
    end_index: int
    start_price: float
    end_price: float
    kind: WaveKind = WaveKind.IMPULSE
    label: str = UNKNOWN_LABEL

    def __post_init__(self) -> None:
        if self.end_index <= self.start_index:
            raise ValueError(
                f"wave end_index ({self.end_index}) must be after start_index ({self.start_index})"
            )

    @property
    def is_upward(self) -> bool:
        return self.end_price > self.start_price

    @property
    def magnitude(self) -> float:
        return abs(self.end_price - self.start_price)

    @property
    def change_pct(self) -> float:
        """Signed move as a percentage of the start price."""
        return (self.end_price - self.start_price) / self.start_price * 100.0

    def to_dict(self) -> dict:
        return {
            "start_index": self.start_index,
            "end_index": self.end_index,
            "start_price": self.start_price,
            "end_price": self.end_price,
            "kind": self.kind.value,
            "label": self.label,
        }


@dataclass(frozen=True)
class FibonacciLevel:
    """A Fibonacci retracement level."""

    ratio: float
    price: float
    label: str

    def to_dict(self) -> dict:
        return {"ratio": self.ratio, "price": round(self.price, 4), "label": self.label}


@dataclass
class WaveAnalysis:
    """Result of analyzing one price series.

    Attributes:
        symbol: Instrument symbol.
        current_price: Last observed price (0.0 for an empty series).
        pivots: Pivot indices found in the series.
        waves: Labeled waves over the working pivot window.
        current_wave: Label of the most recent wave, or "Unknown".
        trend: Overall trend over the working window.
        label_mode: Labeling branch that produced the labels.
        recommendation: BUY / SELL / HOLD from the current wave alone.
        fibonacci_levels: Retracement levels over the recent range.
        fib_level: Ratio of the level closest to the current price.
        confidence: Pattern clarity confidence (30-95).
        volatility_unit: ATR-like unit (0.0 when unavailable).
        pattern_score: 0-100 score fed to the fusion engine as "pattern".
        prediction: Short forward-looking note for the current wave.
        analysis: Multi-line narrative.
    """

    symbol: str
    current_price: float
    pivots: list[int] = field(default_factory=list)
    waves: list[Wave] = field(default_factory=list)
    current_wave: str = UNKNOWN_LABEL
    trend: Trend = Trend.NEUTRAL
    label_mode: LabelMode = LabelMode.NONE
    recommendation: WaveSignal = WaveSignal.HOLD
    fibonacci_levels: list[FibonacciLevel] = field(default_factory=list)
    fib_level: float = 0.5
    confidence: float = 30.0
    volatility_unit: float = 0.0
    pattern_score: float = 50.0
    prediction: str = ""
    analysis: str = ""

    @property
    def key_levels(self) -> list[FibonacciLevel]:
        return [lv for lv in self.fibonacci_levels if lv.ratio in KEY_FIB_RATIOS]

    def to_signal(self) -> AnalyticalSignal:
        """The pattern signal consumed by the fusion engine."""
        return AnalyticalSignal(
            score=self.pattern_score, confidence=self.confidence, name="pattern"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        return {
            "symbol": self.symbol,
            "current_price": self.current_price,
            "pivots": list(self.pivots),
            "waves": [w.to_dict() for w in self.waves],
            "current_wave": self.current_wave,
            "trend": self.trend.value,
            "label_mode": self.label_mode.value,
            "recommendation": self.recommendation.value,
            "fibonacci_levels": [lv.to_dict() for lv in self.fibonacci_levels],
            "fib_level": self.fib_level,
            "confidence": self.confidence,
            "volatility_unit": round(self.volatility_unit, 4),
            "pattern_score": self.pattern_score,
            "prediction": self.prediction,
            "analysis": self.analysis,
        }
