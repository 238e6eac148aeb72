"""Instrument Insights.

Price series plus upstream technical, sentiment and macro signals in,
wave analysis and fused recommendation out, one instrument or a batch.
"""

from src.insights.pipeline import (
    BatchResult,
    InsightEngine,
    InsightRequest,
    InstrumentInsight,
)

__all__ = [
    "BatchResult",
    "InsightEngine",
    "InsightRequest",
    "InstrumentInsight",
]
