"""Multi-provider trend aggregation."""

from .base import SOURCES, TrendRecord, TrendSource
from .engine import PROVIDERS, AggregateResult, FallbackState, TrendEngine
from .mock import generate_mock_trends
from .niches import NicheQuery, resolve_niche

__all__ = [
    "SOURCES",
    "PROVIDERS",
    "TrendRecord",
    "TrendSource",
    "TrendEngine",
    "AggregateResult",
    "FallbackState",
    "NicheQuery",
    "generate_mock_trends",
    "resolve_niche",
]
