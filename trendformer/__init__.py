"""Trendformer — trend aggregation, relevance ranking and thread generation."""

from .config import SERVICE_VERSION as __version__
