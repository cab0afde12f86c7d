"""Deterministic placeholder trends — demo mode and universal fallback."""

from datetime import datetime

from .base import SOURCE_MOCK, TrendRecord, utcnow
from .niches import DEFAULT_NICHE

MOCK_TOPICS = (
    ("AI agents running personal workflows", 92),
    ("Short-form vertical video SEO tactics", 81),
    ("Sleep optimization gadgets", 74),
    ("Cold outreach prompts for freelancers", 69),
    ("Glucose monitoring for fat loss", 65),
)


def generate_mock_trends(niche: str, now: datetime | None = None) -> list[TrendRecord]:
    """Same niche -> same topics and scores; only the timestamp varies."""
    label = (niche or "").strip() or DEFAULT_NICHE
    observed = now or utcnow()
    return [
        TrendRecord(topic=f"{topic} - {label}", source=SOURCE_MOCK, score=score, timestamp=observed)
        for topic, score in MOCK_TOPICS
    ]
