"""TrendRecord dataclass + TrendSource ABC."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..log import get_logger

SOURCE_MOCK = "mock"
SOURCE_REDDIT = "reddit"
SOURCE_HN = "hn"
SOURCE_GLASP = "glasp"

# Closed set of source tags a TrendRecord may carry
SOURCES = (SOURCE_MOCK, SOURCE_REDDIT, SOURCE_HN, SOURCE_GLASP)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def from_epoch(seconds) -> datetime | None:
    """Epoch seconds -> aware UTC datetime, None if unparseable."""
    try:
        return datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def parse_timestamp(value) -> datetime | None:
    """Accept a datetime, epoch seconds, or an ISO-8601 string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return from_epoch(value)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return from_epoch(text)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def clean_text(value) -> str | None:
    """Strip a text field; empty or non-string -> None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def is_finite_number(value) -> bool:
    """int/float that is not a bool, NaN or infinity."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass
class TrendRecord:
    """A normalized trending topic from one provider.

    `score` keeps the provider's own units (Reddit upvotes, HN points, ...)
    and is not comparable across sources; NaN, infinity and non-numbers
    become None. `top_comment` is None when the source has no comment,
    never the empty string.
    """
    topic: str
    source: str
    score: float | None = None
    timestamp: datetime = field(default_factory=utcnow)
    url: str | None = None
    body: str | None = None
    top_comment: str | None = None

    def __post_init__(self):
        if not isinstance(self.topic, str) or not self.topic.strip():
            raise ValueError("TrendRecord.topic must be non-empty")
        if self.source not in SOURCES:
            raise ValueError(f"Unknown trend source: {self.source!r}")
        self.topic = self.topic.strip()
        if not is_finite_number(self.score):
            self.score = None
        self.url = clean_text(self.url)
        self.body = clean_text(self.body)
        self.top_comment = clean_text(self.top_comment)

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "source": self.source,
            "score": self.score,
            "timestamp": self.timestamp.isoformat(),
            "url": self.url,
            "body": self.body,
            "topComment": self.top_comment,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrendRecord":
        top_comment = data.get("topComment", data.get("top_comment"))
        return cls(
            topic=data.get("topic", ""),
            source=data.get("source", ""),
            score=data.get("score"),
            timestamp=parse_timestamp(data.get("timestamp")) or utcnow(),
            url=data.get("url"),
            body=data.get("body"),
            top_comment=top_comment,
        )


class TrendSource(ABC):
    """Abstract base class for trend providers.

    Subclasses implement `_fetch_trends`; callers use `fetch_trends`, which
    never raises. A broken provider contributes an empty list.
    """

    name: str = "unknown"

    def fetch_trends(self, query, min_score: int | None = None) -> list[TrendRecord]:
        """Fetch trends for a resolved niche. Errors are logged, never raised."""
        logger = get_logger()
        if not self.is_available:
            logger.debug("%s: not configured, skipping", self.name)
            return []
        try:
            trends = self._fetch_trends(query, min_score)
        except Exception as e:
            logger.warning("%s: fetch failed: %s", self.name, e)
            return []
        logger.info("%s: found %d trends", self.name, len(trends))
        return trends

    @abstractmethod
    def _fetch_trends(self, query, min_score: int | None) -> list[TrendRecord]:
        """Provider-specific fetch. May raise."""
        ...

    @property
    def is_available(self) -> bool:
        """Check if this source is configured and available."""
        return True
