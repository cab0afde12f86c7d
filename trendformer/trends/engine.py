"""TrendEngine: parallel fan-out over providers + mock fallback chain."""

import concurrent.futures
from dataclasses import dataclass, field
from enum import Enum

from ..config import load_config
from ..log import get_logger
from .base import SOURCE_GLASP, SOURCE_HN, SOURCE_REDDIT, TrendRecord
from .mock import generate_mock_trends
from .niches import resolve_niche

PROVIDER_ALL = "all"

# Concatenation order for provider=all; never completion order
SOURCE_ORDER = (SOURCE_REDDIT, SOURCE_HN, SOURCE_GLASP)
PROVIDERS = (PROVIDER_ALL,) + SOURCE_ORDER

# Role names accepted wherever a provider tag is
PROVIDER_ALIASES = {
    "discussion-board": SOURCE_REDDIT,
    "news-aggregator": SOURCE_HN,
    "generic-trends": SOURCE_GLASP,
}


def normalize_provider(name):
    """Map a role name to its source tag. Tags come back trimmed and lowercased."""
    if isinstance(name, str):
        key = name.strip().lower()
        return PROVIDER_ALIASES.get(key, key)
    return name


# Single-provider requests that come back empty get one more try here
FALLBACK_PROVIDER = SOURCE_GLASP


class FallbackState(str, Enum):
    LIVE_REQUESTED = "live-requested"
    LIVE_SERVED = "live-served"
    LIVE_EMPTY = "live-empty"
    MOCK_SUBSTITUTED = "mock-substituted"


TERMINAL_STATES = {FallbackState.LIVE_SERVED, FallbackState.MOCK_SUBSTITUTED}


def next_state(state: FallbackState, has_trends: bool, fallback: bool) -> FallbackState | None:
    """Transition rule of the fallback chain. None means stop where you are.

    live-requested -> live-served | live-empty
    live-empty     -> mock-substituted (only when fallback is enabled)
    """
    if state is FallbackState.LIVE_REQUESTED:
        return FallbackState.LIVE_SERVED if has_trends else FallbackState.LIVE_EMPTY
    if state is FallbackState.LIVE_EMPTY and fallback:
        return FallbackState.MOCK_SUBSTITUTED
    return None


@dataclass
class AggregateResult:
    trends: list[TrendRecord] = field(default_factory=list)
    mock: bool = False
    state: FallbackState = FallbackState.LIVE_REQUESTED


def default_sources() -> dict:
    """Build the live sources, honouring per-source config.json settings."""
    from .glasp import GlaspSource
    from .hackernews import HackerNewsSource
    from .reddit import RedditSource

    source_config = load_config().get("trend_sources", {})
    source_map = {
        SOURCE_REDDIT: RedditSource,
        SOURCE_HN: HackerNewsSource,
        SOURCE_GLASP: GlaspSource,
    }
    return {name: cls(source_config.get(name, {})) for name, cls in source_map.items()}


class TrendEngine:
    """Aggregates trends from the live providers.

    `sources` maps source tag -> TrendSource; tests inject fakes here.
    """

    def __init__(self, sources: dict | None = None, mock_generator=generate_mock_trends, max_workers: int = 3):
        self.sources = sources if sources is not None else default_sources()
        self.mock_generator = mock_generator
        self.max_workers = max_workers

    def aggregate(
        self,
        niche: str,
        provider: str = PROVIDER_ALL,
        min_score: int | None = None,
        mock: bool = False,
        fallback: bool = True,
    ) -> AggregateResult:
        """Fetch, merge and (if needed) substitute mock trends for one niche."""
        provider = normalize_provider(provider)
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider {provider!r}; expected one of {', '.join(PROVIDERS)}")

        logger = get_logger()
        query = resolve_niche(niche)
        state = FallbackState.MOCK_SUBSTITUTED if mock else FallbackState.LIVE_REQUESTED
        trends: list[TrendRecord] = []

        while state not in TERMINAL_STATES:
            if state is FallbackState.LIVE_REQUESTED:
                trends = self._fetch_live(query, provider, min_score)
            following = next_state(state, bool(trends), fallback)
            if following is None:
                break
            logger.debug("trends[%s]: %s -> %s", query.niche, state.value, following.value)
            state = following

        if state is FallbackState.MOCK_SUBSTITUTED:
            trends = self.mock_generator(query.niche)

        return AggregateResult(trends=trends, mock=state is FallbackState.MOCK_SUBSTITUTED, state=state)

    def _fetch_live(self, query, provider: str, min_score: int | None) -> list[TrendRecord]:
        if provider == PROVIDER_ALL:
            return self._fetch_all(query, min_score)

        trends = self._fetch_one(provider, query, min_score)
        if not trends and provider != FALLBACK_PROVIDER:
            get_logger().info("%s returned nothing, trying %s", provider, FALLBACK_PROVIDER)
            trends = self._fetch_one(FALLBACK_PROVIDER, query, min_score)
        return trends

    def _fetch_one(self, name: str, query, min_score: int | None) -> list[TrendRecord]:
        source = self.sources.get(name)
        if source is None:
            return []
        return source.fetch_trends(query, min_score)

    def _fetch_all(self, query, min_score: int | None) -> list[TrendRecord]:
        names = [name for name in SOURCE_ORDER if name in self.sources]
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._fetch_one, name, query, min_score) for name in names]

            merged = []
            # Join in SOURCE_ORDER; a slow source only delays the total
            for name, future in zip(names, futures):
                try:
                    merged.extend(future.result())
                except Exception as e:
                    get_logger().warning("%s: failed: %s", name, e)
        return merged
