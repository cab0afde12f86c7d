"""Hacker News top-stories trend source (Firebase API)."""

import concurrent.futures
import html
import re

import requests

from ..config import USER_AGENT, get_request_timeout
from ..log import get_logger
from .base import SOURCE_HN, TrendRecord, TrendSource, clean_text, from_epoch, utcnow
from .niches import matches_keywords

HN_API = "https://hacker-news.firebaseio.com/v0"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
TOP_STORIES_LIMIT = 60

_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text) -> str | None:
    """HN `text` fields are HTML; reduce to plain text."""
    if not isinstance(text, str):
        return None
    text = text.replace("<p>", "\n\n")
    return clean_text(html.unescape(_TAG_RE.sub("", text)))


def passes_filters(title: str, score, min_score: int | None, keywords) -> bool:
    """Both filters must pass. Missing scores are not held against a story."""
    if min_score is not None and isinstance(score, (int, float)) and score < min_score:
        return False
    return matches_keywords(title, keywords)


class HackerNewsSource(TrendSource):
    name = SOURCE_HN

    def __init__(self, config: dict = None):
        config = config or {}
        self.limit = int(config.get("limit", TOP_STORIES_LIMIT))
        self.max_workers = int(config.get("max_workers", 10))
        self.timeout = config.get("timeout") or get_request_timeout()

    def _get_json(self, url: str):
        r = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _fetch_trends(self, query, min_score=None) -> list[TrendRecord]:
        ids = self._get_json(f"{HN_API}/topstories.json")
        if not isinstance(ids, list):
            raise ValueError(f"unexpected topstories payload: {type(ids).__name__}")

        # pool.map keeps HN's ranking order
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            items = list(pool.map(self._safe_fetch_item, ids[: self.limit]))

        trends = []
        for item in items:
            trend = self._to_record(item)
            if trend is None:
                continue
            if passes_filters(trend.topic, trend.score, min_score, query.keywords):
                trends.append(trend)
        return trends

    def _safe_fetch_item(self, story_id):
        try:
            return self._get_json(f"{HN_API}/item/{story_id}.json")
        except Exception as e:
            get_logger().debug("hn: item %s failed: %s", story_id, e)
            return None

    def _to_record(self, item) -> TrendRecord | None:
        if not isinstance(item, dict):
            return None
        if item.get("type", "story") != "story" or item.get("deleted") or item.get("dead"):
            return None
        title = clean_text(item.get("title"))
        if not title:
            return None

        story_id = item.get("id")
        url = item.get("url")
        if not url and story_id is not None:
            url = HN_ITEM_URL.format(id=story_id)
        return TrendRecord(
            topic=title,
            source=SOURCE_HN,
            score=item.get("score"),
            timestamp=from_epoch(item.get("time")) or utcnow(),
            url=url,
            body=strip_html(item.get("text")),
        )
