"""Generic trend-search API source (Glasp-style endpoint).

The response shape is not fixed, so decoding walks explicit candidate lists
in order and takes the first hit:

    item arrays:  <payload is a list>, trends, data, results, items, topics
    title:        topic, title, name, keyword, query, text
    score:        score, volume, popularity, growth, count
    url:          url, link, permalink
    timestamp:    timestamp, created_at, date   (ISO string or epoch seconds)

An item with no usable title is dropped. A bare string item is its own title.
"""

import math

import requests

from ..config import USER_AGENT, get_glasp_base_url, get_glasp_key, get_request_timeout
from .base import SOURCE_GLASP, TrendRecord, TrendSource, clean_text, parse_timestamp, utcnow

ARRAY_FIELDS = ("trends", "data", "results", "items", "topics")
TITLE_FIELDS = ("topic", "title", "name", "keyword", "query", "text")
SCORE_FIELDS = ("score", "volume", "popularity", "growth", "count")
URL_FIELDS = ("url", "link", "permalink")
TIMESTAMP_FIELDS = ("timestamp", "created_at", "date")
BODY_FIELDS = ("description", "summary", "body")


def extract_items(payload) -> list:
    """Locate the item array in a payload of unknown shape."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ARRAY_FIELDS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
            # One level of nesting, e.g. {"data": {"trends": [...]}}
            if isinstance(value, dict):
                nested = extract_items(value)
                if nested:
                    return nested
    return []


def _first_text(item: dict, fields) -> str | None:
    for key in fields:
        value = item.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        text = clean_text(value)
        if text:
            return text
    return None


def _first_number(item: dict, fields) -> float | None:
    for key in fields:
        value = item.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, str):
            try:
                value = float(value.replace(",", ""))
            except ValueError:
                continue
        # "nan" / "inf" parse as floats but are not scores
        if isinstance(value, (int, float)) and math.isfinite(value):
            return value
    return None


def _first_timestamp(item: dict, fields):
    for key in fields:
        parsed = parse_timestamp(item.get(key))
        if parsed is not None:
            return parsed
    return None


def decode_item(item) -> TrendRecord | None:
    """One payload item -> TrendRecord, or None when no title is found."""
    if isinstance(item, str):
        title = clean_text(item)
        return TrendRecord(topic=title, source=SOURCE_GLASP) if title else None
    if not isinstance(item, dict):
        return None

    title = _first_text(item, TITLE_FIELDS)
    if not title:
        return None
    return TrendRecord(
        topic=title,
        source=SOURCE_GLASP,
        score=_first_number(item, SCORE_FIELDS),
        timestamp=_first_timestamp(item, TIMESTAMP_FIELDS) or utcnow(),
        url=_first_text(item, URL_FIELDS),
        body=_first_text(item, BODY_FIELDS),
    )


class GlaspSource(TrendSource):
    name = SOURCE_GLASP

    def __init__(self, config: dict = None):
        config = config or {}
        self.base_url = (config.get("base_url") or get_glasp_base_url()).rstrip("/")
        self.api_key = config.get("api_key") or get_glasp_key()
        self.limit = int(config.get("limit", 25))
        self.timeout = config.get("timeout") or get_request_timeout()

    @property
    def is_available(self) -> bool:
        return bool(self.base_url)

    def _fetch_trends(self, query, min_score=None) -> list[TrendRecord]:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        r = requests.get(self.base_url, headers=headers, params={"q": query.niche}, timeout=self.timeout)
        r.raise_for_status()

        trends = []
        for item in extract_items(r.json()):
            trend = decode_item(item)
            if trend is not None:
                trends.append(trend)
        return trends[: self.limit]
