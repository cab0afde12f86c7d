"""Reddit .json API trend source (hot listings + top comment)."""

import concurrent.futures

import requests

from ..config import USER_AGENT, get_request_timeout
from ..log import get_logger
from .base import SOURCE_REDDIT, TrendRecord, TrendSource, clean_text, from_epoch, utcnow

REDDIT_BASE = "https://www.reddit.com"
SKIPPED_COMMENTS = {"[deleted]", "[removed]"}


class RedditSource(TrendSource):
    name = SOURCE_REDDIT

    def __init__(self, config: dict = None):
        config = config or {}
        self.page_size = int(config.get("page_size", 5))
        self.fetch_comments = bool(config.get("fetch_comments", True))
        self.max_workers = int(config.get("max_workers", 6))
        self.timeout = config.get("timeout") or get_request_timeout()

    def _fetch_trends(self, query, min_score=None) -> list[TrendRecord]:
        subreddits = list(query.subreddits)
        if not subreddits:
            return []

        # Keep subreddit order regardless of which listing returns first
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            listings = list(pool.map(self._safe_fetch_subreddit, subreddits))

        trends = [t for listing in listings for t in listing]
        if self.fetch_comments and trends:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                comments = list(pool.map(self._safe_top_comment, [t.url for t in trends]))
            for trend, comment in zip(trends, comments):
                trend.top_comment = comment
        return trends

    def _get_json(self, url: str, params: dict):
        headers = {"User-Agent": USER_AGENT}
        r = requests.get(url, headers=headers, params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _safe_fetch_subreddit(self, subreddit: str) -> list[TrendRecord]:
        try:
            return self._fetch_subreddit(subreddit)
        except Exception as e:
            get_logger().warning("reddit: r/%s failed: %s", subreddit, e)
            return []

    def _fetch_subreddit(self, subreddit: str) -> list[TrendRecord]:
        data = self._get_json(f"{REDDIT_BASE}/r/{subreddit}/hot.json", {"limit": self.page_size})

        trends = []
        for post in data.get("data", {}).get("children", []):
            d = post.get("data", {})
            title = clean_text(d.get("title"))
            if d.get("stickied") or not title:
                continue

            permalink = d.get("permalink") or ""
            score = d.get("score")
            trends.append(TrendRecord(
                topic=title,
                source=SOURCE_REDDIT,
                score=score if isinstance(score, (int, float)) else None,
                timestamp=from_epoch(d.get("created_utc")) or utcnow(),
                url=f"{REDDIT_BASE}{permalink}" if permalink else d.get("url"),
                body=d.get("selftext"),
            ))

        return trends[: self.page_size]

    def _safe_top_comment(self, post_url: str | None) -> str | None:
        if not post_url or not post_url.startswith(REDDIT_BASE):
            return None
        try:
            return self._fetch_top_comment(post_url)
        except Exception as e:
            get_logger().debug("reddit: comments for %s failed: %s", post_url, e)
            return None

    def _fetch_top_comment(self, post_url: str) -> str | None:
        """Body of the highest-ranked top-level comment, or None."""
        payload = self._get_json(
            f"{post_url.rstrip('/')}.json",
            {"limit": 1, "sort": "top", "depth": 1},
        )
        # [post listing, comment listing]
        if not isinstance(payload, list) or len(payload) < 2:
            return None
        for child in payload[1].get("data", {}).get("children", []):
            if child.get("kind") != "t1":
                continue
            body = clean_text(child.get("data", {}).get("body"))
            if body and body not in SKIPPED_COMMENTS:
                return body
        return None
