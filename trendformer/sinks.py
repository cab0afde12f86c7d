"""Fire-and-forget persistence + telemetry via the Supabase REST API.

Both sinks are silent no-ops when SUPABASE_URL or a key is missing. Writes
run on daemon threads; callers never wait for or observe the outcome.
"""

import threading

import requests

from .config import get_supabase_key, get_supabase_url
from .log import get_logger
from .trends.base import utcnow

TRENDS_TABLE = "trendformer_trends"
TELEMETRY_TABLE = "telemetry_events"


def _supabase_headers(key: str) -> dict[str, str]:
    return {
        "apikey": key,
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
        "Prefer": "return=minimal",
    }


def trend_row(trend) -> dict:
    return {
        "source": trend.source,
        "title": trend.topic,
        "body": trend.body or trend.top_comment,
        "url": trend.url,
        "score": trend.score if isinstance(trend.score, (int, float)) else None,
        "created_at": trend.timestamp.isoformat(),
    }


class SupabaseSink:
    """Inserts rows into one Supabase table."""

    def __init__(self, table: str, url: str | None = None, key: str | None = None, timeout: float = 15):
        self.table = table
        self.url = (url if url is not None else get_supabase_url()).rstrip("/")
        self.key = key if key is not None else get_supabase_key()
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.key)

    def insert(self, rows) -> None:
        """Blocking insert. Failures are logged, never raised."""
        try:
            resp = requests.post(
                f"{self.url}/rest/v1/{self.table}",
                headers=_supabase_headers(self.key),
                json=rows,
                timeout=self.timeout,
            )
            if not resp.ok:
                get_logger().warning("supabase %s insert failed (%s): %s", self.table, resp.status_code, resp.text[:200])
        except Exception as e:
            get_logger().warning("supabase %s insert failed: %s", self.table, e)

    def insert_async(self, rows) -> threading.Thread | None:
        """Start the insert on a daemon thread and return without waiting."""
        if not self.enabled or not rows:
            return None
        t = threading.Thread(target=self.insert, args=(rows,), name=f"sink-{self.table}", daemon=True)
        t.start()
        return t


class TrendStore:
    def __init__(self, sink: SupabaseSink | None = None):
        self.sink = sink or SupabaseSink(TRENDS_TABLE)

    def save_trends(self, trends) -> None:
        self.sink.insert_async([trend_row(t) for t in trends])


class TelemetrySink:
    def __init__(self, sink: SupabaseSink | None = None):
        self.sink = sink or SupabaseSink(TELEMETRY_TABLE)

    def record(self, feature: str, metadata: dict | None = None) -> None:
        self.sink.insert_async({
            "feature": feature,
            "metadata": metadata or {},
            "created_at": utcnow().isoformat(),
        })
