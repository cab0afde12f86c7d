"""Shared test fixtures."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from trendformer.trends.base import TrendRecord, TrendSource

CONFIG_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "CLAUDE_MODEL",
    "USE_MOCK_TRENDS",
    "MOCK_FALLBACK",
    "GLASP_API_BASE_URL",
    "GLASP_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_ANON_KEY",
    "REQUEST_TIMEOUT",
    "PORT",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real environment and ~/.trendformer/config.json."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_file = tmp_path / "trendformer" / "config.json"
    monkeypatch.setattr("trendformer.config.APP_DIR", config_file.parent)
    monkeypatch.setattr("trendformer.config.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_trends(fixed_now):
    return [
        TrendRecord(topic="OpenAI ships a new agent SDK", source="hn", score=420, timestamp=fixed_now,
                    url="https://example.com/agents"),
        TrendRecord(topic="What is your favourite local LLM?", source="reddit", score=1200, timestamp=fixed_now,
                    url="https://www.reddit.com/r/LocalLLaMA/comments/abc/q", body="Asking for a friend.",
                    top_comment="Llama all the way."),
        TrendRecord(topic="AI regulation", source="glasp", score=None, timestamp=fixed_now),
    ]


class FakeSource(TrendSource):
    """TrendSource returning canned trends, or raising when given an exception."""

    def __init__(self, name, trends=None, error=None, available=True):
        self.name = name
        self.trends = trends or []
        self.error = error
        self.available = available
        self.calls = []

    @property
    def is_available(self):
        return self.available

    def _fetch_trends(self, query, min_score=None):
        self.calls.append((query, min_score))
        if self.error:
            raise self.error
        return list(self.trends)


@pytest.fixture
def make_source():
    return FakeSource


def json_response(payload, status_code=200):
    """A MagicMock shaped like a requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = Exception(f"HTTP {status_code}")
    else:
        response.raise_for_status = MagicMock()
    return response
