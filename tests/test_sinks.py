"""Tests for trendformer/sinks.py — Supabase persistence and telemetry."""

from unittest.mock import patch

from conftest import json_response

from trendformer.sinks import (
    TELEMETRY_TABLE,
    TRENDS_TABLE,
    SupabaseSink,
    TelemetrySink,
    TrendStore,
    trend_row,
)


def enabled_sink(table):
    return SupabaseSink(table, url="https://proj.supabase.co/", key="service-key")


class TestTrendRow:
    def test_maps_fields(self, sample_trends):
        row = trend_row(sample_trends[1])
        assert row["source"] == "reddit"
        assert row["title"] == "What is your favourite local LLM?"
        assert row["body"] == "Asking for a friend."
        assert row["score"] == 1200
        assert row["created_at"].startswith("2026-10-18T12:00:00")

    def test_body_falls_back_to_top_comment(self, sample_trends):
        t = sample_trends[1]
        t.body = None
        assert trend_row(t)["body"] == "Llama all the way."

    def test_missing_score(self, sample_trends):
        assert trend_row(sample_trends[2])["score"] is None


class TestSupabaseSink:
    def test_disabled_without_config(self):
        sink = SupabaseSink(TRENDS_TABLE)
        assert not sink.enabled
        with patch("trendformer.sinks.requests.post") as mock_post:
            assert sink.insert_async([{"title": "x"}]) is None
            mock_post.assert_not_called()

    def test_enabled_from_env(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        sink = SupabaseSink(TRENDS_TABLE)
        assert sink.enabled
        assert sink.key == "anon"

    def test_empty_rows_skipped(self):
        with patch("trendformer.sinks.requests.post") as mock_post:
            assert enabled_sink(TRENDS_TABLE).insert_async([]) is None
            mock_post.assert_not_called()

    @patch("trendformer.sinks.requests.post")
    def test_insert_posts_to_rest_endpoint(self, mock_post):
        mock_post.return_value = json_response(None, 201)
        t = enabled_sink(TRENDS_TABLE).insert_async([{"title": "x"}])
        t.join(timeout=5)

        args, kwargs = mock_post.call_args
        assert args[0] == "https://proj.supabase.co/rest/v1/trendformer_trends"
        assert kwargs["headers"]["apikey"] == "service-key"
        assert kwargs["headers"]["Authorization"] == "Bearer service-key"
        assert kwargs["headers"]["Prefer"] == "return=minimal"
        assert kwargs["json"] == [{"title": "x"}]

    @patch("trendformer.sinks.requests.post")
    def test_failures_are_swallowed(self, mock_post):
        mock_post.side_effect = ConnectionError("down")
        enabled_sink(TRENDS_TABLE).insert([{"title": "x"}])

    @patch("trendformer.sinks.requests.post")
    def test_error_status_is_swallowed(self, mock_post):
        mock_post.return_value = json_response({"message": "bad"}, 400)
        enabled_sink(TRENDS_TABLE).insert([{"title": "x"}])
        assert mock_post.call_count == 1


class TestStores:
    def test_save_trends(self, sample_trends):
        sink = enabled_sink(TRENDS_TABLE)
        with patch.object(sink, "insert_async") as spy:
            TrendStore(sink).save_trends(sample_trends)
        rows = spy.call_args[0][0]
        assert [r["source"] for r in rows] == ["hn", "reddit", "glasp"]

    def test_telemetry_record(self):
        sink = enabled_sink(TELEMETRY_TABLE)
        with patch.object(sink, "insert_async") as spy:
            TelemetrySink(sink).record("generateThread", {"tone": "expert", "niche": "AI"})
        event = spy.call_args[0][0]
        assert event["feature"] == "generateThread"
        assert event["metadata"] == {"tone": "expert", "niche": "AI"}
        assert "created_at" in event

    def test_disabled_telemetry_is_noop(self):
        with patch("trendformer.sinks.requests.post") as mock_post:
            TelemetrySink().record("generateThread")
            mock_post.assert_not_called()
