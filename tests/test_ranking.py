"""Tests for trendformer/ranking.py — ranking with a mocked Claude capability."""

import json
from unittest.mock import patch

from trendformer.llm import MissingConfigError
from trendformer.ranking import (
    MAX_RANK_TRENDS,
    Ranking,
    build_ranking_prompt,
    parse_rankings,
    partition_ranked,
    rank_trends,
)
from trendformer.trends.base import TrendRecord


class TestParseRankings:
    def test_sorts_descending(self):
        rankings = parse_rankings({"rankings": [
            {"index": 0, "relevanceScore": 3, "reasoning": "meh"},
            {"index": 1, "relevanceScore": 9.5, "reasoning": "great"},
            {"index": 2, "relevanceScore": 6, "reasoning": "ok"},
        ]}, 3)
        assert [r.index for r in rankings] == [1, 2, 0]
        assert rankings[0].reasoning == "great"

    def test_discards_out_of_range_indices(self):
        rankings = parse_rankings({"rankings": [
            {"index": -1, "relevanceScore": 9},
            {"index": 3, "relevanceScore": 9},
            {"index": 1, "relevanceScore": 5},
        ]}, 3)
        assert [r.index for r in rankings] == [1]

    def test_discards_malformed_entries(self):
        rankings = parse_rankings({"rankings": [
            {"index": "0", "relevanceScore": 9},
            {"index": 1.0, "relevanceScore": 9},
            {"index": True, "relevanceScore": 9},
            {"index": 0, "relevanceScore": "high"},
            "junk",
            {"index": 2, "relevanceScore": 4},
        ]}, 3)
        assert [r.index for r in rankings] == [2]

    def test_ties_keep_model_order(self):
        rankings = parse_rankings({"rankings": [
            {"index": 2, "relevanceScore": 7},
            {"index": 0, "relevanceScore": 7},
            {"index": 1, "relevanceScore": 7},
        ]}, 3)
        assert [r.index for r in rankings] == [2, 0, 1]

    def test_scores_passed_through_unclamped(self):
        rankings = parse_rankings({"rankings": [
            {"index": 0, "relevanceScore": 42},
            {"index": 1, "relevanceScore": -3},
        ]}, 2)
        assert [r.relevance_score for r in rankings] == [42, -3]

    def test_missing_rankings_key(self):
        assert parse_rankings({}, 3) == []
        assert parse_rankings({"rankings": "nope"}, 3) == []


class TestRankTrends:
    @patch("trendformer.ranking.complete_json")
    def test_returns_sorted_valid_rankings(self, mock_json, sample_trends):
        mock_json.return_value = {"rankings": [
            {"index": 2, "relevanceScore": 4, "reasoning": "c"},
            {"index": 0, "relevanceScore": 9, "reasoning": "a"},
            {"index": 7, "relevanceScore": 10, "reasoning": "bogus"},
        ]}
        rankings = rank_trends("AI", sample_trends)
        assert [r.index for r in rankings] == [0, 2]
        assert all(0 <= r.index < len(sample_trends) for r in rankings)
        scores = [r.relevance_score for r in rankings]
        assert scores == sorted(scores, reverse=True)

    @patch("trendformer.ranking.complete_json")
    def test_empty_input_skips_model(self, mock_json):
        assert rank_trends("AI", []) == []
        mock_json.assert_not_called()

    @patch("trendformer.ranking.complete_json")
    def test_clips_to_max(self, mock_json):
        trends = [TrendRecord(topic=f"T{i}", source="mock") for i in range(60)]
        mock_json.return_value = {"rankings": [{"index": 55, "relevanceScore": 9}, {"index": 49, "relevanceScore": 1}]}
        rankings = rank_trends("AI", trends)
        assert [r.index for r in rankings] == [49]
        prompt = mock_json.call_args[0][1]
        assert f"Analyze these {MAX_RANK_TRENDS} trends" in prompt

    @patch("trendformer.ranking.complete_json")
    def test_capability_failure_degrades(self, mock_json, sample_trends):
        mock_json.side_effect = RuntimeError("overloaded")
        assert rank_trends("AI", sample_trends) == []

    @patch("trendformer.ranking.complete_json")
    def test_missing_key_degrades(self, mock_json, sample_trends):
        mock_json.side_effect = MissingConfigError("Missing ANTHROPIC_API_KEY")
        assert rank_trends("AI", sample_trends) == []

    @patch("trendformer.ranking.complete_json")
    def test_uses_low_temperature(self, mock_json, sample_trends):
        mock_json.return_value = {"rankings": []}
        rank_trends("AI", sample_trends)
        assert mock_json.call_args.kwargs["temperature"] == 0.3


class TestBuildRankingPrompt:
    def test_includes_index_source_and_context(self, sample_trends):
        prompt = build_ranking_prompt("AI", sample_trends)
        assert '0: "OpenAI ships a new agent SDK" (hn, score: 420)' in prompt
        assert "Asking for a friend." in prompt
        assert "score: N/A" in prompt
        assert "for the AI niche" in prompt


class TestPartitionRanked:
    def test_top_three_then_rest(self):
        trends = [TrendRecord(topic=f"T{i}", source="mock") for i in range(5)]
        rankings = [Ranking(4, 9), Ranking(1, 8), Ranking(3, 7), Ranking(0, 6)]
        picks, others = partition_ranked(trends, rankings)
        assert [t.topic for t, _ in picks] == ["T4", "T1", "T3"]
        assert [i for i, _ in others] == [0, 2]

    def test_no_rankings(self, sample_trends):
        picks, others = partition_ranked(sample_trends, [])
        assert picks == []
        assert [i for i, _ in others] == [0, 1, 2]

    def test_to_dict(self):
        assert Ranking(1, 7.5, "why").to_dict() == {"index": 1, "relevanceScore": 7.5, "reasoning": "why"}


class TestNonFiniteRankingScores:
    def test_nan_and_infinity_discarded(self):
        rankings = parse_rankings({"rankings": [
            {"index": 0, "relevanceScore": 3},
            {"index": 1, "relevanceScore": float("nan")},
            {"index": 2, "relevanceScore": 9},
            {"index": 3, "relevanceScore": float("-inf")},
        ]}, 4)
        assert [r.index for r in rankings] == [2, 0]

    @patch("trendformer.ranking.complete_json")
    def test_model_reply_with_nan_stays_sorted(self, mock_json, sample_trends):
        mock_json.return_value = json.loads(
            '{"rankings":[{"index":0,"relevanceScore":3},{"index":1,"relevanceScore":NaN},'
            '{"index":2,"relevanceScore":9}]}'
        )
        scores = [r.relevance_score for r in rank_trends("AI", sample_trends)]
        assert scores == [9, 3]
