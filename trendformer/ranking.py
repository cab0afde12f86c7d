"""Claude relevance ranking of aggregated trends."""

import math
from dataclasses import dataclass

from .llm import complete_json
from .log import get_logger

MAX_RANK_TRENDS = 50

RANKING_SYSTEM = "You are an expert content strategist. Analyze trends and return only valid JSON."


@dataclass(frozen=True)
class Ranking:
    """Relevance of the trend at `index` in the ranked input list."""
    index: int
    relevance_score: float
    reasoning: str = ""

    def to_dict(self) -> dict:
        return {"index": self.index, "relevanceScore": self.relevance_score, "reasoning": self.reasoning}


def build_ranking_prompt(niche: str, trends) -> str:
    lines = []
    for i, t in enumerate(trends):
        score = t.score if t.score is not None else "N/A"
        context = (t.body or t.top_comment or "")[:200]
        lines.append(f'{i}: "{t.topic}" ({t.source}, score: {score})\n   Context: {context}...')
    trends_list = "\n\n".join(lines)

    return f"""You are an expert content strategist analyzing trending topics for the {niche} niche.

Analyze these {len(trends)} trends and rank them by relevance and potential for viral Twitter content:

{trends_list}

Consider:
- Relevance to {niche} audience interests
- Timeliness and trending momentum
- Controversy/discussion potential
- Actionable insights for the audience
- Content creation opportunities

Return JSON with exactly this format:
{{
  "rankings": [
    {{
      "index": 0,
      "relevanceScore": 8.5,
      "reasoning": "Brief explanation of why this trend is highly relevant"
    }}
  ]
}}

Rank ALL trends provided. Sort by relevanceScore (highest first). Use scores 1-10 (decimals ok)."""


def parse_rankings(payload: dict, n: int) -> list[Ranking]:
    """Keep well-formed rankings that point into the input, best first.

    Out-of-range indices and non-numeric or non-finite (NaN, inf) scores
    are discarded. Scores are otherwise not clamped. Sorting is stable, so
    ties keep the model's order.
    """
    raw = payload.get("rankings")
    if not isinstance(raw, list):
        return []

    rankings = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        index = entry.get("index")
        score = entry.get("relevanceScore")
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < n:
            continue
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
            continue
        reasoning = entry.get("reasoning")
        rankings.append(Ranking(index=index, relevance_score=score, reasoning=str(reasoning or "")))

    rankings.sort(key=lambda r: r.relevance_score, reverse=True)
    return rankings


def rank_trends(niche: str, trends) -> list[Ranking]:
    """Rank up to MAX_RANK_TRENDS trends. Any failure means no ranking."""
    trends = list(trends)[:MAX_RANK_TRENDS]
    if not trends:
        return []

    try:
        payload = complete_json(RANKING_SYSTEM, build_ranking_prompt(niche, trends), temperature=0.3)
    except Exception as e:
        get_logger().warning("Ranking unavailable: %s", e)
        return []
    return parse_rankings(payload, len(trends))


def partition_ranked(trends, rankings, top: int = 3):
    """Split trends into the top ranked picks and everything else.

    Returns (picks, others): picks are (trend, ranking) pairs, others are
    (original_index, trend) pairs in input order.
    """
    picks = []
    picked = set()
    for ranking in rankings:
        if len(picks) >= top:
            break
        if 0 <= ranking.index < len(trends) and ranking.index not in picked:
            picks.append((trends[ranking.index], ranking))
            picked.add(ranking.index)
    others = [(i, t) for i, t in enumerate(trends) if i not in picked]
    return picks, others
