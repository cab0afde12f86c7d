"""Niche -> provider query parameters."""

from dataclasses import dataclass

DEFAULT_NICHE = "AI"

# General-interest communities used when a niche is not recognized
DEFAULT_SUBREDDITS = ("popular", "news", "technology", "worldnews")

NICHES = {
    "ai": {
        "subreddits": ("artificial", "MachineLearning", "OpenAI", "LocalLLaMA", "singularity"),
        "keywords": ("ai", "llm", "gpt", "openai", "anthropic", "claude", "model", "neural", "agent", "machine learning"),
    },
    "fitness": {
        "subreddits": ("fitness", "bodyweightfitness", "running", "weightroom", "nutrition"),
        "keywords": ("fitness", "workout", "exercise", "health", "nutrition", "sleep", "diet", "running"),
    },
    "dating": {
        "subreddits": ("dating", "dating_advice", "relationships", "Tinder"),
        "keywords": ("dating", "relationship", "tinder", "hinge", "love", "marriage"),
    },
    "marketing": {
        "subreddits": ("marketing", "digital_marketing", "SEO", "socialmedia", "content_marketing"),
        "keywords": ("marketing", "seo", "ads", "growth", "brand", "newsletter", "content", "audience"),
    },
    "crypto": {
        "subreddits": ("CryptoCurrency", "Bitcoin", "ethereum", "defi", "solana"),
        "keywords": ("crypto", "bitcoin", "ethereum", "blockchain", "web3", "defi", "token", "stablecoin"),
    },
    "freelancing": {
        "subreddits": ("freelance", "Upwork", "WorkOnline", "digitalnomad"),
        "keywords": ("freelance", "contractor", "remote", "upwork", "gig", "consulting", "client"),
    },
    "startups": {
        "subreddits": ("startups", "Entrepreneur", "SaaS", "smallbusiness", "ycombinator"),
        "keywords": ("startup", "founder", "yc", "funding", "seed", "series a", "saas", "launch", "vc"),
    },
    "productivity": {
        "subreddits": ("productivity", "getdisciplined", "Notion", "ObsidianMD", "selfimprovement"),
        "keywords": ("productivity", "focus", "habit", "notion", "obsidian", "calendar", "workflow", "todo"),
    },
}


@dataclass(frozen=True)
class NicheQuery:
    """Per-provider query parameters for one niche."""
    niche: str
    subreddits: tuple = DEFAULT_SUBREDDITS
    keywords: tuple = ()
    matched: bool = False


def resolve_niche(niche: str) -> NicheQuery:
    """Case-insensitive exact lookup; unknown niches get the default communities.

    An empty keyword tuple means no keyword filtering.
    """
    label = (niche or "").strip()
    entry = NICHES.get(label.lower())
    if entry is None:
        return NicheQuery(niche=label, subreddits=DEFAULT_SUBREDDITS, keywords=(), matched=False)
    return NicheQuery(
        niche=label,
        subreddits=tuple(entry["subreddits"]),
        keywords=tuple(entry["keywords"]),
        matched=True,
    )


def matches_keywords(title: str, keywords) -> bool:
    """Case-insensitive substring match; no keywords accepts everything."""
    if not keywords:
        return True
    lowered = title.lower()
    return any(k.lower() in lowered for k in keywords)
