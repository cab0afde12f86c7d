"""Request validation models for the HTTP surface."""

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from .ranking import MAX_RANK_TRENDS
from .trends.base import SOURCES, TrendRecord, parse_timestamp, utcnow
from .trends.engine import normalize_provider
from .trends.niches import DEFAULT_NICHE


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def _known_source(value: str) -> str:
    if value not in SOURCES:
        raise ValueError(f"unknown source; expected one of {', '.join(SOURCES)}")
    return value


NonBlank = Annotated[str, AfterValidator(_not_blank)]
Source = Annotated[str, AfterValidator(_known_source)]
Tone = Literal["degen", "contrarian", "expert"]
Provider = Annotated[Literal["all", "reddit", "hn", "glasp"], BeforeValidator(normalize_provider)]


class TrendIn(BaseModel):
    """A trend record as posted back by clients."""
    model_config = ConfigDict(populate_by_name=True)

    topic: NonBlank
    source: Source
    score: float | None = Field(default=None, allow_inf_nan=False)
    timestamp: str | None = None
    url: str | None = None
    body: str | None = None
    top_comment: str | None = Field(default=None, alias="topComment")

    def to_record(self) -> TrendRecord:
        return TrendRecord(
            topic=self.topic,
            source=self.source,
            score=self.score,
            timestamp=parse_timestamp(self.timestamp) or utcnow(),
            url=self.url,
            body=self.body,
            top_comment=self.top_comment,
        )


class RankRequest(BaseModel):
    niche: NonBlank
    trends: list[TrendIn] = Field(min_length=1, max_length=MAX_RANK_TRENDS)


class ThreadRequest(BaseModel):
    niche: NonBlank
    topic: NonBlank
    tone: Tone
    context: str | None = None


class TrendsQuery(BaseModel):
    """Query string of GET /trends. `mock` and `save` stay None when omitted."""
    model_config = ConfigDict(populate_by_name=True)

    niche: str = DEFAULT_NICHE
    provider: Provider = "all"
    min_score: int | None = Field(default=None, alias="minScore")
    mock: bool | None = None
    save: bool | None = None

    @classmethod
    def from_args(cls, args) -> "TrendsQuery":
        """Build from a query-string mapping; blank values count as omitted."""
        data = {k: v for k, v in args.items() if isinstance(v, str) and v.strip()}
        query = cls.model_validate(data)
        query.niche = query.niche.strip() or DEFAULT_NICHE
        return query


def error_details(exc: ValidationError) -> list[dict]:
    """Structural summary of what failed validation."""
    return [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
