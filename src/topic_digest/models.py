from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Post(BaseModel):
    """One social post plus author identity. Immutable once built."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    author_id: str
    author_name: str
    author_username: str
    text: str
    created_at: datetime | None = None


class SearchPage(BaseModel):
    posts: list[Post] = Field(default_factory=list)
    next_token: str | None = None


class SummaryResult(BaseModel):
    summary: str
    suggested_post: str
    keywords: list[str] = Field(default_factory=list)
    bullets: list[str] = Field(default_factory=list)
    representative_posts: list[Post] = Field(default_factory=list)


class ModerationResult(BaseModel):
    flagged: bool = False
    categories: dict[str, bool] = Field(default_factory=dict)
    scores: dict[str, float] = Field(default_factory=dict)


class DigestResponse(BaseModel):
    topic: str
    generated_at: str
    model: str
    tweets: list[Post] = Field(default_factory=list)
    summary: SummaryResult
    moderation: ModerationResult = Field(default_factory=ModerationResult)
    cache: bool = False

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
