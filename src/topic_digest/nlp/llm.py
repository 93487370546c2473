from __future__ import annotations

from collections.abc import Iterable

from topic_digest.clients.openai import OpenAIResponsesClient
from topic_digest.errors import ParseError
from topic_digest.models import Post, SummaryResult
from topic_digest.text import collapse_whitespace, normalize, truncate

from .summarize import (
    MAX_KEYWORDS,
    POST_MAX_LEN,
    is_keyword,
    keyword_frequency,
    rank_posts,
    top_keywords,
)


def build_prompt(topic: str, posts: Iterable[Post]) -> str:
    lines = [f"Topic: {topic}", "Tweets:"]
    for i, p in enumerate(posts, start=1):
        lines.append(f"{i}) {p.author_name} (@{p.author_username}) - {collapse_whitespace(p.text)}")
    lines.append("")
    lines.append("Return JSON only.")
    return "\n".join(lines)


def _str_list(v) -> list[str]:
    if not isinstance(v, list):
        return []
    return [str(x) for x in v if isinstance(x, (str, int, float))]


def clean_keywords(raw: list[str], freq) -> list[str]:
    """Keep model keywords that pass the extractive token rules.

    Falls back to the frequency table when none survive.
    """
    out: list[str] = []
    for k in raw:
        w = normalize(k).lower()
        if " " in w or not is_keyword(w) or w in out:
            continue
        out.append(w)
    return out[:MAX_KEYWORDS] or top_keywords(freq)


class LLMSummarizer:
    """Summarize with a language model; representative posts stay extractive."""

    def __init__(self, client: OpenAIResponsesClient):
        self.client = client

    async def summarize(self, topic: str, posts: list[Post]) -> SummaryResult:
        out = await self.client.structured_summary(build_prompt(topic, posts))

        summary = out.get("summary")
        suggested = out.get("suggested_post")
        if not isinstance(summary, str) or not isinstance(suggested, str):
            raise ParseError("OpenAI summary payload is missing summary or suggested_post.")

        freq = keyword_frequency([c for c in (normalize(p.text) for p in posts) if c])
        return SummaryResult(
            summary=summary,
            suggested_post=truncate(suggested, POST_MAX_LEN),
            keywords=clean_keywords(_str_list(out.get("keywords")), freq),
            bullets=_str_list(out.get("bullets")),
            representative_posts=rank_posts(posts, freq),
        )
