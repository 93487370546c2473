from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime, timezone

from .cache import ResponseCache
from .clients.openai import ModerationClient, OpenAIResponsesClient
from .clients.x import XSearchClient
from .errors import DigestError, ValidationError
from .fetch import TARGET_COUNT, SearchProvider, fetch_unique_authors
from .models import DigestResponse
from .nlp.llm import LLMSummarizer
from .nlp.moderate import ModerationGate
from .nlp.summarize import ExtractiveSummarizer, Summarizer
from .settings import DigestSettings

logger = logging.getLogger(__name__)

STATUS_CACHED = "Loaded from cache."
STATUS_FETCHING = "Fetching recent tweets..."
STATUS_SUMMARIZING = "Summarizing..."
STATUS_MODERATING = "Running moderation..."

Event = tuple[str, object]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class DigestPipeline:
    """fetch -> summarize -> moderate, fronted by an optional response cache.

    `events()` yields ("status", message) tuples followed by exactly one
    ("result", DigestResponse). Errors propagate to the caller.
    """

    def __init__(
        self,
        search: SearchProvider,
        summarizer: Summarizer,
        gate: ModerationGate,
        *,
        cache: ResponseCache | None = None,
        model: str = "extractive",
        ttl_seconds: int = 600,
        target_count: int = TARGET_COUNT,
        closers: tuple[Callable[[], Awaitable[None]], ...] = (),
    ):
        self.search = search
        self.summarizer = summarizer
        self.gate = gate
        self.cache = cache
        self.model = model
        self.ttl_seconds = ttl_seconds
        self.target_count = target_count
        self._closers = closers

    @classmethod
    def from_settings(cls, s: DigestSettings, cache: ResponseCache | None = None) -> "DigestPipeline":
        s.require_credentials()

        search = XSearchClient(s.x_bearer_token, base_url=s.x_api_base_url)
        moderation = ModerationClient(
            s.openai_api_key, base_url=s.openai_api_base_url, model=s.openai_moderation_model
        )
        closers = [search.aclose, moderation.aclose]

        summarizer: Summarizer
        if s.summarizer_backend == "llm":
            llm = OpenAIResponsesClient(
                s.openai_api_key, base_url=s.openai_api_base_url, model=s.openai_model
            )
            closers.append(llm.aclose)
            summarizer = LLMSummarizer(llm)
        else:
            summarizer = ExtractiveSummarizer()

        return cls(
            search,
            summarizer,
            ModerationGate(moderation),
            cache=cache,
            model=s.model_label,
            ttl_seconds=s.cache_ttl_seconds,
            closers=tuple(closers),
        )

    async def aclose(self) -> None:
        for close in self._closers:
            await close()

    async def events(self, topic: str) -> AsyncIterator[Event]:
        topic = (topic or "").strip()
        if not topic:
            raise ValidationError("Topic is required")

        if self.cache is not None:
            cached = self.cache.get(topic)
            if cached is not None:
                yield "status", STATUS_CACHED
                yield "result", cached.model_copy(update={"cache": True})
                return

        t0 = time.perf_counter()
        yield "status", STATUS_FETCHING
        posts = await fetch_unique_authors(self.search, topic, self.target_count)

        t1 = time.perf_counter()
        yield "status", STATUS_SUMMARIZING
        summary = await self.summarizer.summarize(topic, posts)

        t2 = time.perf_counter()
        yield "status", STATUS_MODERATING
        final_post, moderation = await self.gate.gate(summary.suggested_post)
        summary = summary.model_copy(update={"suggested_post": final_post})
        t3 = time.perf_counter()

        logger.info(
            "Digest for %r: fetch=%.2fs summarize=%.2fs moderate=%.2fs posts=%d",
            topic,
            t1 - t0,
            t2 - t1,
            t3 - t2,
            len(posts),
        )

        response = DigestResponse(
            topic=topic,
            generated_at=_now_iso(),
            model=self.model,
            tweets=posts,
            summary=summary,
            moderation=moderation,
            cache=False,
        )
        if self.cache is not None:
            self.cache.put(topic, response, self.ttl_seconds)
        yield "result", response

    async def generate(self, topic: str) -> DigestResponse:
        result: DigestResponse | None = None
        async for kind, value in self.events(topic):
            if kind == "result":
                result = value  # type: ignore[assignment]
        if result is None:
            raise DigestError(f"Digest pipeline produced no result for {topic!r}")
        return result
