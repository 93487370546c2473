import asyncio

import pytest

from topic_digest.cache import ResponseCache
from topic_digest.errors import DigestError, UpstreamError, ValidationError
from topic_digest.models import SearchPage
from topic_digest.nlp.moderate import ModerationGate
from topic_digest.nlp.summarize import ExtractiveSummarizer
from topic_digest.pipeline import STATUS_CACHED, DigestPipeline

from conftest import FakeClassifier, FakeSearch


def collect(pipeline, topic):
    async def go():
        return [ev async for ev in pipeline.events(topic)]

    return asyncio.run(go())


def _pipeline(posts, cache=None, classifier=None):
    return DigestPipeline(
        FakeSearch([SearchPage(posts=posts)]),
        ExtractiveSummarizer(),
        ModerationGate(classifier or FakeClassifier()),
        cache=cache,
        ttl_seconds=60,
    )


def test_empty_topic_rejected_before_any_call(rust_posts):
    p = _pipeline(rust_posts)
    with pytest.raises(ValidationError):
        collect(p, "  ")
    assert p.search.calls == []


def test_without_cache_always_runs_full_pipeline(rust_posts):
    p = _pipeline(rust_posts)
    asyncio.run(p.generate("rust"))
    result = asyncio.run(p.generate("rust"))
    assert result.cache is False
    assert len(p.search.calls) == 2


def test_cached_response_is_stored_uncached_and_served_as_copy(rust_posts):
    cache = ResponseCache()
    p = _pipeline(rust_posts, cache=cache)
    fresh = asyncio.run(p.generate("Rust"))
    events = collect(p, "rust ")

    assert events[0] == ("status", STATUS_CACHED)
    kind, hit = events[1]
    assert kind == "result"
    assert hit.cache is True
    assert hit.summary == fresh.summary
    assert cache.get("rust").cache is False


def test_moderation_failure_fails_whole_request_and_skips_cache(rust_posts):
    cache = ResponseCache()
    p = _pipeline(rust_posts, cache=cache, classifier=FakeClassifier(error=UpstreamError("boom")))
    with pytest.raises(UpstreamError):
        asyncio.run(p.generate("rust"))
    assert cache.get("rust") is None


class StatusOnlyPipeline(DigestPipeline):
    async def events(self, topic):
        yield "status", "working"


def test_generate_without_result_raises(rust_posts):
    p = StatusOnlyPipeline(
        FakeSearch([SearchPage(posts=rust_posts)]), ExtractiveSummarizer(), ModerationGate(FakeClassifier())
    )
    with pytest.raises(DigestError):
        asyncio.run(p.generate("rust"))
