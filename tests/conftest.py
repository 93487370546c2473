from __future__ import annotations

import pytest

from topic_digest.models import ModerationResult, Post, SearchPage


def make_post(i, text, author=None, **kw) -> Post:
    author = author if author is not None else f"u{i}"
    return Post(
        id=str(i),
        author_id=author,
        author_name=kw.pop("author_name", f"User {author}"),
        author_username=kw.pop("author_username", f"user_{author}"),
        text=text,
        **kw,
    )


class FakeSearch:
    """Replays a fixed list of pages; the last page repeats if asked again."""

    def __init__(self, pages: list[SearchPage], error: Exception | None = None):
        self.pages = pages
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    async def search_page(self, query, next_token=None):
        self.calls.append((query, next_token))
        if self.error is not None:
            raise self.error
        idx = min(len(self.calls) - 1, len(self.pages) - 1)
        return self.pages[idx]


class FakeClassifier:
    def __init__(self, result: ModerationResult | None = None, error: Exception | None = None):
        self.result = result or ModerationResult(flagged=False, categories={"hate": False}, scores={"hate": 0.01})
        self.error = error
        self.seen: list[str] = []

    async def moderate(self, text):
        self.seen.append(text)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def rust_posts() -> list[Post]:
    return [
        make_post(1, "Rust memory safety means fewer memory bugs https://t.co/abc @ferris"),
        make_post(2, "I love how #Rust gives memory safety without a GC. memory memory"),
        make_post(3, "The borrow checker enforces memory safety and memory discipline!"),
    ]
