from __future__ import annotations

import logging
from typing import Protocol

from .models import Post, SearchPage

logger = logging.getLogger(__name__)

TARGET_COUNT = 50
MAX_PAGES = 5  # stop even if a narrow topic never reaches the target


class SearchProvider(Protocol):
    async def search_page(self, query: str, next_token: str | None = None) -> SearchPage: ...


def build_query(topic: str) -> str:
    return f"{topic} -is:retweet"


async def fetch_unique_authors(
    provider: SearchProvider, topic: str, target_count: int = TARGET_COUNT
) -> list[Post]:
    """Collect up to `target_count` posts, one per author, in page order.

    The first post seen for an author wins. Any provider error propagates
    and no partial result is returned.
    """
    if target_count <= 0:
        return []

    by_author: dict[str, Post] = {}
    next_token: str | None = None
    query = build_query(topic)

    for page_no in range(1, MAX_PAGES + 1):
        page = await provider.search_page(query, next_token=next_token)

        for post in page.posts:
            by_author.setdefault(post.author_id, post)
            if len(by_author) >= target_count:
                break

        logger.debug(
            "page %d: %d posts, %d unique authors so far", page_no, len(page.posts), len(by_author)
        )

        next_token = page.next_token
        if len(by_author) >= target_count or not next_token:
            break

    logger.info("Fetched %d posts from unique authors for %r", len(by_author), topic)
    return list(by_author.values())
