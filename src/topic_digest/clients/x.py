from __future__ import annotations

import logging
from datetime import datetime

import httpx

from topic_digest.http import HttpClientFactory, request_json
from topic_digest.models import Post, SearchPage

logger = logging.getLogger(__name__)

PROVIDER = "X"
PAGE_SIZE = 100


class XSearchClient:
    """X (Twitter) v2 recent-search client.

    Docs: https://developer.x.com/en/docs/x-api/tweets/search

    One call returns one page; pagination is driven by the caller via
    `next_token`.
    """

    def __init__(
        self,
        bearer_token: str,
        base_url: str = "https://api.x.com/2",
        client: httpx.AsyncClient | None = None,
    ):
        headers = {
            "Authorization": f"Bearer {bearer_token}",
            "User-Agent": "TopicDigest/1.0",
        }
        self._client = client or HttpClientFactory.client(base_url=base_url, headers=headers)
        if client is not None:
            self._client.headers.update(headers)

    async def aclose(self):
        await self._client.aclose()

    async def search_page(self, query: str, next_token: str | None = None) -> SearchPage:
        params = {
            "query": query,
            "max_results": str(PAGE_SIZE),
            "tweet.fields": "created_at,author_id,lang",
            "expansions": "author_id",
            "user.fields": "username,name",
        }
        if next_token:
            params["next_token"] = next_token

        d = await request_json(
            self._client, "GET", "/tweets/search/recent", provider=PROVIDER, params=params
        )
        if not isinstance(d, dict):
            d = {}

        users = self._users((d.get("includes") or {}).get("users"))
        posts = [self._to_post(x, users) for x in d.get("data") or [] if isinstance(x, dict)]

        token = (d.get("meta") or {}).get("next_token")
        if not isinstance(token, str) or not token.strip():
            token = None
        return SearchPage(posts=posts, next_token=token)

    def _users(self, items) -> dict[str, dict]:
        out: dict[str, dict] = {}
        for u in items or []:
            uid = str(u.get("id") or "")
            if uid:
                out[uid] = u
        return out

    def _to_post(self, d: dict, users: dict[str, dict]) -> Post:
        author_id = str(d.get("author_id") or "")
        u = users.get(author_id)

        created_at: datetime | None = None
        raw = d.get("created_at")
        if raw:
            try:
                created_at = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
            except ValueError:
                logger.debug("Unparseable created_at %r on post %s", raw, d.get("id"))

        return Post(
            id=str(d.get("id") or ""),
            author_id=author_id,
            author_name=(u.get("name") or "") if u else "Unknown",
            author_username=(u.get("username") or "") if u else "unknown",
            text=d.get("text") or "",
            created_at=created_at,
        )
