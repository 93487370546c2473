from __future__ import annotations

import json
from typing import Any

import httpx

from topic_digest.errors import ParseError
from topic_digest.http import HttpClientFactory, request_json
from topic_digest.models import ModerationResult

SUMMARY_INSTRUCTIONS = (
    "You are a social media assistant. Create a concise summary and an original new post "
    "based strictly on the provided tweets. Do not invent facts, do not quote verbatim, and "
    "keep the suggested post within 280 characters. Return JSON only."
)

SUMMARY_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "name": "tweet_summary",
    "description": "Summary, keywords, bullets, and a suggested post based on recent tweets.",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "summary": {"type": "string"},
            "suggested_post": {"type": "string"},
            "keywords": {"type": "array", "items": {"type": "string"}},
            "bullets": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["summary", "suggested_post", "keywords", "bullets"],
        "additionalProperties": False,
    },
}


def _client(api_key: str, base_url: str, client: httpx.AsyncClient | None) -> httpx.AsyncClient:
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    if client is None:
        return HttpClientFactory.client(base_url=base_url, headers=headers)
    client.headers.update(headers)
    return client


def extract_output_text(d: Any) -> str | None:
    """First `output_text` part of the first message item in a Responses payload."""
    if not isinstance(d, dict):
        return None
    for item in d.get("output") or []:
        if not isinstance(item, dict) or item.get("type") != "message":
            continue
        for part in item.get("content") or []:
            if isinstance(part, dict) and part.get("type") == "output_text":
                return part.get("text")
    return None


class OpenAIResponsesClient:
    """Minimal OpenAI Responses API client for structured summaries.

    Docs: https://platform.openai.com/docs/api-reference/responses
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        client: httpx.AsyncClient | None = None,
    ):
        self.model = model
        self._client = _client(api_key, base_url, client)

    async def aclose(self):
        await self._client.aclose()

    async def structured_summary(self, prompt: str) -> dict[str, Any]:
        body = {
            "model": self.model,
            "input": [
                {"role": "system", "content": SUMMARY_INSTRUCTIONS},
                {"role": "user", "content": prompt},
            ],
            "text": {"format": SUMMARY_FORMAT},
            "temperature": 0.4,
        }
        d = await request_json(self._client, "POST", "/responses", provider="OpenAI", json=body)

        text = extract_output_text(d)
        if not text or not text.strip():
            raise ParseError("OpenAI API response missing output_text.")
        try:
            out = json.loads(text)
        except ValueError as e:
            raise ParseError(f"OpenAI output_text is not valid JSON: {e}") from e
        if not isinstance(out, dict):
            raise ParseError("OpenAI output_text is not a JSON object.")
        return out


class ModerationClient:
    """OpenAI moderation endpoint wrapper.

    Docs: https://platform.openai.com/docs/api-reference/moderations
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "omni-moderation-latest",
        client: httpx.AsyncClient | None = None,
    ):
        self.model = model
        self._client = _client(api_key, base_url, client)

    async def aclose(self):
        await self._client.aclose()

    async def moderate(self, text: str) -> ModerationResult:
        d = await request_json(
            self._client,
            "POST",
            "/moderations",
            provider="OpenAI Moderation",
            json={"model": self.model, "input": text},
        )
        results = d.get("results") if isinstance(d, dict) else None
        if not isinstance(results, list) or not results:
            raise ParseError("OpenAI Moderation API response has no results.")

        r = results[0] or {}
        categories = r.get("categories") or {}
        scores = r.get("category_scores") or {}
        return ModerationResult(
            flagged=bool(r.get("flagged", False)),
            categories={k: bool(v) for k, v in categories.items()} if isinstance(categories, dict) else {},
            scores={k: _as_float(v) for k, v in scores.items()} if isinstance(scores, dict) else {},
        )


def _as_float(v: Any) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return 0.0
