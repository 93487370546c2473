from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from topic_digest import __version__
from topic_digest.cache import ResponseCache
from topic_digest.errors import ConfigurationError, ValidationError
from topic_digest.models import DigestResponse
from topic_digest.pipeline import DigestPipeline
from topic_digest.settings import DigestSettings

logger = logging.getLogger(__name__)

PipelineFactory = Callable[[DigestSettings, ResponseCache], DigestPipeline]


class GenerateIn(BaseModel):
    topic: str | None = None


def sse_frame(event: str, data: str) -> str:
    data = data.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return f"event: {event}\ndata: {data}\n\n"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _message(e: Exception) -> str:
    return str(e) or e.__class__.__name__


def _frame(kind: str, value: object) -> str:
    if isinstance(value, DigestResponse):
        return sse_frame(kind, json.dumps(value.to_json_dict()))
    return sse_frame(kind, str(value))


async def _produce(pipeline: DigestPipeline, topic: str, queue: asyncio.Queue) -> None:
    """Run the pipeline to completion, pushing SSE frames; None marks the end.

    Runs detached from the response so a client disconnect does not stop it.
    """
    try:
        async for kind, value in pipeline.events(topic):
            await queue.put(_frame(kind, value))
    except Exception as e:
        logger.warning("Streaming digest failed for %r: %s", topic, e)
        await queue.put(sse_frame("error", _message(e)))
    finally:
        await queue.put(None)


async def _drain(queue: asyncio.Queue) -> AsyncIterator[str]:
    while True:
        frame = await queue.get()
        if frame is None:
            return
        yield frame


def _event_stream(frames: AsyncIterator[str]) -> StreamingResponse:
    return StreamingResponse(
        frames,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


async def _single(frame: str) -> AsyncIterator[str]:
    yield frame


def create_app(
    settings: DigestSettings,
    cache: ResponseCache | None = None,
    pipeline_factory: PipelineFactory | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if app.state.tasks:
            await asyncio.gather(*list(app.state.tasks), return_exceptions=True)
        if app.state.pipeline is not None:
            await app.state.pipeline.aclose()

    app = FastAPI(title="Topic Digest", version=__version__, lifespan=lifespan)

    cache = cache if cache is not None else ResponseCache(max_entries=settings.cache_max_entries)
    build = pipeline_factory or DigestPipeline.from_settings

    # shared for the app's lifetime: one set of provider clients, one cache
    app.state.cache = cache
    app.state.pipeline = None
    app.state.tasks = set()

    def get_pipeline() -> DigestPipeline:
        if app.state.pipeline is None:
            app.state.pipeline = build(settings, cache)
        return app.state.pipeline

    @app.exception_handler(RequestValidationError)
    async def _bad_request(_request: Request, exc: RequestValidationError):
        return _error(400, "Invalid request body")

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.post("/api/generate")
    async def generate(payload: GenerateIn):
        topic = (payload.topic or "").strip()
        if not topic:
            return _error(400, "Topic is required")

        try:
            pipeline = get_pipeline()
        except ConfigurationError as e:
            return _error(400, _message(e))

        try:
            result = await pipeline.generate(topic)
        except ValidationError as e:
            return _error(400, _message(e))
        except Exception as e:
            logger.warning("Digest generation failed for %r: %s", topic, e)
            return _error(500, _message(e))

        return result.to_json_dict()

    @app.get("/api/generate-sse")
    async def generate_sse(topic: str = ""):
        topic = topic.strip()
        if not topic:
            return _error(400, "Topic is required")

        try:
            pipeline = get_pipeline()
        except ConfigurationError as e:
            return _event_stream(_single(sse_frame("error", _message(e))))

        queue: asyncio.Queue = asyncio.Queue()
        task = asyncio.create_task(_produce(pipeline, topic, queue))
        app.state.tasks.add(task)
        task.add_done_callback(app.state.tasks.discard)

        return _event_stream(_drain(queue))

    return app
