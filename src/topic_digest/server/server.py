from __future__ import annotations

import logging

import uvicorn

from topic_digest.cache import ResponseCache
from topic_digest.settings import settings

from .app import create_app


def main() -> None:
    logging.basicConfig(
        level=(settings.log_level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cache = ResponseCache(max_entries=settings.cache_max_entries)
    app = create_app(settings, cache)

    uvicorn.run(
        app,
        host=settings.bind_host,
        port=settings.port,
        log_level=(settings.log_level or "info").lower(),
    )


if __name__ == "__main__":
    main()
