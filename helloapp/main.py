"""FastAPI app factory: every request gets a delayed "hello world"."""
from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response

from helloapp import __version__
from helloapp.config import HarnessConfig
from helloapp.logging_conf import get_logger

logger = get_logger("helloapp")

ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(config: HarnessConfig | None = None) -> FastAPI:
    config = config or HarnessConfig()
    # Docs routes would shadow the catch-all, so they are turned off.
    app = FastAPI(
        title="Hello self-test server",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Awaitable[Response]]):
        """Debug-level request logging with a correlation id.

        - Reuses the client's X-Request-ID if sent, otherwise mints one
        - Logs a start and end event with method/path/status/elapsed_ms
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        start = time.perf_counter()
        logger.debug(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "query": request.url.query,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "method": request.method,
                    "path": request.url.path,
                    "request_id": request_id,
                },
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        logger.debug(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    @app.api_route("/{path:path}", methods=ANY_METHOD, include_in_schema=False)
    async def hello(path: str) -> Response:
        await asyncio.sleep(config.response_delay_s)
        # Explicit header: media_type="text/plain" would append a charset.
        return Response(content=config.body, status_code=200, headers={"content-type": "text/plain"})

    return app
