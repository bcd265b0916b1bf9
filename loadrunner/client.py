from __future__ import annotations

import httpx

from helloapp.logging_conf import get_logger

logger = get_logger("loadrunner.client")

# Connections are never kept alive, so no request rides on another's socket.
_NO_REUSE = httpx.Limits(max_keepalive_connections=0)


def new_client(
    base_url: str,
    *,
    timeout_s: float = 5.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the driver's client once; each request still opens its own socket."""
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout_s,
        limits=_NO_REUSE,
        headers={"Connection": "close"},
        transport=transport,
    )


async def fetch(client: httpx.AsyncClient, uri: str) -> int | None:
    """Issue a single GET and discard the body.

    - Returns the status code, or None if the request failed in transit
    - Failures are logged and not retried
    """
    try:
        r = await client.get(uri)
    except httpx.HTTPError as e:
        logger.warning(
            "request.failed",
            extra={"event": "request_failed", "uri": uri, "error": str(e)},
        )
        return None
    logger.debug(
        "request.done",
        extra={"event": "request_done", "uri": uri, "status_code": r.status_code},
    )
    return r.status_code
