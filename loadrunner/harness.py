#!/usr/bin/env python3
"""Self-test harness: the hello server and the request driver on one loop.

Steps:
- parse the optional port argument (usage error -> exit 1)
- start uvicorn serving the hello app
- once the socket is bound, log where the server is running
- tick the driver until the server shuts down, then cancel it
"""
from __future__ import annotations

import asyncio
import contextlib
import signal
import sys

import uvicorn

from helloapp.config import HarnessConfig
from helloapp.logging_conf import get_logger, setup_logging
from helloapp.main import create_app
from loadrunner.cli import parse_args
from loadrunner.driver import run_driver
from loadrunner.picks import RandomSource

logger = get_logger("loadrunner")


def build_server(config: HarnessConfig) -> uvicorn.Server:
    uv_config = uvicorn.Config(
        create_app(config),
        host=config.bind_host,
        port=config.port,
        log_config=None,
        access_log=False,
    )
    return uvicorn.Server(uv_config)


def bound_address(server: uvicorn.Server) -> tuple[str, int]:
    """Address and port of the first listening socket."""
    sock = server.servers[0].sockets[0]
    host, port = sock.getsockname()[:2]
    return host, port


async def _wait_started(server: uvicorn.Server, serve_task: asyncio.Task) -> bool:
    while not server.started:
        if serve_task.done():
            return False
        await asyncio.sleep(0.01)
    return True


async def run(
    config: HarnessConfig,
    rng: RandomSource | None = None,
    *,
    server: uvicorn.Server | None = None,
) -> None:
    server = server or build_server(config)
    serve_task = asyncio.create_task(server.serve())
    if not await _wait_started(server, serve_task):
        await serve_task
        return

    host, port = bound_address(server)
    logger.info(
        "server running at http://%s:%d",
        host,
        port,
        extra={"event": "startup", "address": host, "port": port},
    )

    driver = asyncio.create_task(
        run_driver(
            config,
            rng,
            base_url=config.base_url(port),
            should_stop=lambda: server.should_exit,
        )
    )
    try:
        await serve_task
    finally:
        driver.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await driver
    logger.debug("shutdown", extra={"event": "shutdown"})


class ShutdownRequested(Exception):
    """Raised by the SIGTERM handler; ends the run like Ctrl-C does."""


def _on_sigterm(signum: int, frame: object) -> None:
    raise ShutdownRequested(signum)


def main(argv: list[str] | None = None) -> None:
    setup_logging()
    args = parse_args(sys.argv[1:] if argv is None else argv)
    config = HarnessConfig(port=args.port)
    # uvicorn restores this handler after shutdown and re-raises SIGTERM into it.
    previous = signal.signal(signal.SIGTERM, _on_sigterm)
    try:
        asyncio.run(run(config))
    except (KeyboardInterrupt, ShutdownRequested):
        logger.debug("stopped", extra={"event": "stopped"})
    finally:
        signal.signal(signal.SIGTERM, previous)
    raise SystemExit(0)


if __name__ == "__main__":
    main()
