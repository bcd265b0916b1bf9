"""Periodic request driver.

Once per interval a tick plans 1..N randomized URIs and fires one GET per URI
as an independent task. Nothing waits on those tasks; requests from one tick
may overlap each other and the next tick.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial

from helloapp.config import HarnessConfig
from helloapp.logging_conf import get_logger
from loadrunner.client import fetch, new_client
from loadrunner.picks import RandomSource, plan_tick, system_random

logger = get_logger("loadrunner.driver")

Sender = Callable[[str], Awaitable[object]]


def tick(
    config: HarnessConfig,
    rng: RandomSource,
    *,
    send: Sender,
    pending: set[asyncio.Task],
) -> list[asyncio.Task]:
    """Schedule this tick's requests and return their tasks without awaiting.

    Tasks stay in `pending` until they finish so they are not collected early.
    """
    uris = plan_tick(config, rng)
    logger.debug("tick", extra={"event": "tick", "count": len(uris), "uris": uris})
    tasks = []
    for uri in uris:
        task = asyncio.create_task(send(uri))
        pending.add(task)
        task.add_done_callback(pending.discard)
        tasks.append(task)
    return tasks


async def run_driver(
    config: HarnessConfig,
    rng: RandomSource | None = None,
    *,
    base_url: str | None = None,
    send: Sender | None = None,
    max_ticks: int | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> int:
    """Tick every `config.tick_interval_s` seconds until cancelled.

    The first tick fires one interval after start. With `max_ticks`, or once
    `should_stop()` is true, the driver stops ticking, waits for in-flight
    requests and returns the tick count. On cancellation in-flight requests
    are cancelled.
    """
    rng = rng or system_random()
    pending: set[asyncio.Task] = set()
    ticks = 0
    async with new_client(base_url or config.base_url()) as client:
        send = send or partial(fetch, client)
        try:
            while max_ticks is None or ticks < max_ticks:
                await asyncio.sleep(config.tick_interval_s)
                if should_stop is not None and should_stop():
                    break
                tick(config, rng, send=send, pending=pending)
                ticks += 1
        except asyncio.CancelledError:
            for task in list(pending):
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise
        await asyncio.gather(*pending, return_exceptions=True)
    return ticks
