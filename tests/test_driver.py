import asyncio
import random

import httpx

from helloapp.config import HarnessConfig
from loadrunner.client import fetch, new_client
from loadrunner.driver import run_driver, tick


class Recorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, uri):
        self.calls.append(uri)
        return 200


def test_tick_schedules_one_task_per_planned_uri():
    rec = Recorder()
    pending = set()

    async def scenario():
        tasks = tick(HarnessConfig(), random.Random(7), send=rec, pending=pending)
        assert pending == set(tasks)
        await asyncio.gather(*tasks)
        return tasks

    tasks = asyncio.run(scenario())
    assert 1 <= len(tasks) <= 3
    assert len(rec.calls) == len(tasks)
    assert pending == set()


def test_tick_does_not_wait_for_requests():
    started = []
    release = None

    async def slow_send(uri):
        started.append(uri)
        await release.wait()

    async def scenario():
        nonlocal release
        release = asyncio.Event()
        tasks = tick(HarnessConfig(), random.Random(3), send=slow_send, pending=set())
        assert not any(t.done() for t in tasks)
        await asyncio.sleep(0)
        assert len(started) == len(tasks)
        release.set()
        await asyncio.gather(*tasks)

    asyncio.run(scenario())


def test_run_driver_ticks_on_interval_and_drains_requests():
    rec = Recorder()
    cfg = HarnessConfig(tick_interval_s=0.01)

    n = asyncio.run(run_driver(cfg, random.Random(5), send=rec, max_ticks=20))
    assert n == 20
    assert 20 <= len(rec.calls) <= 60


def test_run_driver_stops_when_asked():
    rec = Recorder()
    cfg = HarnessConfig(tick_interval_s=0.01)

    n = asyncio.run(
        run_driver(cfg, random.Random(5), send=rec, should_stop=lambda: len(rec.calls) >= 5)
    )
    assert n >= 2
    assert len(rec.calls) >= 5


def test_run_driver_cancels_in_flight_requests():
    cancelled = []

    async def hang(uri):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(uri)
            raise

    async def scenario():
        driver = asyncio.create_task(
            run_driver(HarnessConfig(tick_interval_s=0.01), random.Random(2), send=hang)
        )
        await asyncio.sleep(0.05)
        driver.cancel()
        try:
            await driver
        except asyncio.CancelledError:
            pass

    asyncio.run(scenario())
    assert cancelled


def test_fetch_sends_get_without_connection_reuse():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text="hello world\n")

    async def scenario():
        transport = httpx.MockTransport(handler)
        async with new_client("http://127.0.0.1:8080", transport=transport) as client:
            return await fetch(client, "/allison?limit=5")

    assert asyncio.run(scenario()) == 200
    (req,) = seen
    assert req.method == "GET"
    assert str(req.url) == "http://127.0.0.1:8080/allison?limit=5"
    assert req.headers["connection"] == "close"


def test_fetch_logs_and_swallows_transport_errors(caplog):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async def scenario():
        async with new_client("http://127.0.0.1:1", transport=httpx.MockTransport(handler)) as c:
            return await fetch(c, "/uter")

    assert asyncio.run(scenario()) is None
    assert any(r.message == "request.failed" for r in caplog.records)
