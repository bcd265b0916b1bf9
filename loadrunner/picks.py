from __future__ import annotations

import math
import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

from helloapp.config import HarnessConfig

__all__ = [
    "RandomSource",
    "system_random",
    "pick_random",
    "request_count",
    "build_uri",
    "plan_tick",
]

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


def system_random() -> RandomSource:
    """Random source backed by the OS; tests inject a seeded one instead."""
    return random.SystemRandom()


def pick_random(items: Sequence[T], rng: RandomSource) -> T:
    """Return one element of `items`, chosen uniformly.

    Raises:
        ValueError: if `items` is empty.
    """
    if not items:
        raise ValueError("cannot pick from an empty sequence")
    # Clamp guards against a source that returns exactly 1.0.
    idx = min(int(rng.random() * len(items)), len(items) - 1)
    return items[idx]


def request_count(rng: RandomSource, maximum: int = 3) -> int:
    """Number of requests for one tick, in 1..maximum inclusive."""
    n = math.ceil(rng.random() * maximum)
    return max(1, min(n, maximum))


def build_uri(config: HarnessConfig, rng: RandomSource) -> str:
    """One path and one query, picked independently, concatenated."""
    return pick_random(config.paths, rng) + pick_random(config.queries, rng)


def plan_tick(config: HarnessConfig, rng: RandomSource) -> list[str]:
    """URIs to request during a single tick."""
    n = request_count(rng, config.max_requests_per_tick)
    return [build_uri(config, rng) for _ in range(n)]
