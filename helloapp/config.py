from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "DEFAULT_PORT",
    "PATHS",
    "QUERIES",
    "HarnessConfig",
]

DEFAULT_PORT = 8080

# Request tables the driver draws from.
PATHS: tuple[str, ...] = ("/wendell", "/uter", "/allison")
QUERIES: tuple[str, ...] = ("", "?limit=5", "?limit=5&offset=5")


class HarnessConfig(BaseModel):
    """Settings shared by the server and the request driver.

    Built once at startup and handed to both sides; never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    port: int = Field(DEFAULT_PORT, ge=0, le=65535)  # 0 = ephemeral
    bind_host: str = "0.0.0.0"
    target_host: str = "127.0.0.1"
    response_delay_s: float = Field(0.001, ge=0.0)
    tick_interval_s: float = Field(1.0, gt=0.0)
    max_requests_per_tick: int = Field(3, ge=1)
    paths: tuple[str, ...] = Field(PATHS, min_length=1)
    queries: tuple[str, ...] = Field(QUERIES, min_length=1)
    body: str = "hello world\n"

    def base_url(self, port: int | None = None) -> str:
        """URL the driver targets, optionally for an already-bound port."""
        return f"http://{self.target_host}:{self.port if port is None else port}"
