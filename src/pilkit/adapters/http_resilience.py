"""Rate-limited httpx client with transport-level retries."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import RetryTransport

if TYPE_CHECKING:
    from types import TracebackType

    from pilkit.config.http_resilience import ResilienceConfig


def build_limiter(config: ResilienceConfig) -> AsyncLimiter | None:
    if config.ratelimit is None:
        return None
    return AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)


class ResilientClient:
    """One ``httpx.AsyncClient`` configured from a :class:`ResilienceConfig`.

    Retries happen inside the transport, so a policy with ``total=0`` sends
    each request exactly once. Every request made through this instance waits
    on the same limiter; pass ``limiter`` to share that budget with other clients.
    """

    def __init__(
        self, config: ResilienceConfig, *, limiter: AsyncLimiter | None = None
    ) -> None:
        self.config = config
        self._limiter = limiter if limiter is not None else build_limiter(config)
        self._client = httpx.AsyncClient(
            timeout=config.timeout_seconds,
            transport=RetryTransport(retry=config.retry.build()),
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post_json(self, url: str, payload: object) -> object:
        """POST ``payload`` as JSON and return the decoded body.

        Raises ``httpx.HTTPStatusError`` for non-2xx answers and ``ValueError``
        when the body is not JSON.
        """

        async def do_post() -> httpx.Response:
            return await self._client.post(url, json=payload)

        response = await self._send(do_post)
        response.raise_for_status()
        return response.json()

    async def _send(self, func: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await func()
        async with self._limiter:
            return await func()
