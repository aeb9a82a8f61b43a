"""httpx transport that retries TMDB throttling responses."""

from __future__ import annotations

import asyncio
import random

import httpx
import structlog

log = structlog.get_logger(__name__)

_RETRYABLE = frozenset({429, 503})


def _retry_after_seconds(headers: httpx.Headers) -> float | None:
    """``Retry-After`` in seconds; HTTP-date values are ignored."""
    raw = headers.get("retry-after")
    if raw is None:
        return None
    try:
        return max(float(raw), 0.0)
    except ValueError:
        return None


class TmdbRetryTransport(httpx.AsyncBaseTransport):
    """Wraps a transport and retries 429/503 with exponential backoff.

    TMDB answers bursts with 429 and a ``Retry-After`` header; that value
    wins over the computed backoff (capped at ``max_backoff``). The final
    response is returned as-is once ``max_retries`` is exhausted.
    """

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport | None = None,
        *,
        max_retries: int = 2,
        backoff_base: float = 0.5,
        max_backoff: float = 10.0,
    ) -> None:
        self._wrapped = wrapped or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._max_backoff = max_backoff

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            response = await self._wrapped.handle_async_request(request)
            if response.status_code not in _RETRYABLE or attempt >= self._max_retries:
                return response

            await response.aread()
            await response.aclose()

            delay = self._delay(response, attempt)
            log.info(
                "tmdb_retry",
                path=request.url.path,
                status=response.status_code,
                attempt=attempt + 1,
                delay=round(delay, 2),
            )
            await asyncio.sleep(delay)
            attempt += 1

    def _delay(self, response: httpx.Response, attempt: int) -> float:
        retry_after = _retry_after_seconds(response.headers)
        if retry_after is not None:
            return min(retry_after, self._max_backoff)
        delay = self._backoff_base * (2**attempt)
        jitter = random.uniform(0, self._backoff_base)  # noqa: S311
        return min(delay + jitter, self._max_backoff)

    async def aclose(self) -> None:
        await self._wrapped.aclose()
