"""SQLite-backed TMDB response cache on top of diskcache."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)

RESPONSE_TAG = "tmdb-response"


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    writes: int = 0


class DiskcacheAdapter:
    """Implements CachePort with diskcache, which only offers a blocking API.

    Every disk call runs in ``asyncio.to_thread`` and is bounded by a
    semaphore so concurrent home-row loads do not pile up on the SQLite
    lock. Entries are tagged, so ``clear()`` evicts cached responses and
    leaves anything else stored in the same directory alone.

    The adapter is opened with ``async with`` (or ``__aenter__``) and may
    be reopened after ``aclose()``.
    """

    def __init__(
        self,
        directory: str | Path = "./.cache/moviestudio/responses",
        ttl_seconds: int = 3600,
        max_concurrent: int = 10,
    ) -> None:
        self.directory = Path(directory)
        self.default_ttl = ttl_seconds
        self.stats = CacheStats()
        self._cache: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> DiskcacheAdapter:
        if self._cache is None:
            self._cache = await asyncio.to_thread(
                DiskCache, str(self.directory), tag_index=True
            )
            log.info(
                "response_cache_opened",
                directory=str(self.directory),
                default_ttl=self.default_ttl,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is None:
            return
        cache, self._cache = self._cache, None
        await asyncio.to_thread(cache.close)
        log.info(
            "response_cache_closed",
            directory=str(self.directory),
            hits=self.stats.hits,
            misses=self.stats.misses,
            writes=self.stats.writes,
        )

    def _opened(self) -> DiskCache:
        if self._cache is None:
            raise RuntimeError(
                f"Response cache at {self.directory} is not initialized; "
                "open it with 'async with' first"
            )
        return self._cache

    async def get(self, key: str) -> Any:
        cache = self._opened()
        async with self._semaphore:
            value = await asyncio.to_thread(cache.get, key)
        if value is None:
            self.stats.misses += 1
        else:
            self.stats.hits += 1
        log.debug("response_cache_get", key=key, hit=value is not None)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Store *value*; ``ttl=None`` means the default TTL, ``0`` never expires."""
        cache = self._opened()
        seconds = self.default_ttl if ttl is None else ttl
        expire = seconds or None
        async with self._semaphore:
            await asyncio.to_thread(
                cache.set, key, value, expire=expire, tag=RESPONSE_TAG
            )
        self.stats.writes += 1
        log.debug("response_cache_set", key=key, expire=expire)

    async def clear(self) -> int:
        cache = self._opened()
        async with self._semaphore:
            removed = await asyncio.to_thread(cache.evict, RESPONSE_TAG)
        log.info(
            "response_cache_cleared", directory=str(self.directory), removed=removed
        )
        return removed
