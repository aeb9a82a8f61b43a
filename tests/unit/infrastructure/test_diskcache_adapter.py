"""Tests for DiskcacheAdapter (response cache)."""

from __future__ import annotations

from pathlib import Path

import pytest

from moviestudio.infrastructure.cache.diskcache_adapter import DiskcacheAdapter


class TestDiskcacheAdapter:
    async def test_set_then_get(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path / "c") as cache:
            await cache.set("tmdb:genres:en-US", [{"id": 28, "name": "Action"}])

            assert await cache.get("tmdb:genres:en-US") == [
                {"id": 28, "name": "Action"}
            ]

    async def test_missing_key_returns_none(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path / "c") as cache:
            assert await cache.get("nope") is None

    async def test_clear_reports_removed_entries(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path / "c") as cache:
            await cache.set("a", 1)
            await cache.set("b", 2)

            assert await cache.clear() == 2
            assert await cache.clear() == 0

            assert await cache.get("a") is None
            assert await cache.get("b") is None

    async def test_values_survive_reopen(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path / "c") as cache:
            await cache.set("k", {"page": 1}, ttl=0)

        async with DiskcacheAdapter(tmp_path / "c") as cache:
            assert await cache.get("k") == {"page": 1}

    async def test_get_before_open_raises(self, tmp_path: Path) -> None:
        cache = DiskcacheAdapter(tmp_path / "c")

        with pytest.raises(RuntimeError, match="not initialized"):
            await cache.get("k")

    async def test_clear_before_open_raises(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError, match="not initialized"):
            await DiskcacheAdapter(tmp_path / "c").clear()

    async def test_aclose_is_idempotent(self, tmp_path: Path) -> None:
        cache = DiskcacheAdapter(tmp_path / "c")
        await cache.__aenter__()

        await cache.aclose()
        await cache.aclose()

        with pytest.raises(RuntimeError):
            await cache.set("k", 1)

    async def test_clear_leaves_untagged_entries(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path / "c") as cache:
            await cache.set("tmdb:genres:en-US", [])
            assert cache._cache is not None
            cache._cache.set("foreign", "kept")

            await cache.clear()

            assert await cache.get("tmdb:genres:en-US") is None
            assert await cache.get("foreign") == "kept"

    async def test_stats_count_hits_misses_and_writes(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(tmp_path / "c") as cache:
            await cache.set("k", 1)
            await cache.get("k")
            await cache.get("k")
            await cache.get("missing")

            assert cache.stats.hits == 2
            assert cache.stats.misses == 1
            assert cache.stats.writes == 1
