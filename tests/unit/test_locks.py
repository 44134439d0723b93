"""
Unit Tests: Keyed Locks
"""

import asyncio

import pytest

from data.storage import KeyedLock


async def _worker(locks: KeyedLock, key: str, tag: str, events: list):
    async with locks.hold(key):
        events.append(f"{tag}-start")
        await asyncio.sleep(0.01)
        events.append(f"{tag}-end")


class TestKeyedLock:
    """Test per-key serialization."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_key_serialized(self):
        locks = KeyedLock()
        events = []

        await asyncio.gather(
            _worker(locks, "k", "a", events),
            _worker(locks, "k", "b", events),
        )

        assert events == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_different_keys_interleave(self):
        locks = KeyedLock()
        events = []

        await asyncio.gather(
            _worker(locks, "k1", "a", events),
            _worker(locks, "k2", "b", events),
        )

        assert events[:2] == ["a-start", "b-start"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_registry_drained(self):
        locks = KeyedLock()

        async with locks.hold("k"):
            assert locks.locked("k")
            assert len(locks) == 1

        assert not locks.locked("k")
        assert len(locks) == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_released_on_error(self):
        locks = KeyedLock()

        with pytest.raises(RuntimeError):
            async with locks.hold("k"):
                raise RuntimeError("boom")

        assert len(locks) == 0
