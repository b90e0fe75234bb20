from unittest.mock import AsyncMock, MagicMock

import pytest

from gas_tracker.core.cache_store import CacheStore, cache_key
from gas_tracker.core.fee_aggregator import AggregationResult


def sample_result(total=14000, tx_count=140) -> AggregationResult:
    return AggregationResult(
        tx_count=tx_count,
        total_fee_units=total,
        total_fee_display="0.000140",
        avg_fee_display="0.000001",
        monthly_avg_fee_display=None,
        latest_timestamp_ms=1_700_000_000_000,
    )


@pytest.mark.asyncio
async def test_put_then_get(db, clock):
    cache = CacheStore(db, clock)

    await cache.put("0xabc", sample_result(), 1_700_000_000_000)
    entry = await cache.get("0xabc")

    assert entry is not None
    assert entry.result == sample_result()
    assert entry.updated_at_ms == clock.now_ms()
    assert entry.last_sync_timestamp_ms == 1_700_000_000_000


@pytest.mark.asyncio
async def test_keys_are_case_normalized(db, clock):
    cache = CacheStore(db, clock)

    await cache.put("0xABC", sample_result(total=1), None)
    await cache.put("0xabc", sample_result(total=2), None)

    entry = await cache.get("0xAbC")
    assert entry.result.total_fee_units == 2
    assert await db.keys("cache:") == [cache_key("0xabc")]
    assert cache_key("0xABC") == "cache:0xabc"


@pytest.mark.asyncio
async def test_miss(db, clock):
    cache = CacheStore(db, clock)

    assert await cache.get("0xnever") is None
    assert await cache.get("") is None


@pytest.mark.asyncio
async def test_entries_never_expire(db, clock):
    """No TTL: a year-old entry is still a hit"""
    cache = CacheStore(db, clock)
    await cache.put("0xabc", sample_result(), None)

    clock.advance(365 * 24 * 60 * 60 * 1000)

    assert await cache.get("0xabc") is not None


@pytest.mark.asyncio
async def test_corrupted_entry_reads_as_miss(db, clock):
    cache = CacheStore(db, clock)

    await db.set("cache:0xabc", "{not json")
    assert await cache.get("0xabc") is None

    await db.set("cache:0xabc", '{"address": "0xabc"}')
    assert await cache.get("0xabc") is None


@pytest.mark.asyncio
async def test_entry_for_other_address_is_ignored(db, clock):
    cache = CacheStore(db, clock)
    await cache.put("0xother", sample_result(), None)

    await db.set("cache:0xabc", await db.get("cache:0xother"))

    assert await cache.get("0xabc") is None


@pytest.mark.asyncio
async def test_storage_failures_degrade(clock):
    store = MagicMock()
    store.get = AsyncMock(side_effect=OSError("disk gone"))
    store.set = AsyncMock(side_effect=OSError("disk gone"))
    cache = CacheStore(store, clock)

    assert await cache.get("0xabc") is None
    entry = await cache.put("0xabc", sample_result(), None)
    assert entry.result == sample_result()


@pytest.mark.asyncio
async def test_delete(db, clock):
    cache = CacheStore(db, clock)
    await cache.put("0xabc", sample_result(), None)

    await cache.delete("0xABC")

    assert await cache.get("0xabc") is None
