from unittest.mock import AsyncMock, MagicMock

import pytest

from gas_tracker.core.cooldown import CooldownLimiter


@pytest.mark.asyncio
async def test_active_right_after_start(db, clock):
    limiter = CooldownLimiter(db, clock)

    end = await limiter.start("0xabc")
    status = await limiter.status("0xabc")

    assert end == clock.now_ms() + 60_000
    assert status.active is True
    assert status.remaining_ms == 60_000
    assert status.progress_ratio == 0.0
    assert status.remaining_seconds == 60


@pytest.mark.asyncio
async def test_progress_and_expiry(db, clock):
    limiter = CooldownLimiter(db, clock)
    await limiter.start("0xabc")

    clock.advance(30_000)
    halfway = await limiter.status("0xabc")
    assert halfway.active is True
    assert halfway.progress_ratio == pytest.approx(0.5)
    assert halfway.remaining_seconds == 30

    clock.advance(30_000)
    done = await limiter.status("0xabc")
    assert done.active is False
    assert done.remaining_ms == 0
    assert done.progress_ratio == 1.0


@pytest.mark.asyncio
async def test_remaining_seconds_round_up(db, clock):
    limiter = CooldownLimiter(db, clock)
    await limiter.start("0xabc")

    clock.advance(59_500)

    assert (await limiter.status("0xabc")).remaining_seconds == 1


@pytest.mark.asyncio
async def test_no_cooldown_state(db, clock):
    status = await CooldownLimiter(db, clock).status("0xabc")

    assert status.active is False
    assert status.progress_ratio == 0.0


@pytest.mark.asyncio
async def test_persisted_per_lowercased_address(db, clock):
    await CooldownLimiter(db, clock).start("0xABC")

    # A fresh limiter over the same store sees the cooldown
    status = await CooldownLimiter(db, clock).status("0xabc")

    assert status.active is True
    assert await db.get("cooldown:0xabc") == str(clock.now_ms() + 60_000)


@pytest.mark.asyncio
async def test_clear(db, clock):
    limiter = CooldownLimiter(db, clock)
    await limiter.start("0xabc")

    await limiter.clear("0xabc")

    assert (await limiter.status("0xabc")).active is False


@pytest.mark.asyncio
async def test_unreadable_value_is_ignored(db, clock):
    await db.set("cooldown:0xabc", "soon")

    assert (await CooldownLimiter(db, clock).status("0xabc")).active is False


@pytest.mark.asyncio
async def test_storage_failure_reads_inactive(clock):
    store = MagicMock()
    store.get = AsyncMock(side_effect=OSError("locked"))

    assert (await CooldownLimiter(store, clock).status("0xabc")).active is False
