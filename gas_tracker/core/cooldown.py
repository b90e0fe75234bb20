"""Cooldown between manual re-syncs of the same address"""

import math
from dataclasses import dataclass

from gas_tracker.core.cache_store import KeyValueStore
from gas_tracker.core.clock import Clock, SystemClock
from gas_tracker.core.config import COOLDOWN_SECONDS
from gas_tracker.core.logger import logger

COOLDOWN_PREFIX = "cooldown:"


@dataclass
class CooldownStatus:
    active: bool
    remaining_ms: int
    progress_ratio: float

    @property
    def remaining_seconds(self) -> int:
        return math.ceil(self.remaining_ms / 1000) if self.active else 0


def cooldown_key(address: str) -> str:
    return f"{COOLDOWN_PREFIX}{address.strip().lower()}"


class CooldownLimiter:
    """Records when each address may manually re-sync again. Reports only, never blocks."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock | None = None,
        duration_ms: int = COOLDOWN_SECONDS * 1000,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.duration_ms = duration_ms

    async def start(self, address: str) -> int:
        end_ms = self.clock.now_ms() + self.duration_ms
        try:
            await self.store.set(cooldown_key(address), str(end_ms))
        except Exception as e:
            logger.warning(f"Could not persist cooldown for {address}: {e}")
        logger.debug(f"Cooldown started for {address} until {end_ms}")
        return end_ms

    async def end_ms(self, address: str) -> int | None:
        try:
            raw = await self.store.get(cooldown_key(address))
        except Exception as e:
            logger.warning(f"Could not read cooldown for {address}: {e}")
            return None
        if not raw:
            return None
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Ignoring unreadable cooldown value {raw!r} for {address}")
            return None
        return value if value > 0 else None

    async def status(self, address: str) -> CooldownStatus:
        end_ms = await self.end_ms(address)
        if end_ms is None:
            return CooldownStatus(active=False, remaining_ms=0, progress_ratio=0.0)

        remaining = end_ms - self.clock.now_ms()
        if remaining <= 0:
            return CooldownStatus(active=False, remaining_ms=0, progress_ratio=1.0)

        ratio = 1 - remaining / self.duration_ms
        return CooldownStatus(
            active=True,
            remaining_ms=remaining,
            progress_ratio=min(1.0, max(0.0, ratio)),
        )

    async def clear(self, address: str):
        try:
            await self.store.delete(cooldown_key(address))
        except Exception as e:
            logger.warning(f"Could not clear cooldown for {address}: {e}")
