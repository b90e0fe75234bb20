"""Per-address cache of lifetime gas stats"""

import json
from dataclasses import dataclass
from typing import Protocol

from gas_tracker.core.clock import Clock, SystemClock
from gas_tracker.core.fee_aggregator import AggregationResult
from gas_tracker.core.logger import logger

CACHE_PREFIX = "cache:"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str): ...

    async def delete(self, key: str): ...


@dataclass
class CacheEntry:
    address: str
    updated_at_ms: int
    result: AggregationResult
    last_sync_timestamp_ms: int | None

    def to_json(self) -> str:
        return json.dumps(
            {
                "address": self.address,
                "updated_at_ms": self.updated_at_ms,
                "result": self.result.to_dict(),
                "last_sync_timestamp_ms": self.last_sync_timestamp_ms,
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> "CacheEntry":
        data = json.loads(raw)
        return cls(
            address=str(data["address"]),
            updated_at_ms=int(data.get("updated_at_ms") or 0),
            result=AggregationResult.from_dict(data["result"]),
            last_sync_timestamp_ms=data.get("last_sync_timestamp_ms"),
        )


def cache_key(address: str) -> str:
    return f"{CACHE_PREFIX}{address.strip().lower()}"


class CacheStore:
    """
    Stores one AggregationResult per address.

    Entries never expire: a hit is returned as-is until a completed sync
    overwrites it. Storage problems are logged and read as a miss.
    """

    def __init__(self, store: KeyValueStore, clock: Clock | None = None):
        self.store = store
        self.clock = clock or SystemClock()

    async def get(self, address: str) -> CacheEntry | None:
        if not address:
            return None
        key = cache_key(address)
        try:
            raw = await self.store.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        if not raw:
            return None

        try:
            entry = CacheEntry.from_json(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring corrupted cache entry {key}: {e}")
            return None

        if entry.address.lower() != address.strip().lower():
            logger.warning(f"Cache entry {key} belongs to {entry.address}, ignoring")
            return None

        logger.debug(f"Cache hit: {key}")
        return entry

    async def put(
        self, address: str, result: AggregationResult, last_sync_timestamp_ms: int | None
    ) -> CacheEntry:
        entry = CacheEntry(
            address=address.strip(),
            updated_at_ms=self.clock.now_ms(),
            result=result,
            last_sync_timestamp_ms=last_sync_timestamp_ms,
        )
        try:
            await self.store.set(cache_key(address), entry.to_json())
        except Exception as e:
            logger.warning(f"Cache write failed for {cache_key(address)}: {e}")
        return entry

    async def delete(self, address: str):
        try:
            await self.store.delete(cache_key(address))
        except Exception as e:
            logger.warning(f"Cache delete failed for {cache_key(address)}: {e}")
