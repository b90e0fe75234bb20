"""Lifetime gas tracking: cache lookup, sync runs and run generations"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gas_tracker.core.cache_store import CacheEntry, CacheStore, KeyValueStore
from gas_tracker.core.clock import Clock, SystemClock
from gas_tracker.core.config import COOLDOWN_SECONDS, MAX_PAGES, PAGE_SIZE
from gas_tracker.core.cooldown import CooldownLimiter, CooldownStatus
from gas_tracker.core.errors import CooldownActiveError, SyncError
from gas_tracker.core.fee_aggregator import AggregationResult, aggregate_stream
from gas_tracker.core.logger import logger
from gas_tracker.core.pagination import LedgerClient, PageProgress, iter_pages

SYNC_FAILED_MESSAGE = "Unable to fetch full coin transaction history from Supra RPC."


@dataclass
class TrackerState:
    """What a dashboard would render for the current address"""

    address: str | None = None
    calculating: bool = False
    pages_processed: int = 0
    progress_percent: int = 0
    result: AggregationResult | None = None
    last_sync_ms: int | None = None
    has_stats: bool = False
    error: str = ""


class GasTracker:
    def __init__(
        self,
        client: LedgerClient,
        store: KeyValueStore,
        clock: Clock | None = None,
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
        cooldown_ms: int = COOLDOWN_SECONDS * 1000,
    ):
        self.client = client
        self.clock = clock or SystemClock()
        self.cache = CacheStore(store, self.clock)
        self.cooldown = CooldownLimiter(store, self.clock, cooldown_ms)
        self.page_size = page_size
        self.max_pages = max_pages

        self.state = TrackerState()
        self._generations: dict[str, int] = {}

    @staticmethod
    def _key(address: str) -> str:
        return address.strip().lower()

    def generation(self, address: str) -> int:
        return self._generations.get(self._key(address), 0)

    def invalidate(self, address: str) -> int:
        """Start a new run generation; runs holding an older token discard their result"""
        key = self._key(address)
        self._generations[key] = self._generations.get(key, 0) + 1
        return self._generations[key]

    def _switch_to(self, address: str):
        """Make address the one on screen; runs for the previous address go stale"""
        previous = self.state.address
        if previous is not None and self._key(previous) != self._key(address):
            self.invalidate(previous)
            logger.debug(f"Address changed from {previous} to {address}")
        self.state.address = address

    def _is_current(self, address: str, token: int) -> bool:
        if self.state.address is None or self._key(self.state.address) != self._key(address):
            return False
        return self.generation(address) == token

    def _show_entry(self, entry: CacheEntry | None, address: str):
        self._switch_to(address)
        self.state.pages_processed = 0
        self.state.progress_percent = 0
        if entry is None:
            self.state.result = None
            self.state.last_sync_ms = None
            self.state.has_stats = False
            return
        self.state.result = entry.result
        self.state.last_sync_ms = (
            entry.last_sync_timestamp_ms
            if entry.last_sync_timestamp_ms is not None
            else entry.updated_at_ms or None
        )
        self.state.has_stats = True

    async def load(self, address: str) -> CacheEntry | None:
        """Surface cached stats for an address; never touches the network"""
        self.state.error = ""
        self._switch_to(address)
        entry = await self.cache.get(address)
        self._show_entry(entry, address)
        if entry is None:
            logger.debug(f"No cached gas stats for {address}")
        return entry

    async def refresh(
        self, address: str, on_page: Callable[[PageProgress], Any] | None = None
    ) -> CacheEntry | None:
        """Cached entry if there is one, otherwise a first (non-manual) sync"""
        entry = await self.load(address)
        if entry is not None:
            return entry
        return await self.sync(address, manual=False, on_page=on_page)

    async def cooldown_status(self, address: str) -> CooldownStatus:
        return await self.cooldown.status(address)

    async def sync(
        self,
        address: str,
        manual: bool = False,
        on_page: Callable[[PageProgress], Any] | None = None,
    ) -> CacheEntry | None:
        """
        Walk the full history and cache the aggregate.

        Manual syncs are refused while the address is cooling down and start a
        new cooldown when they complete. Returns None when the run was
        superseded by a newer one before it finished.

        Raises:
            CooldownActiveError: manual sync during an active cooldown.
            SyncError: the ledger walk failed; the cache is left untouched.
        """
        if manual:
            status = await self.cooldown.status(address)
            if status.active:
                raise CooldownActiveError(address, status.remaining_ms)

        self._switch_to(address)
        token = self.invalidate(address)
        self.state.calculating = True
        self.state.error = ""
        self.state.pages_processed = 0
        self.state.progress_percent = 5
        logger.info(f"Syncing lifetime gas for {address} ({'manual' if manual else 'initial'})")

        def track_progress(progress: PageProgress):
            if not self._is_current(address, token):
                return
            self.state.pages_processed = progress.page
            self.state.progress_percent = min(95, self.state.progress_percent + 4)
            if on_page is not None:
                on_page(progress)

        try:
            result = await aggregate_stream(
                iter_pages(self.client, address, self.page_size, self.max_pages, track_progress)
            )
        except SyncError as e:
            if not self._is_current(address, token):
                logger.debug(f"Superseded run for {address} failed: {e}")
                return None
            logger.error(f"Gas sync failed for {address}: {e}")
            self.state.calculating = False
            self.state.error = SYNC_FAILED_MESSAGE
            self.state.progress_percent = 0
            self.state.pages_processed = 0
            raise

        if not self._is_current(address, token):
            logger.info(f"Discarding superseded gas sync for {address}")
            return None

        sync_time = result.latest_timestamp_ms or self.clock.now_ms()
        entry = await self.cache.put(address, result, sync_time)

        self.state.calculating = False
        self.state.pages_processed = max(self.state.pages_processed, 1)
        self.state.progress_percent = 100
        self.state.result = result
        self.state.last_sync_ms = sync_time
        self.state.has_stats = True

        if manual:
            await self.cooldown.start(address)

        logger.info(
            f"Synced {address}: {result.tx_count} txs, {result.total_fee_display} SUPRA total"
        )
        return entry

    async def disconnect(self, address: str):
        """Drop in-flight runs, reset state and forget the cooldown"""
        self.invalidate(address)
        await self.cooldown.clear(address)
        self.state = TrackerState()
        logger.debug(f"Disconnected {address}")
