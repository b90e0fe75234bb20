"""Cursor-based walk over an account's coin transaction history"""

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any, Protocol

from gas_tracker.core.config import MAX_PAGES, PAGE_SIZE
from gas_tracker.core.errors import ShapeError
from gas_tracker.core.logger import logger


class LedgerClient(Protocol):
    async def fetch_coin_transactions(self, address: str, count: int, start) -> Any: ...


@dataclass
class Page:
    records: list
    cursor: Any
    page_size: int

    @property
    def is_last(self) -> bool:
        """Short or cursor-less pages end the history, whatever the cursor says"""
        return self.cursor is None or len(self.records) < self.page_size


@dataclass
class PageProgress:
    page: int
    total_records: int
    batch_size: int


def parse_page(data, page_size: int) -> Page:
    """Validate a raw `{record: [...], cursor}` payload"""
    if not isinstance(data, dict):
        raise ShapeError(f"Expected a JSON object, got {type(data).__name__}")

    records = data.get("record")
    if records is None:
        records = []
    if not isinstance(records, list):
        raise ShapeError(f"'record' must be a list, got {type(records).__name__}")

    return Page(records=records, cursor=data.get("cursor"), page_size=page_size)


def _notify(on_page: Callable[[PageProgress], Any] | None, progress: PageProgress):
    if on_page is None:
        return
    try:
        on_page(progress)
    except Exception as e:
        logger.warning(f"Progress observer failed on page {progress.page}: {e}")


async def iter_pages(
    client: LedgerClient,
    address: str,
    page_size: int = PAGE_SIZE,
    max_pages: int = MAX_PAGES,
    on_page: Callable[[PageProgress], Any] | None = None,
) -> AsyncIterator[Page]:
    """
    Yield pages strictly in order, starting from cursor 0.

    Stops on an empty page, a page shorter than page_size, a null cursor,
    or after max_pages requests. Network and shape errors propagate and end
    the walk.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    cursor = 0
    total_records = 0

    for page_number in range(1, max_pages + 1):
        data = await client.fetch_coin_transactions(address, page_size, cursor)
        page = parse_page(data, page_size)

        if not page.records:
            logger.debug(f"Empty page {page_number} for {address}, history exhausted")
            return

        total_records += len(page.records)
        yield page
        _notify(on_page, PageProgress(page_number, total_records, len(page.records)))

        if page.is_last:
            return
        cursor = page.cursor

    logger.warning(f"Stopped {address} scan at max_pages={max_pages} ({total_records} records)")


async def fetch_all(
    client: LedgerClient,
    address: str,
    page_size: int = PAGE_SIZE,
    max_pages: int = MAX_PAGES,
    on_page: Callable[[PageProgress], Any] | None = None,
) -> list[Page]:
    """Collect every page of the history eagerly"""
    return [page async for page in iter_pages(client, address, page_size, max_pages, on_page)]
