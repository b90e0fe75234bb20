"""Lifetime gas fee accumulation over paginated coin transactions"""

from collections.abc import AsyncIterable, Iterable
from dataclasses import asdict, dataclass

from gas_tracker.core.config import DISPLAY_DECIMALS, SUPRA_DECIMALS
from gas_tracker.core.errors import ParseError
from gas_tracker.core.formatting import format_units, round_half_up
from gas_tracker.core.logger import logger
from gas_tracker.core.pagination import Page
from gas_tracker.core.supra_api import parse_int
from gas_tracker.core.timestamps import extract_timestamp_ms

MONTH_MS = 30 * 24 * 60 * 60 * 1000


@dataclass
class AggregationResult:
    tx_count: int
    total_fee_units: int
    total_fee_display: str
    avg_fee_display: str
    monthly_avg_fee_display: str | None = None
    latest_timestamp_ms: int | None = None
    earliest_timestamp_ms: int | None = None

    @property
    def avg_fee_units(self) -> int:
        return self.total_fee_units // self.tx_count if self.tx_count else 0

    def to_dict(self) -> dict:
        data = asdict(self)
        # JSON consumers (and JS) lose precision above 2**53
        data["total_fee_units"] = str(self.total_fee_units)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AggregationResult":
        return cls(
            tx_count=int(data["tx_count"]),
            total_fee_units=int(data["total_fee_units"]),
            total_fee_display=str(data["total_fee_display"]),
            avg_fee_display=str(data["avg_fee_display"]),
            monthly_avg_fee_display=data.get("monthly_avg_fee_display"),
            latest_timestamp_ms=data.get("latest_timestamp_ms"),
            earliest_timestamp_ms=data.get("earliest_timestamp_ms"),
        )


def record_fee_units(record) -> int:
    """gas_unit_price * max_gas_amount, or 0 when the header is missing or malformed"""
    header = record.get("header") if isinstance(record, dict) else None
    if not isinstance(header, dict):
        return 0

    try:
        price = parse_int(header.get("gas_unit_price", 0), "gas_unit_price")
        max_gas = parse_int(header.get("max_gas_amount", 0), "max_gas_amount")
    except ParseError as e:
        logger.debug(f"Treating fee as zero: {e}")
        return 0

    if price > 0 and max_gas > 0:
        return price * max_gas
    return 0


def month_count(earliest_ms: int | None, latest_ms: int | None) -> int:
    """Whole 30-day months spanned by the history, at least 1"""
    if earliest_ms is None or latest_ms is None or latest_ms <= earliest_ms:
        return 1
    return max(1, round_half_up((latest_ms - earliest_ms) / MONTH_MS))


class FeeAggregator:
    def __init__(self, decimals: int = SUPRA_DECIMALS, display_decimals: int = DISPLAY_DECIMALS):
        self.decimals = decimals
        self.display_decimals = display_decimals
        self.tx_count = 0
        self.total_fee_units = 0
        self.earliest_ms: int | None = None
        self.latest_ms: int | None = None

    def add_record(self, record):
        self.tx_count += 1
        self.total_fee_units += record_fee_units(record)

        ts = extract_timestamp_ms(record) if isinstance(record, dict) else None
        if ts is None:
            return
        if self.earliest_ms is None or ts < self.earliest_ms:
            self.earliest_ms = ts
        if self.latest_ms is None or ts > self.latest_ms:
            self.latest_ms = ts

    def add_page(self, page: Page):
        for record in page.records:
            self.add_record(record)

    def _format(self, units: int) -> str:
        return format_units(units, self.decimals, self.display_decimals)

    def result(self) -> AggregationResult:
        """Derive averages from the running totals (integer division only)"""
        total = self.total_fee_units
        total_display = self._format(total)
        avg_display = self._format(0)
        monthly_display = None

        if total > 0:
            if self.tx_count > 0:
                avg_display = self._format(total // self.tx_count)
            months = month_count(self.earliest_ms, self.latest_ms)
            if months >= 2:
                monthly_display = self._format(total // months)

        return AggregationResult(
            tx_count=self.tx_count,
            total_fee_units=total,
            total_fee_display=total_display,
            avg_fee_display=avg_display,
            monthly_avg_fee_display=monthly_display,
            latest_timestamp_ms=self.latest_ms,
            earliest_timestamp_ms=self.earliest_ms,
        )


def aggregate(pages: Iterable[Page]) -> AggregationResult:
    aggregator = FeeAggregator()
    for page in pages:
        aggregator.add_page(page)
    return aggregator.result()


async def aggregate_stream(pages: AsyncIterable[Page]) -> AggregationResult:
    """Aggregate pages as they arrive, without holding the whole history"""
    aggregator = FeeAggregator()
    async for page in pages:
        aggregator.add_page(page)
    return aggregator.result()
