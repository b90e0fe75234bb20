"""Best-effort timestamp extraction from ledger records"""

import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from gas_tracker.core.logger import logger

# Values below this are seconds, at or above it milliseconds
MS_THRESHOLD = 1e12

HEADER_KEYS = ("header", "block_header", "meta")
HEADER_TIMESTAMP_FIELDS = (
    "timestamp",
    "time",
    "block_timestamp",
    "block_timestamp_ms",
    "commit_timestamp",
)
RECORD_TIMESTAMP_FIELDS = ("timestamp", "time", "block_time")


def _number_to_ms(num: float) -> int | None:
    if not math.isfinite(num) or num <= 0:
        return None
    return int(num * 1000) if num < MS_THRESHOLD else int(num)


def _parse_datetime_string(value: str) -> int | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def parse_timestamp_value(value) -> int | None:
    """
    Convert a single candidate value to epoch milliseconds.

    Numbers (and numeric strings) below 10^12 are seconds, otherwise
    milliseconds. Other strings are tried as ISO-8601 or RFC-2822 dates.
    Returns None when the value cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return _number_to_ms(float(value))

    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        try:
            return _number_to_ms(float(trimmed))
        except ValueError:
            pass
        return _parse_datetime_string(trimmed)

    return None


def _header_of(record: dict) -> dict:
    for key in HEADER_KEYS:
        header = record.get(key)
        if isinstance(header, dict):
            return header
    return {}


def extract_timestamp_ms(record: dict | None) -> int | None:
    """Return the record's timestamp in ms, or None if no field parses"""
    if not isinstance(record, dict):
        return None

    header = _header_of(record)

    candidates = [header.get(field) for field in HEADER_TIMESTAMP_FIELDS]
    candidates += [record.get(field) for field in RECORD_TIMESTAMP_FIELDS]
    for candidate in candidates:
        parsed = parse_timestamp_value(candidate)
        if parsed is not None:
            return parsed

    # Unknown schema: any shallow key mentioning "time"
    for obj in (header, record):
        for key, value in obj.items():
            if "time" in str(key).lower():
                parsed = parse_timestamp_value(value)
                if parsed is not None:
                    return parsed

    logger.debug(f"No parseable timestamp in record {record.get('hash', '<no hash>')}")
    return None
