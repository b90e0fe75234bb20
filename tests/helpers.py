"""Fakes shared by the test modules: clock, ledger records and a scripted ledger client"""

from unittest.mock import AsyncMock, MagicMock


class FakeClock:
    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.ms = start_ms

    def now_ms(self) -> int:
        return self.ms

    def advance(self, ms: int):
        self.ms += ms


def make_record(price=2, max_gas=50, ts=None, **extra) -> dict:
    header = {"gas_unit_price": str(price), "max_gas_amount": str(max_gas)}
    if ts is not None:
        header["timestamp"] = ts
    return {"header": header, **extra}


def make_ledger(payloads) -> MagicMock:
    """Ledger client returning the given payloads in order, one per page request"""
    client = MagicMock()
    client.fetch_coin_transactions = AsyncMock(side_effect=list(payloads))
    return client
