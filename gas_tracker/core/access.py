"""Wallet balances, SUPRAWR access requirement and holder rank"""

import asyncio
from dataclasses import dataclass

from gas_tracker.core.config import (
    REQUIRED_SUPRAWR_WHOLE,
    SUPRA_DECIMALS,
    SUPRAWR_DECIMALS,
)
from gas_tracker.core.errors import GasTrackerError
from gas_tracker.core.formatting import format_units
from gas_tracker.core.logger import logger
from gas_tracker.core.rank import HolderRank, classify_rank


@dataclass
class WalletStats:
    address: str
    supra_balance_raw: int
    suprawr_balance_raw: int
    supra_usd_price: float | None

    @property
    def supra_balance_display(self) -> str:
        return format_units(self.supra_balance_raw, SUPRA_DECIMALS, None)

    @property
    def suprawr_balance_display(self) -> str:
        return format_units(self.suprawr_balance_raw, SUPRAWR_DECIMALS)

    @property
    def meets_requirement(self) -> bool:
        return self.suprawr_balance_raw >= REQUIRED_SUPRAWR_WHOLE * 10**SUPRAWR_DECIMALS

    @property
    def rank(self) -> HolderRank | None:
        return classify_rank(self.suprawr_balance_display)


async def _soft(coro, what: str, default):
    try:
        return await coro
    except GasTrackerError as e:
        logger.warning(f"{what} lookup failed: {e}")
        return default


async def fetch_wallet_stats(api, address: str) -> WalletStats:
    """
    Gather balances and price concurrently.

    Lookups that fail fall back to a zero balance / missing price so the
    caller can still render the gas stats.
    """
    supra, suprawr, price = await asyncio.gather(
        _soft(api.fetch_supra_balance(address), "SUPRA balance", 0),
        _soft(api.fetch_suprawr_balance(address), "SUPRAWR balance", 0),
        _soft(api.fetch_supra_price(), "SUPRA price", None),
    )
    return WalletStats(
        address=address,
        supra_balance_raw=supra,
        suprawr_balance_raw=suprawr,
        supra_usd_price=price,
    )
