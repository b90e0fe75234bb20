"""Supra RPC + price API client - async aiohttp version"""

import asyncio
from datetime import datetime
from urllib.parse import quote

import aiohttp

from gas_tracker.core.config import (
    ATMOS_SWAP_ADDRESS,
    COINGECKO_API_URL,
    CONNECTION_TIMEOUT,
    MAX_CONNECTIONS,
    REQUEST_RETRY_ATTEMPTS,
    SUPRA_COINSTORE_TYPE,
    SUPRA_RPC_URL,
    SUPRAWR_TOKEN_ADDRESS,
)
from gas_tracker.core.errors import NetworkError, ParseError, ShapeError
from gas_tracker.core.logger import logger

PRICE_CACHE_TTL = 30


def parse_int(value, field: str = "value") -> int:
    """Parse an arbitrary-precision integer from a JSON number or decimal string"""
    if isinstance(value, bool):
        raise ParseError(f"{field}: boolean is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ParseError(f"{field}: {value!r} is not integral")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as e:
            raise ParseError(f"{field}: {value!r} is not an integer") from e
    raise ParseError(f"{field}: unsupported type {type(value).__name__}")


def extract_coinstore_balance(resource) -> int:
    """Raw SUPRA balance from a CoinStore resource payload (0 when absent)"""
    if not isinstance(resource, dict):
        return 0
    type_str = str(resource.get("type", ""))
    if "0x1::coin::CoinStore" not in type_str or "supra" not in type_str.lower():
        return 0

    data = resource.get("data") or {}
    coin = data.get("coin") or (data.get("fields") or {}).get("coin") or {}
    raw = coin.get("value", coin.get("amount"))
    if raw is None:
        return 0
    try:
        return parse_int(raw, "coin.value")
    except ParseError as e:
        logger.debug(f"Unreadable CoinStore balance: {e}")
        return 0


def extract_view_u64(data) -> int:
    """
    Numeric value from a Move view response.

    Supra answers {"result": [{"U64": "12345"}]} or {"result": ["12345"]}.
    """
    if not isinstance(data, dict):
        return 0
    result = data.get("result")
    if not isinstance(result, list) or not result:
        return 0

    first = result[0]
    try:
        if isinstance(first, (str, int)) and not isinstance(first, bool):
            return parse_int(first, "result[0]")
        if isinstance(first, dict):
            for key, value in first.items():
                if key.upper() in ("U8", "U16", "U32", "U64", "U128"):
                    return parse_int(value, key)
    except ParseError as e:
        logger.debug(f"Unreadable view result: {e}")
    return 0


class SupraAPI:
    def __init__(self, rpc_url: str = SUPRA_RPC_URL, price_url: str = COINGECKO_API_URL):
        self.rpc_url = rpc_url.rstrip("/")
        self.price_url = price_url.rstrip("/")
        self.session: aiohttp.ClientSession | None = None
        self._cache = {}
        self._cache_times = {}
        self.retry_base_delay = 1

    async def __aenter__(self):
        connector = aiohttp.TCPConnector(limit=MAX_CONNECTIONS, ttl_dns_cache=300)
        timeout = aiohttp.ClientTimeout(total=CONNECTION_TIMEOUT)

        self.session = aiohttp.ClientSession(
            connector=connector, timeout=timeout, raise_for_status=False
        )
        logger.debug(f"API session created with {MAX_CONNECTIONS} max connections")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None
            logger.debug("API session closed")

    def _get_cache(self, key: str):
        """Get cached data if still valid"""
        if key in self._cache:
            cache_time = self._cache_times.get(key)
            if cache_time and (datetime.now() - cache_time).total_seconds() < PRICE_CACHE_TTL:
                logger.debug(f"Cache hit: {key}")
                return self._cache[key]
        return None

    def _set_cache(self, key: str, data):
        """Cache data with timestamp"""
        self._cache[key] = data
        self._cache_times[key] = datetime.now()

    async def _request_with_retry(
        self, method: str, url: str, params: dict | None = None, json: dict | None = None
    ):
        """Make request with exponential backoff retry on 429 and transport errors"""
        if self.session is None:
            raise RuntimeError("SupraAPI must be used as an async context manager")

        last_status = None
        for attempt in range(REQUEST_RETRY_ATTEMPTS):
            try:
                async with self.session.request(
                    method, url, params=params, json=json
                ) as response:
                    last_status = response.status
                    if 200 <= response.status < 300:
                        try:
                            return await response.json(content_type=None)
                        except ValueError as e:
                            raise ShapeError(f"Invalid JSON from {url}: {e}") from e
                    if response.status == 429:
                        wait_time = self.retry_base_delay * 2**attempt
                        logger.warning(f"Rate limited, waiting {wait_time}s...")
                        await asyncio.sleep(wait_time)
                        continue
                    raise NetworkError(
                        f"RPC error {response.status} from {url}", status=response.status
                    )
            except asyncio.TimeoutError:
                logger.warning(f"Timeout on attempt {attempt + 1}/{REQUEST_RETRY_ATTEMPTS}")
                if attempt < REQUEST_RETRY_ATTEMPTS - 1:
                    await asyncio.sleep(self.retry_base_delay * 2**attempt)
            except aiohttp.ClientError as e:
                logger.error(f"Request error: {e}")
                if attempt < REQUEST_RETRY_ATTEMPTS - 1:
                    await asyncio.sleep(self.retry_base_delay * 2**attempt)

        raise NetworkError(
            f"Failed after {REQUEST_RETRY_ATTEMPTS} attempts: {url}", status=last_status
        )

    async def fetch_coin_transactions(self, address: str, count: int, start) -> dict:
        """Fetch one page of an account's coin transactions (never cached)"""
        url = f"{self.rpc_url}/rpc/v2/accounts/{address}/coin_transactions"
        params = {"count": str(count), "start": str(start)}
        return await self._request_with_retry("GET", url, params=params)

    async def fetch_supra_balance(self, address: str) -> int:
        """Raw native SUPRA balance (8 decimals) from the account's CoinStore"""
        url = (
            f"{self.rpc_url}/rpc/v2/accounts/{address}/resources/"
            f"{quote(SUPRA_COINSTORE_TYPE, safe='')}"
        )
        resource = await self._request_with_retry("GET", url)
        return extract_coinstore_balance(resource)

    async def fetch_suprawr_balance(self, address: str) -> int:
        """Raw SUPRAWR balance via the Atmos Pump get_user_balance view"""
        url = f"{self.rpc_url}/rpc/v2/view"
        body = {
            "function": f"{ATMOS_SWAP_ADDRESS}::atmos_pump::get_user_balance",
            "type_arguments": [],
            "arguments": [address.strip(), SUPRAWR_TOKEN_ADDRESS],
        }
        data = await self._request_with_retry("POST", url, json=body)
        return extract_view_u64(data)

    async def fetch_supra_price(self) -> float | None:
        """SUPRA/USD price from CoinGecko, cached for 30s"""
        cache_key = "supra_price"
        cached = self._get_cache(cache_key)
        if cached is not None:
            return cached

        url = f"{self.price_url}/simple/price"
        data = await self._request_with_retry(
            "GET", url, params={"ids": "supra", "vs_currencies": "usd"}
        )
        supra = data.get("supra") if isinstance(data, dict) else None
        price = supra.get("usd") if isinstance(supra, dict) else None
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            logger.warning(f"Unexpected CoinGecko SUPRA payload: {data}")
            return None

        self._set_cache(cache_key, float(price))
        return float(price)
