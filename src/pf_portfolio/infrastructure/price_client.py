"""Market price lookups against the Yahoo Finance chart API.

One GET per symbol, run concurrently and bounded by a semaphore. A symbol
whose lookup fails for any reason is priced at 0; the batch never raises.
"""

import asyncio
import logging
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

import httpx

from config.settings import settings

logger = logging.getLogger(__name__)

_ZERO = Decimal(0)


class PriceProvider(Protocol):
    async def get_prices(self, symbols: Iterable[str]) -> dict[str, Decimal]: ...


def extract_price(payload: dict[str, Any]) -> Decimal | None:
    """regularMarketPrice, else previousClose, else the last non-null close."""
    try:
        result = payload["chart"]["result"][0]
    except (KeyError, IndexError, TypeError):
        return None
    meta = result.get("meta") or {}
    for key in ("regularMarketPrice", "previousClose"):
        if meta.get(key):
            return _to_decimal(meta[key])
    try:
        closes = result["indicators"]["quote"][0]["close"]
    except (KeyError, IndexError, TypeError):
        return None
    for close in reversed(closes or []):
        if close:
            return _to_decimal(close)
    return None


def _to_decimal(value: Any) -> Decimal | None:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


class YahooPriceProvider:
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str | None = None,
        suffix: str | None = None,
        timeout: float | None = None,
        concurrency: int | None = None,
    ) -> None:
        self._client = client
        self._base_url = (base_url or settings.PRICE_BASE_URL).rstrip("/")
        self._suffix = settings.PRICE_EXCHANGE_SUFFIX if suffix is None else suffix
        self._timeout = timeout or settings.PRICE_TIMEOUT_SECONDS
        self._semaphore = asyncio.Semaphore(concurrency or settings.PRICE_CONCURRENCY)

    async def get_prices(self, symbols: Iterable[str]) -> dict[str, Decimal]:
        unique = sorted(set(symbols))
        prices = await asyncio.gather(*(self._fetch(s) for s in unique))
        return dict(zip(unique, prices))

    async def _fetch(self, symbol: str) -> Decimal:
        url = f"{self._base_url}/{symbol}{self._suffix}"
        async with self._semaphore:
            try:
                response = await self._client.get(
                    url,
                    params={"interval": "1d", "range": "1d"},
                    timeout=self._timeout,
                )
                response.raise_for_status()
                price = extract_price(response.json())
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Price lookup for %s failed: %s", symbol, exc)
                return _ZERO
        if price is None:
            logger.warning("No price in chart response for %s", symbol)
            return _ZERO
        return price
