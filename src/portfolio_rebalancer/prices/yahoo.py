"""Yahoo Finance chart API client for last-traded prices."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from portfolio_rebalancer.domain.models import PriceResult
from portfolio_rebalancer.domain.ports import ProgressCallback

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
_HEADERS = {"User-Agent": "Mozilla/5.0"}


class YahooFinanceClient:
    """Fetches regular-market prices from Yahoo Finance.

    Implements the PriceProvider protocol. Failures never raise: a ticker whose
    price cannot be fetched comes back with ``price=0`` and ``success=False``.
    """

    def __init__(
        self,
        *,
        base_url: str = _DEFAULT_BASE_URL,
        ticker_suffix: str = ".SA",
        timeout: float = 10.0,
        retries: int = 2,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._suffix = ticker_suffix
        self._retries = retries
        self._http = http or httpx.AsyncClient(timeout=timeout, headers=_HEADERS)

    async def __aenter__(self) -> YahooFinanceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _url(self, ticker: str) -> str:
        return f"{self._base_url}/{ticker}{self._suffix}"

    @staticmethod
    def _extract_price(body: Any) -> float:
        """Pull ``chart.result[0].meta.regularMarketPrice`` out of the response."""
        try:
            price = body["chart"]["result"][0]["meta"]["regularMarketPrice"]
            return float(price or 0)
        except (KeyError, IndexError, TypeError, ValueError):
            return 0.0

    async def fetch_price(self, ticker: str) -> PriceResult:
        """Fetch the latest price for a single ticker."""
        params = {"interval": "1d", "range": "1d"}

        for attempt in range(self._retries + 1):
            try:
                response = await self._http.get(self._url(ticker), params=params)
                response.raise_for_status()
                price = self._extract_price(response.json())
                if price <= 0:
                    logger.warning("No price in Yahoo response for %s", ticker)
                return PriceResult(ticker=ticker, price=max(price, 0.0), success=price > 0)
            except httpx.HTTPStatusError as e:
                logger.warning(
                    "Yahoo API error for %s (attempt %d/%d): %s",
                    ticker,
                    attempt + 1,
                    self._retries + 1,
                    e.response.status_code,
                )
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(
                    "Price fetch failed for %s (attempt %d/%d): %s",
                    ticker,
                    attempt + 1,
                    self._retries + 1,
                    e,
                )

        return PriceResult(ticker=ticker, price=0.0, success=False)

    async def fetch_all_prices(
        self, tickers: list[str], on_progress: ProgressCallback | None = None
    ) -> dict[str, float]:
        """Fetch every ticker concurrently. Failed tickers map to 0."""
        total = len(tickers)
        completed = 0

        async def _fetch(ticker: str) -> PriceResult:
            nonlocal completed
            result = await self.fetch_price(ticker)
            completed += 1
            if on_progress is not None:
                on_progress(completed, total, result)
            return result

        results = await asyncio.gather(*(_fetch(t) for t in tickers))
        prices = {r.ticker: r.price for r in results}

        failed = [r.ticker for r in results if not r.success]
        if failed:
            logger.warning("Could not fetch prices for: %s", ", ".join(failed))
        logger.info("Fetched %d/%d prices", total - len(failed), total)
        return prices

    async def close(self) -> None:
        await self._http.aclose()
