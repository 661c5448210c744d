"""Port interfaces (Protocols) that the application depends on.

Infrastructure adapters implement these protocols so that the CLI never
couples to a specific market-data source.
"""

from collections.abc import Callable
from typing import Protocol

from portfolio_rebalancer.domain.models import PriceResult

ProgressCallback = Callable[[int, int, PriceResult], None]


# ── Market Data ─────────────────────────────────────────────────


class PriceProvider(Protocol):
    """Abstraction over a quote source (e.g. Yahoo Finance)."""

    async def fetch_price(self, ticker: str) -> PriceResult: ...
    async def fetch_all_prices(
        self, tickers: list[str], on_progress: ProgressCallback | None = None
    ) -> dict[str, float]: ...
    async def close(self) -> None: ...
