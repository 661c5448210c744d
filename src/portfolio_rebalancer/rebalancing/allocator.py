"""Trade allocation: direct sells for overweight assets, a whole-share auction for buys."""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from portfolio_rebalancer.domain.models import AssetState
from portfolio_rebalancer.rebalancing.budget import can_sell

logger = logging.getLogger(__name__)

MAX_BUY_ROUNDS = 10_000


@dataclass(frozen=True)
class DirectTrade:
    """Sell/hold decision for an asset that does not go through the buy auction."""

    trade_amount: float
    trade_quantity: int


def plan_direct_trade(state: AssetState, price: float, allow_sell: bool) -> DirectTrade:
    """Sell the full overweight amount when allowed; otherwise hold.

    Underweight assets also come back as a hold here; their buys are decided
    by :func:`allocate_buy_budget`.
    """
    if not can_sell(state, allow_sell):
        return DirectTrade(trade_amount=0.0, trade_quantity=0)

    trade_amount = -abs(state.difference)
    shares = math.floor(abs(trade_amount) / price) if price > 0 else 0
    return DirectTrade(trade_amount=trade_amount, trade_quantity=-shares)


def allocate_buy_budget(
    underweight: Sequence[AssetState],
    buy_budget: float,
    prices: Mapping[str, float],
) -> dict[str, int]:
    """Spend ``buy_budget`` one whole share at a time.

    Each round, the candidates that can still take a share (affordable, and
    the share fits inside their remaining gap to target) are scored by
    ``(priority / total qualifying priority) / price`` and the best one gets a
    share. Equal scores go to the candidate listed first.

    Returns shares bought per ticker (every candidate is present, possibly 0).
    """
    shares: dict[str, int] = {s.ticker: 0 for s in underweight}
    if not underweight or buy_budget <= 0:
        return shares

    remaining_budget = buy_budget

    for _ in range(MAX_BUY_ROUNDS):
        qualifying: list[tuple[AssetState, float]] = []
        for state in underweight:
            price = prices.get(state.ticker, 0.0)
            if price <= 0 or price > remaining_budget:
                continue
            remaining_gap = state.difference - shares[state.ticker] * price
            if remaining_gap >= price:
                qualifying.append((state, price))

        if not qualifying:
            break

        total_priority = sum(state.priority for state, _ in qualifying)

        def _score(candidate: tuple[AssetState, float]) -> float:
            state, price = candidate
            if total_priority > 0:
                return (state.priority / total_priority) / price
            return (1 / len(qualifying)) / price

        # max() keeps the first of equal scores
        winner, price = max(qualifying, key=_score)
        shares[winner.ticker] += 1
        remaining_budget -= price
    else:
        logger.warning("Buy auction stopped after %d rounds", MAX_BUY_ROUNDS)

    logger.debug(
        "Buy auction finished: %d shares, %.2f of %.2f unspent",
        sum(shares.values()),
        remaining_budget,
        buy_budget,
    )
    return shares
