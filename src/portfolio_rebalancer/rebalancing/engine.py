"""Rebalancing engine — turns holdings, prices and cash into a trade plan.

Pure and deterministic: the same input always yields the same plan, and the
caller's input is never mutated.
"""

import logging
from collections.abc import Mapping

from portfolio_rebalancer.domain.models import (
    AssetState,
    AssetTrade,
    PortfolioConfig,
    RebalanceInput,
    TradePlan,
)
from portfolio_rebalancer.rebalancing.allocator import allocate_buy_budget, plan_direct_trade
from portfolio_rebalancer.rebalancing.budget import calculate_buy_budget
from portfolio_rebalancer.rebalancing.solver import (
    calculate_total_current_value,
    solve_reference_total,
)
from portfolio_rebalancer.rebalancing.weights import calculate_target_weights

logger = logging.getLogger(__name__)


def build_rebalance_input(
    portfolio: PortfolioConfig,
    prices: Mapping[str, float],
    *,
    available_cash: float | None = None,
    allow_sell: bool | None = None,
) -> RebalanceInput:
    """Assemble engine input from the portfolio file, overriding cash/sell flag if given."""
    return RebalanceInput(
        assets=portfolio.assets,
        prices=dict(prices),
        target_weights=calculate_target_weights(portfolio.assets),
        available_cash=portfolio.balance if available_cash is None else available_cash,
        allow_sell=portfolio.allow_sell if allow_sell is None else allow_sell,
    )


def _to_trade(state: AssetState, price: float, amount: float, quantity: int) -> AssetTrade:
    return AssetTrade(
        ticker=state.ticker,
        trade_amount=amount,
        trade_quantity=quantity,
        current_value=state.current_value,
        target_value=state.target_value,
        target_weight=state.target_weight,
        difference=state.difference,
        priority=state.priority,
        price=price,
    )


def calculate_rebalance(data: RebalanceInput) -> TradePlan:
    """Compute the trade plan for ``data``."""
    prices = data.prices

    total_current_value = calculate_total_current_value(data.assets, prices)

    solved = solve_reference_total(
        data.assets,
        prices,
        data.target_weights,
        data.available_cash,
        data.allow_sell,
        total_current_value=total_current_value,
    )
    buy_budget = calculate_buy_budget(data.available_cash, solved.allowed_sell_proceeds)

    # Sells and holds are decided per asset; buys wait for the auction.
    underweight: list[AssetState] = []
    trades: list[AssetTrade | None] = []
    for state in solved.asset_states:
        if state.difference > 0:
            underweight.append(state)
            trades.append(None)
            continue
        price = prices.get(state.ticker, 0.0)
        direct = plan_direct_trade(state, price, data.allow_sell)
        trades.append(_to_trade(state, price, direct.trade_amount, direct.trade_quantity))

    bought = allocate_buy_budget(underweight, buy_budget, prices)

    for i, state in enumerate(solved.asset_states):
        if trades[i] is None:
            price = prices.get(state.ticker, 0.0)
            shares = bought.get(state.ticker, 0)
            trades[i] = _to_trade(state, price, shares * price, shares)

    asset_trades = [t for t in trades if t is not None]
    total_buys = sum((t.trade_amount for t in asset_trades if t.trade_amount > 0), 0.0)
    total_sells = sum((abs(t.trade_amount) for t in asset_trades if t.trade_amount < 0), 0.0)

    if total_buys > buy_budget:
        logger.warning("Total buys %.2f exceed the buy budget %.2f", total_buys, buy_budget)

    logger.info(
        "Rebalance plan: %d buys (%.2f), %d sells (%.2f), budget %.2f, reference total %.2f",
        sum(1 for t in asset_trades if t.trade_amount > 0),
        total_buys,
        sum(1 for t in asset_trades if t.trade_amount < 0),
        total_sells,
        buy_budget,
        solved.reference_total,
    )

    return TradePlan(
        assets=asset_trades,
        total_current_value=total_current_value,
        reference_total=solved.reference_total,
        buy_budget=buy_budget,
        total_buys=total_buys,
        total_sells=total_sells,
        solver_iterations=solved.iterations,
        converged=solved.converged,
    )
