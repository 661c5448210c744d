"""Sell proceeds and buy budget."""

from collections.abc import Iterable

from portfolio_rebalancer.domain.models import AssetState


def calculate_allowed_sell_proceeds(asset_states: Iterable[AssetState], allow_sell: bool) -> float:
    """Currency recoverable by selling every overweight asset down to its target.

    Always 0 when selling is disabled.
    """
    if not allow_sell:
        return 0.0
    return sum((abs(s.difference) for s in asset_states if s.difference < 0), 0.0)


def calculate_buy_budget(available_cash: float, allowed_sell_proceeds: float) -> float:
    return available_cash + allowed_sell_proceeds


def can_sell(asset_state: AssetState, allow_sell: bool) -> bool:
    """True for an overweight asset when selling is enabled."""
    return asset_state.difference < 0 and allow_sell
