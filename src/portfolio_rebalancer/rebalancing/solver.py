"""Reference-total fixed point.

The reference total is current holdings + cash + allowed sell proceeds. The
proceeds depend on which assets are overweight, which depends on the target
values, which depend on the reference total. We iterate until the total moves
by less than ``CONVERGENCE_TOLERANCE`` or ``MAX_SOLVER_ITERATIONS`` is hit.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from portfolio_rebalancer.domain.models import Asset, AssetState
from portfolio_rebalancer.rebalancing.budget import calculate_allowed_sell_proceeds

logger = logging.getLogger(__name__)

MAX_SOLVER_ITERATIONS = 10
CONVERGENCE_TOLERANCE = 0.01


@dataclass(frozen=True)
class ReferenceTotalResult:
    reference_total: float
    allowed_sell_proceeds: float
    asset_states: list[AssetState]
    iterations: int
    converged: bool


def calculate_total_current_value(assets: Sequence[Asset], prices: Mapping[str, float]) -> float:
    return sum((a.quantity * prices.get(a.ticker, 0.0) for a in assets), 0.0)


def calculate_asset_states(
    assets: Sequence[Asset],
    prices: Mapping[str, float],
    target_weights: Mapping[str, float],
    reference_total: float,
) -> list[AssetState]:
    """Measure every asset against ``reference_total``. Missing prices/weights count as 0."""
    states = []
    for asset in assets:
        price = prices.get(asset.ticker, 0.0)
        current_value = asset.quantity * price
        target_weight = target_weights.get(asset.ticker, 0.0)
        target_value = target_weight * reference_total
        states.append(
            AssetState(
                ticker=asset.ticker,
                current_value=current_value,
                target_value=target_value,
                target_weight=target_weight,
                difference=target_value - current_value,
                priority=asset.priority,
            )
        )
    return states


def solve_reference_total(
    assets: Sequence[Asset],
    prices: Mapping[str, float],
    target_weights: Mapping[str, float],
    available_cash: float,
    allow_sell: bool,
    *,
    total_current_value: float | None = None,
) -> ReferenceTotalResult:
    """Find T such that T = current + cash + proceeds(states measured against T).

    If the iteration cap is reached the last computed total is used and a
    warning is logged; ``converged`` on the result reports which case applied.
    """
    if total_current_value is None:
        total_current_value = calculate_total_current_value(assets, prices)

    base_total = total_current_value + available_cash
    reference_total = base_total
    allowed_sell_proceeds = 0.0
    converged = False
    iterations = 0

    for iterations in range(1, MAX_SOLVER_ITERATIONS + 1):
        states = calculate_asset_states(assets, prices, target_weights, reference_total)
        allowed_sell_proceeds = calculate_allowed_sell_proceeds(states, allow_sell)

        previous_total = reference_total
        reference_total = base_total + allowed_sell_proceeds
        logger.debug(
            "Solver round %d: reference total %.4f -> %.4f (sell proceeds %.4f)",
            iterations,
            previous_total,
            reference_total,
            allowed_sell_proceeds,
        )

        if abs(reference_total - previous_total) < CONVERGENCE_TOLERANCE:
            converged = True
            break

    if not converged:
        logger.warning(
            "Reference total did not converge within %d rounds; using %.2f",
            MAX_SOLVER_ITERATIONS,
            reference_total,
        )

    return ReferenceTotalResult(
        reference_total=reference_total,
        allowed_sell_proceeds=allowed_sell_proceeds,
        asset_states=calculate_asset_states(assets, prices, target_weights, reference_total),
        iterations=iterations,
        converged=converged,
    )
