"""Target weights from asset priorities."""

from collections.abc import Sequence

from portfolio_rebalancer.domain.models import Asset


def calculate_target_weights(assets: Sequence[Asset]) -> dict[str, float]:
    """Normalize priorities into weights that sum to 1.

    Falls back to an equal split when every priority is 0. An empty asset
    list has no weights.
    """
    if not assets:
        return {}

    total_priority = sum(a.priority for a in assets)

    if total_priority == 0:
        equal_weight = 1 / len(assets)
        return {a.ticker: equal_weight for a in assets}

    return {a.ticker: a.priority / total_priority for a in assets}
