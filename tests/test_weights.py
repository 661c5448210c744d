"""Tests for target-weight calculation."""

import pytest

from portfolio_rebalancer.domain.models import Asset
from portfolio_rebalancer.rebalancing.weights import calculate_target_weights


class TestTargetWeights:
    def test_proportional_to_priority(self):
        weights = calculate_target_weights(
            [
                Asset(ticker="AAA", priority=1, quantity=0),
                Asset(ticker="BBB", priority=3, quantity=10),
            ]
        )
        assert weights == {"AAA": 0.25, "BBB": 0.75}

    def test_zero_priority_asset_gets_zero_weight(self):
        weights = calculate_target_weights(
            [
                Asset(ticker="AAA", priority=0, quantity=5),
                Asset(ticker="BBB", priority=2, quantity=0),
            ]
        )
        assert weights["AAA"] == 0
        assert weights["BBB"] == 1

    def test_equal_split_when_all_priorities_zero(self):
        assets = [Asset(ticker=t, priority=0, quantity=1) for t in ("A", "B", "C", "D")]
        weights = calculate_target_weights(assets)
        assert weights == {"A": 0.25, "B": 0.25, "C": 0.25, "D": 0.25}

    def test_weights_sum_to_one(self):
        assets = [
            Asset(ticker=f"T{i}", priority=p, quantity=0)
            for i, p in enumerate([3, 1, 1, 3, 8, 8, 10, 10])
        ]
        weights = calculate_target_weights(assets)
        assert sum(weights.values()) == pytest.approx(1.0, abs=1e-9)
        assert list(weights) == [a.ticker for a in assets]

    def test_empty_asset_list_has_no_weights(self):
        assert calculate_target_weights([]) == {}
