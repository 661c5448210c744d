"""Tests for the domain models (validation and derived properties)."""

import pytest
from pydantic import ValidationError

from portfolio_rebalancer.domain.models import (
    Asset,
    AssetTrade,
    Currency,
    PortfolioConfig,
    TradePlan,
    TradeSide,
)


def _trade(ticker: str, amount: float, quantity: int, difference: float = 0.0) -> AssetTrade:
    return AssetTrade(
        ticker=ticker,
        trade_amount=amount,
        trade_quantity=quantity,
        current_value=100.0,
        target_value=100.0 + difference,
        target_weight=0.25,
        difference=difference,
        priority=1,
        price=10.0,
    )


class TestAsset:
    def test_valid_asset(self):
        a = Asset(ticker="KNCR11", priority=10, quantity=0)
        assert a.ticker == "KNCR11"
        assert a.priority == 10

    def test_negative_priority_rejected(self):
        with pytest.raises(ValidationError):
            Asset(ticker="AAA", priority=-1, quantity=0)

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Asset(ticker="AAA", priority=1, quantity=-5)

    def test_empty_ticker_rejected(self):
        with pytest.raises(ValidationError):
            Asset(ticker="", priority=1, quantity=0)

    def test_frozen(self):
        a = Asset(ticker="AAA", priority=1, quantity=0)
        with pytest.raises(ValidationError):
            a.quantity = 3


class TestPortfolioConfig:
    def test_from_dict(self):
        cfg = PortfolioConfig.model_validate(
            {
                "allow_sell": True,
                "currency": "brl",
                "balance": 27000,
                "assets": [{"ticker": "AAA", "priority": 1, "quantity": 2}],
            }
        )
        assert cfg.allow_sell is True
        assert cfg.currency == Currency.BRL
        assert cfg.tickers == ["AAA"]
        assert cfg.portfolio_value is None

    def test_duplicate_tickers_rejected(self):
        with pytest.raises(ValidationError, match="duplicate ticker"):
            PortfolioConfig(
                assets=[
                    Asset(ticker="AAA", priority=1, quantity=0),
                    Asset(ticker="AAA", priority=2, quantity=0),
                ]
            )

    def test_empty_assets_rejected(self):
        with pytest.raises(ValidationError):
            PortfolioConfig(assets=[])

    def test_negative_balance_rejected(self):
        with pytest.raises(ValidationError):
            PortfolioConfig(balance=-1, assets=[Asset(ticker="AAA", priority=1, quantity=0)])

    def test_unknown_currency_rejected(self):
        with pytest.raises(ValidationError):
            PortfolioConfig.model_validate(
                {"currency": "usd", "assets": [{"ticker": "AAA", "priority": 1, "quantity": 0}]}
            )

    def test_currency_display(self):
        assert Currency.BRL.symbol == "R$"
        assert Currency.BRL.label == "BRL (Brazilian Real)"


class TestTradePlan:
    def test_side(self):
        assert _trade("A", 50.0, 5).side == TradeSide.BUY
        assert _trade("B", -35.0, -3).side == TradeSide.SELL
        assert _trade("C", 0.0, 0).side == TradeSide.HOLD

    def test_locked(self):
        assert _trade("A", 0.0, 0, difference=-20.0).locked
        assert not _trade("A", -20.0, -2, difference=-20.0).locked
        assert not _trade("A", 0.0, 0, difference=20.0).locked

    def test_partitions(self):
        plan = TradePlan(
            assets=[_trade("A", 50.0, 5), _trade("B", -35.0, -3), _trade("C", 0.0, 0)],
            buy_budget=60.0,
            total_buys=50.0,
            total_sells=35.0,
        )
        assert [t.ticker for t in plan.buys] == ["A"]
        assert [t.ticker for t in plan.sells] == ["B"]
        assert [t.ticker for t in plan.holds] == ["C"]
        assert plan.leftover_cash == 10.0
        assert not plan.overspent

    def test_overspent(self):
        plan = TradePlan(buy_budget=100.0, total_buys=110.0)
        assert plan.overspent
