"""Domain models — portfolio config, per-asset rebalancing state, and the trade plan."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── Portfolio Input ────────────────────────────────────────────


class Currency(str, Enum):
    BRL = "brl"

    @property
    def symbol(self) -> str:
        return _CURRENCY_SYMBOLS[self]

    @property
    def label(self) -> str:
        return _CURRENCY_LABELS[self]


_CURRENCY_SYMBOLS: dict[Currency, str] = {Currency.BRL: "R$"}
_CURRENCY_LABELS: dict[Currency, str] = {Currency.BRL: "BRL (Brazilian Real)"}


class Asset(BaseModel):
    """A configured holding: how many shares we own and how much we want of it."""

    model_config = ConfigDict(frozen=True)

    ticker: str = Field(min_length=1, description="Unique ticker symbol")
    priority: int = Field(ge=0, description="Relative allocation weight")
    quantity: int = Field(ge=0, description="Shares currently held")


class PortfolioConfig(BaseModel):
    """Contents of the portfolio file."""

    allow_sell: bool = False
    currency: Currency = Currency.BRL
    portfolio_value: float | None = Field(
        default=None, description="Informational total portfolio value"
    )
    balance: float = Field(default=0.0, ge=0.0, description="Cash available to invest")
    assets: list[Asset] = Field(min_length=1)

    @field_validator("assets")
    @classmethod
    def _unique_tickers(cls, assets: list[Asset]) -> list[Asset]:
        seen: set[str] = set()
        for asset in assets:
            if asset.ticker in seen:
                raise ValueError(f"duplicate ticker: {asset.ticker}")
            seen.add(asset.ticker)
        return assets

    @property
    def tickers(self) -> list[str]:
        return [a.ticker for a in self.assets]


class PriceResult(BaseModel):
    """Outcome of a single price lookup. ``price`` is 0 when the lookup failed."""

    ticker: str
    price: float = 0.0
    success: bool = False


class RebalanceInput(BaseModel):
    """Everything the rebalancing engine needs, already resolved to plain data."""

    model_config = ConfigDict(frozen=True)

    assets: list[Asset]
    prices: dict[str, float] = Field(default_factory=dict)
    target_weights: dict[str, float] = Field(default_factory=dict)
    available_cash: float = Field(default=0.0, ge=0.0)
    allow_sell: bool = False


# ── Rebalancing State ──────────────────────────────────────────


class AssetState(BaseModel):
    """An asset measured against a reference total.

    ``difference`` is ``target_value - current_value``: positive means
    underweight, negative means overweight.
    """

    ticker: str
    current_value: float
    target_value: float
    target_weight: float
    difference: float
    priority: int


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class AssetTrade(BaseModel):
    """The executable trade for one asset, with its state carried for reporting."""

    ticker: str
    trade_amount: float = Field(description="Positive = buy, negative = sell, zero = hold")
    trade_quantity: int = Field(description="Signed whole-share count")
    current_value: float
    target_value: float
    target_weight: float
    difference: float
    priority: int
    price: float

    @property
    def side(self) -> TradeSide:
        if self.trade_amount > 0:
            return TradeSide.BUY
        if self.trade_amount < 0:
            return TradeSide.SELL
        return TradeSide.HOLD

    @property
    def locked(self) -> bool:
        """Overweight but not sold."""
        return self.difference < 0 and self.trade_amount == 0


class TradePlan(BaseModel):
    """Full rebalancing result, trades in input asset order."""

    assets: list[AssetTrade] = Field(default_factory=list)
    total_current_value: float = 0.0
    reference_total: float = 0.0
    buy_budget: float = 0.0
    total_buys: float = 0.0
    total_sells: float = 0.0
    solver_iterations: int = 0
    converged: bool = True

    @property
    def buys(self) -> list[AssetTrade]:
        return [t for t in self.assets if t.side == TradeSide.BUY]

    @property
    def sells(self) -> list[AssetTrade]:
        return [t for t in self.assets if t.side == TradeSide.SELL]

    @property
    def holds(self) -> list[AssetTrade]:
        return [t for t in self.assets if t.side == TradeSide.HOLD]

    @property
    def leftover_cash(self) -> float:
        return self.buy_budget - self.total_buys

    @property
    def overspent(self) -> bool:
        return self.total_buys > self.buy_budget
