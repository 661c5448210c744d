"""Currency formatting and parsing for display and CLI input.

Brazilian conventions: ``.`` groups thousands and ``,`` marks decimals,
e.g. ``R$ 123.456,78``.
"""

import re

from portfolio_rebalancer.domain.models import Currency

_AMOUNT_RE = re.compile(r"^\d{1,3}(\.\d{3})*(,\d+)?$|^\d+(,\d+)?$")


def _group_thousands(value: float, decimals: int) -> str:
    # en-US grouping, then swap separators
    text = f"{value:,.{decimals}f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value: float, currency: Currency = Currency.BRL) -> str:
    """``1234.5`` -> ``R$ 1.234,50``; negatives as ``-R$ 10,00``."""
    sign = "-" if value < 0 and round(abs(value), 2) != 0 else ""
    return f"{sign}{currency.symbol} {_group_thousands(abs(value), 2)}"


def format_percent(weight: float, decimals: int = 1) -> str:
    """``0.125`` -> ``12,5%``."""
    return f"{_group_thousands(weight * 100, decimals)}%"


def parse_currency(text: str) -> float:
    """Parse a Brazilian-formatted amount such as ``"R$ 123.456,78"``.

    Raises:
        ValueError: if ``text`` is not a non-negative amount.
    """
    cleaned = text.strip()
    for currency in Currency:
        cleaned = cleaned.removeprefix(currency.symbol)
    cleaned = cleaned.strip()

    if not _AMOUNT_RE.match(cleaned):
        raise ValueError(f"not a valid amount: {text!r}")

    return float(cleaned.replace(".", "").replace(",", "."))
