"""Portfolio file loading.

The file is re-read on every call so edits show up on the next run/refresh.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from portfolio_rebalancer.domain.models import PortfolioConfig

logger = logging.getLogger(__name__)


class PortfolioConfigError(Exception):
    """The portfolio file is missing, unreadable or invalid."""


def parse_portfolio(raw: str, *, source: str = "<string>") -> PortfolioConfig:
    """Validate a JSON portfolio document."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PortfolioConfigError(f"{source}: invalid JSON ({e.msg} at line {e.lineno})") from e

    try:
        return PortfolioConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'root'}: {err['msg']}" for err in e.errors()
        )
        raise PortfolioConfigError(f"{source}: {problems}") from e


def load_portfolio(path: Path) -> PortfolioConfig:
    """Read and validate the portfolio file at ``path``."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise PortfolioConfigError(f"Portfolio file not found: {path}") from e
    except OSError as e:
        raise PortfolioConfigError(f"Cannot read portfolio file {path}: {e}") from e

    portfolio = parse_portfolio(raw, source=str(path))
    logger.debug(
        "Loaded portfolio from %s: %d assets, balance %.2f, allow_sell=%s",
        path,
        len(portfolio.assets),
        portfolio.balance,
        portfolio.allow_sell,
    )
    return portfolio
