"""Click CLI entrypoint with Rich terminal output."""

import asyncio
import sys
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from portfolio_rebalancer.config import Settings, get_settings
from portfolio_rebalancer.domain.models import PortfolioConfig, PriceResult, TradePlan
from portfolio_rebalancer.domain.ports import PriceProvider
from portfolio_rebalancer.formatting import format_currency, format_percent, parse_currency
from portfolio_rebalancer.logging import setup_logging
from portfolio_rebalancer.portfolio.loader import PortfolioConfigError, load_portfolio
from portfolio_rebalancer.prices.yahoo import YahooFinanceClient
from portfolio_rebalancer.rebalancing.engine import build_rebalance_input, calculate_rebalance

console = Console()

_file_option = click.option(
    "--file",
    "portfolio_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Portfolio file (defaults to PORTFOLIO_FILE setting)",
)


@click.group()
@click.option("--log-level", default=None, help="Override log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Portfolio Rebalancer - priority-weighted whole-share trade planning."""
    settings = get_settings()
    setup_logging(settings, cli_log_level=log_level)
    ctx.obj = settings


@cli.command()
@click.argument("cash", required=False)
@_file_option
@click.option("--allow-sell", is_flag=True, help="Allow selling overweight assets")
@click.option("--no-sell", is_flag=True, help="Never sell, even if the portfolio file allows it")
@click.option("--watch", is_flag=True, help="Keep running: r refreshes, q quits")
@click.pass_obj
def plan(
    settings: Settings,
    cash: str | None,
    portfolio_file: Path | None,
    allow_sell: bool,
    no_sell: bool,
    watch: bool,
) -> None:
    """Compute the trades that move the portfolio toward its targets.

    CASH is the amount available to invest, e.g. "27.000,00". When it is
    omitted it is asked for on an interactive terminal, and otherwise taken
    from the portfolio file's balance.
    """
    if allow_sell and no_sell:
        raise click.UsageError("--allow-sell and --no-sell are mutually exclusive")

    available_cash = None
    if cash is not None:
        try:
            available_cash = parse_currency(cash)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="CASH") from e

    sell_override = True if allow_sell else False if no_sell else None
    path = portfolio_file or settings.portfolio_file

    portfolio = _load_or_exit(path)
    if available_cash is None and _stdin_is_interactive():
        available_cash = _prompt_cash(portfolio)

    _show_plan(settings, portfolio, available_cash=available_cash, allow_sell=sell_override)

    while watch and _ask_refresh():
        try:
            portfolio = load_portfolio(path)
        except PortfolioConfigError as e:
            console.print(f"[bold red]Failed to load portfolio:[/bold red] {e}")
            continue
        _show_plan(settings, portfolio, available_cash=available_cash, allow_sell=sell_override)


@cli.command()
@_file_option
@click.pass_obj
def prices(settings: Settings, portfolio_file: Path | None) -> None:
    """Fetch and show current prices for every configured asset."""
    portfolio = _load_or_exit(portfolio_file or settings.portfolio_file)
    fetched = _fetch_prices(settings, portfolio.tickers)

    table = Table(title="Prices", show_header=True, header_style="bold cyan")
    table.add_column("Ticker")
    table.add_column("Price", justify="right")

    for ticker in portfolio.tickers:
        price = fetched.get(ticker, 0.0)
        if price > 0:
            table.add_row(ticker, format_currency(price, portfolio.currency))
        else:
            table.add_row(ticker, Text("unavailable", style="red"))

    console.print(table)


@cli.command()
@_file_option
@click.pass_obj
def config(settings: Settings, portfolio_file: Path | None) -> None:
    """Show current configuration."""
    _print_config(settings)
    portfolio = _load_or_exit(portfolio_file or settings.portfolio_file)
    _print_info(portfolio, allow_sell=portfolio.allow_sell)
    _print_assets(portfolio)


# ── Helpers ─────────────────────────────────────────────────────


def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def _positive_amount(text: str) -> float:
    try:
        amount = parse_currency(text)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    if amount <= 0:
        raise click.BadParameter("amount must be greater than zero")
    return amount


def _prompt_cash(portfolio: PortfolioConfig) -> float:
    """Ask for the cash to invest until a positive amount is entered."""
    default = None
    if portfolio.balance > 0:
        default = format_currency(portfolio.balance, portfolio.currency)
    return click.prompt("Cash to invest", default=default, value_proc=_positive_amount)


def _ask_refresh() -> bool:
    choice = click.prompt(
        "r to refresh, q to quit",
        type=click.Choice(["r", "q"], case_sensitive=False),
        default="q",
        show_choices=False,
    )
    return choice.lower() == "r"


def _show_plan(
    settings: Settings,
    portfolio: PortfolioConfig,
    *,
    available_cash: float | None,
    allow_sell: bool | None,
) -> None:
    prices = _fetch_prices(settings, portfolio.tickers)

    data = build_rebalance_input(
        portfolio, prices, available_cash=available_cash, allow_sell=allow_sell
    )
    trade_plan = calculate_rebalance(data)

    _print_info(portfolio, allow_sell=data.allow_sell)
    _print_plan(portfolio, trade_plan)
    _print_summary(portfolio, trade_plan)
    _print_warnings(prices, trade_plan)


def _load_or_exit(path: Path) -> PortfolioConfig:
    try:
        return load_portfolio(path)
    except PortfolioConfigError as e:
        console.print(f"[bold red]Failed to load portfolio:[/bold red] {e}")
        raise SystemExit(1) from e


def _fetch_prices(settings: Settings, tickers: list[str]) -> dict[str, float]:
    async def _fetch() -> dict[str, float]:
        with console.status(f"Fetching {len(tickers)} prices...") as status:

            def _progress(completed: int, total: int, result: PriceResult) -> None:
                status.update(f"Fetching prices... {completed}/{total} ({result.ticker})")

            provider: PriceProvider = YahooFinanceClient(
                base_url=settings.yahoo_base_url,
                ticker_suffix=settings.yahoo_ticker_suffix,
                timeout=settings.price_timeout_seconds,
                retries=settings.price_fetch_retries,
            )
            try:
                return await provider.fetch_all_prices(tickers, on_progress=_progress)
            finally:
                await provider.close()

    return asyncio.run(_fetch())


# ── Display helpers ─────────────────────────────────────────────


def _print_config(settings: Settings) -> None:
    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Portfolio File", str(settings.portfolio_file))
    table.add_row("Price Source", settings.yahoo_base_url)
    table.add_row("Ticker Suffix", settings.yahoo_ticker_suffix or "[dim]none[/dim]")
    table.add_row("Price Timeout", f"{settings.price_timeout_seconds:g} s")
    table.add_row("Price Retries", str(settings.price_fetch_retries))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Directory", str(settings.log_dir))
    table.add_row("Log File Stem", settings.log_file_stem)

    console.print(table)


def _print_info(portfolio: PortfolioConfig, *, allow_sell: bool) -> None:
    sell_status = (
        "[green]Enabled[/green] - sell recommendations shown"
        if allow_sell
        else "[yellow]Disabled[/yellow] - buy recommendations only"
    )
    console.print(
        Panel(
            f"Allow Sell: {sell_status}\n"
            f"Currency:   {portfolio.currency.label}\n"
            f"Assets:     {len(portfolio.assets)} configured",
            title="Portfolio Rebalancer",
            border_style="cyan",
        )
    )


def _print_assets(portfolio: PortfolioConfig) -> None:
    table = Table(title="Assets", show_header=True, header_style="bold cyan")
    table.add_column("Ticker")
    table.add_column("Priority", justify="right")
    table.add_column("Qty", justify="right")

    for asset in portfolio.assets:
        table.add_row(asset.ticker, str(asset.priority), str(asset.quantity))

    console.print(table)
    console.print(f"Cash balance: {format_currency(portfolio.balance, portfolio.currency)}")


def _print_plan(portfolio: PortfolioConfig, trade_plan: TradePlan) -> None:
    money = portfolio.currency

    table = Table(title="Rebalance Plan", show_header=True, header_style="bold cyan")
    table.add_column("Ticker")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Priority", justify="right")
    table.add_column("Target %", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Diff", justify="right")
    table.add_column("Trade", justify="right")
    table.add_column("Trade Qty", justify="right")

    quantities = {a.ticker: a.quantity for a in portfolio.assets}
    for t in trade_plan.assets:
        diff_style = "green" if t.difference > 0 else "yellow"
        if t.trade_amount > 0:
            style = "green"
        elif t.trade_amount < 0:
            style = "red"
        elif t.locked:
            style = "yellow"
        else:
            style = "dim"

        table.add_row(
            t.ticker,
            str(quantities.get(t.ticker, 0)),
            format_currency(t.price, money) if t.price > 0 else Text("n/a", style="red"),
            str(t.priority),
            format_percent(t.target_weight),
            format_currency(t.target_value, money),
            format_currency(t.current_value, money),
            Text(format_currency(t.difference, money), style=diff_style),
            Text(format_currency(t.trade_amount, money), style=style),
            Text(f"{t.trade_quantity:+d}" if t.trade_quantity else "0", style=style),
        )

    console.print(table)


def _print_summary(portfolio: PortfolioConfig, trade_plan: TradePlan) -> None:
    money = portfolio.currency
    lines = [
        f"Current Portfolio: {format_currency(trade_plan.total_current_value, money)}",
        f"Reference Total:   {format_currency(trade_plan.reference_total, money)}",
        f"Buy Budget:        {format_currency(trade_plan.buy_budget, money)}",
        f"Total Buys:        {format_currency(trade_plan.total_buys, money)}",
        f"Total Sells:       {format_currency(trade_plan.total_sells, money)}",
        f"Leftover Cash:     {format_currency(trade_plan.leftover_cash, money)}",
    ]
    console.print(Panel("\n".join(lines), title="Summary", border_style="cyan"))
    console.print(
        f"[dim]Prices from Yahoo Finance • {datetime.now():%Y-%m-%d %H:%M} • "
        f"{len(trade_plan.assets)} assets[/dim]"
    )


def _print_warnings(prices: dict[str, float], trade_plan: TradePlan) -> None:
    missing = [ticker for ticker, price in prices.items() if price <= 0]
    if missing:
        console.print(
            f"[yellow]No price for {', '.join(missing)} - these assets are not traded.[/yellow]"
        )
    if not trade_plan.converged:
        console.print(
            f"[yellow]Reference total did not converge after "
            f"{trade_plan.solver_iterations} rounds; using the last estimate.[/yellow]"
        )
    if trade_plan.overspent:
        console.print(
            "[bold red]Warning: total buys exceed the buy budget "
            f"({trade_plan.total_buys:.2f} > {trade_plan.buy_budget:.2f}).[/bold red]"
        )
