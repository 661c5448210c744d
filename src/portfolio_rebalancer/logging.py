"""Logging setup: Rich console, rotating JSON files and a plan-warnings file."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter  # type: ignore[import-untyped]
from rich.console import Console
from rich.logging import RichHandler

from portfolio_rebalancer.config import Settings

console = Console()

# Loggers whose WARNINGs describe a questionable plan rather than a failure
PLAN_LOGGER = "portfolio_rebalancer.rebalancing"

# Per-request INFO lines from the HTTP stack drown out the plan summary
HTTP_LOGGERS = ("httpx", "httpcore")

_JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s %(funcName)s %(lineno)d"


def log_files(settings: Settings) -> dict[str, Path]:
    """Paths of the JSON log files, named after ``settings.log_file_stem``."""
    stem = settings.log_file_stem
    return {
        "all": settings.log_dir / f"{stem}.log",
        "errors": settings.log_dir / f"{stem}.error.log",
        "plan": settings.log_dir / f"{stem}.plan.log",
    }


def _json_file_handler(path: Path, level: int | str, settings: Settings) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        JsonFormatter(_JSON_FORMAT, rename_fields={"asctime": "timestamp", "levelname": "level"})
    )
    return handler


def _reset(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler):
            handler.close()
    logger.handlers.clear()


def setup_logging(settings: Settings, *, cli_log_level: str | None = None) -> None:
    """Configure console and file logging from ``settings``.

    The root logger gets a Rich console handler (``log_level``, or
    ``cli_log_level`` when given), a JSON file of everything at
    ``log_file_level`` and a JSON file of errors. Rebalancing warnings, such as
    a reference total that did not converge or buys over budget, also go to
    their own JSON file so a run's doubtful plans can be reviewed later.
    Calling this again replaces the handlers instead of adding to them.
    """
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    files = log_files(settings)

    console_level = (cli_log_level or settings.log_level).upper()

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)  # handlers filter by level
    _reset(root)

    console_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
    )
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root.addHandler(console_handler)
    root.addHandler(_json_file_handler(files["all"], settings.log_file_level.upper(), settings))
    root.addHandler(_json_file_handler(files["errors"], logging.ERROR, settings))

    plan_logger = logging.getLogger(PLAN_LOGGER)
    _reset(plan_logger)
    plan_logger.addHandler(_json_file_handler(files["plan"], logging.WARNING, settings))

    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(settings.http_log_level.upper())
