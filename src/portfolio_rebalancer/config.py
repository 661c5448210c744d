"""Application configuration via Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All application settings, loaded from .env or environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Portfolio ───────────────────────────────────────────────
    portfolio_file: Path = Field(
        default=Path("portfolio.json"), description="Portfolio definition (assets, cash, flags)"
    )

    # ── Yahoo Finance ───────────────────────────────────────────
    yahoo_base_url: str = Field(
        default="https://query1.finance.yahoo.com/v8/finance/chart",
        description="Yahoo Finance chart endpoint",
    )
    yahoo_ticker_suffix: str = Field(
        default=".SA", description="Exchange suffix appended to every ticker (B3 by default)"
    )
    price_timeout_seconds: float = Field(default=10.0, description="Per-request timeout")
    price_fetch_retries: int = Field(
        default=2, ge=0, description="Extra attempts for a failed price request"
    )

    # ── Logging ─────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Console logging level")
    log_file_level: str = Field(default="DEBUG", description="JSON log file level")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")
    log_max_bytes: int = Field(default=5 * 1024 * 1024, description="Rotate log files at this size")
    log_backup_count: int = Field(default=3, description="Rotated log files to keep")
    log_file_stem: str = Field(
        default="portfolio_rebalancer",
        min_length=1,
        description="Log file name stem: <stem>.log, <stem>.error.log, <stem>.plan.log",
    )
    http_log_level: str = Field(
        default="WARNING", description="Level for the httpx and httpcore loggers"
    )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the cached settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
