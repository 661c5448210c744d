"""Tests for configuration management."""

from pathlib import Path

from portfolio_rebalancer import config as config_module
from portfolio_rebalancer.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        settings = Settings(
            _env_file=None,  # Don't read .env in tests
        )
        assert settings.portfolio_file == Path("portfolio.json")
        assert settings.yahoo_ticker_suffix == ".SA"
        assert settings.price_fetch_retries == 2
        assert settings.price_timeout_seconds == 10.0
        assert settings.log_level == "INFO"
        assert settings.log_dir == Path("logs")
        assert settings.log_file_stem == "portfolio_rebalancer"
        assert settings.http_log_level == "WARNING"

    def test_custom_values(self):
        settings = Settings(
            _env_file=None,
            portfolio_file=Path("/tmp/other.json"),
            yahoo_ticker_suffix="",
            price_fetch_retries=0,
        )
        assert settings.portfolio_file == Path("/tmp/other.json")
        assert settings.yahoo_ticker_suffix == ""
        assert settings.price_fetch_retries == 0

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PORTFOLIO_FILE", "from-env.json")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)
        assert settings.portfolio_file == Path("from-env.json")
        assert settings.log_level == "DEBUG"

    def test_get_settings_is_cached(self, monkeypatch):
        monkeypatch.setattr(config_module, "_settings", None)
        assert get_settings() is get_settings()
