"""
Configuration Management for nummi

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger, cache and rate code receive resolved paths and values as
arguments; only this module looks at the process environment.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nummi import PROG_NAME


ECB_RATES_URL = "https://www.ecb.europa.eu/stats/eurofxref/eurofxref.zip"


class ConfigurationError(Exception):
    """A required path or setting cannot be determined."""
    pass


class LedgerSettings(BaseSettings):
    """Ledger directory configuration."""

    model_config = SettingsConfigDict(
        env_prefix="NUMMI_",
        extra="ignore"
    )

    db_dir: Optional[Path] = Field(
        default=None,
        description="Ledger directory (default: $XDG_DATA_HOME/nummi/db)"
    )
    ledger_extension: str = Field(
        default=".txt",
        description="File extension of ledger files"
    )

    @field_validator('ledger_extension')
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Extensions are compared with the leading dot."""
        v = v.strip()
        if not v:
            raise ValueError("Ledger extension cannot be empty")
        return v if v.startswith(".") else f".{v}"


class CacheSettings(BaseSettings):
    """Currency rate cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="NUMMI_CACHE_",
        extra="ignore"
    )

    dir: Optional[Path] = Field(
        default=None,
        description="Cache directory (default: $XDG_CACHE_HOME/nummi)"
    )
    currencies_file: str = Field(
        default="currencies",
        description="Name of the rate cache file inside the cache directory"
    )
    max_age_hours: int = Field(
        default=24,
        ge=1,
        description="Age after which cached rates are refreshed"
    )

    @property
    def max_age_seconds(self) -> int:
        return self.max_age_hours * 60 * 60


class RatesSettings(BaseSettings):
    """Exchange rate source configuration."""

    model_config = SettingsConfigDict(
        env_prefix="NUMMI_RATES_",
        extra="ignore"
    )

    url: str = Field(
        default=ECB_RATES_URL,
        description="URL of the ECB reference rate archive"
    )
    csv_name: str = Field(
        default="eurofxref.csv",
        description="Name of the CSV member inside the archive"
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for the rate download"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="NUMMI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="warning",
        description="Minimum level of log records"
    )
    log_json: bool = Field(
        default=False,
        description="Render log records as JSON instead of console lines"
    )
    gnuplot_command: str = Field(
        default="gnuplot",
        description="Executable used to render plots"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.lower()
        if v not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError(f"Unknown log level: {v}")
        return v


def _xdg_dir(variable: str, fallback: str) -> Path:
    value = os.environ.get(variable)
    if value:
        return Path(value)
    home = os.environ.get("HOME")
    if not home:
        raise ConfigurationError(f"neither {variable} nor HOME is set")
    return Path(home) / fallback


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access and resolves the
    XDG directory conventions.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def cache(self) -> CacheSettings:
        return CacheSettings()

    @property
    def rates(self) -> RatesSettings:
        return RatesSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    def resolve_db_dir(self, override: Optional[Path] = None) -> Path:
        """
        Ledger directory, in order of preference:
        explicit argument, NUMMI_DB_DIR, $XDG_DATA_HOME/nummi/db.
        """
        if override is not None:
            return Path(override)
        if self.ledger.db_dir is not None:
            return self.ledger.db_dir
        return _xdg_dir("XDG_DATA_HOME", ".local/share") / PROG_NAME / "db"

    def resolve_cache_dir(self) -> Path:
        """Cache directory: NUMMI_CACHE_DIR or $XDG_CACHE_HOME/nummi."""
        if self.cache.dir is not None:
            return self.cache.dir
        return _xdg_dir("XDG_CACHE_HOME", ".cache") / PROG_NAME

    def resolve_currencies_path(self) -> Path:
        return self.resolve_cache_dir() / self.cache.currencies_file


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    "<name>_error" entry for each block that failed to load.
    """
    results = {}
    settings = get_settings()

    for name in ("ledger", "cache", "rates", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
