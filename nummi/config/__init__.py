"""Configuration package."""

from nummi.config.settings import (
    ECB_RATES_URL,
    AppSettings,
    CacheSettings,
    ConfigurationError,
    LedgerSettings,
    RatesSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ECB_RATES_URL",
    "AppSettings",
    "CacheSettings",
    "ConfigurationError",
    "LedgerSettings",
    "RatesSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
