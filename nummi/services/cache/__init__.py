"""Currency rate cache package."""

from nummi.services.cache.rate_cache import (
    DEFAULT_MAX_AGE,
    CacheError,
    CacheFormatError,
    FetchFunction,
    RateCache,
    get_or_refresh,
    is_stale,
    load,
    parse_cache_lines,
    refresh,
)

__all__ = [
    "DEFAULT_MAX_AGE",
    "CacheError",
    "CacheFormatError",
    "FetchFunction",
    "RateCache",
    "get_or_refresh",
    "is_stale",
    "load",
    "parse_cache_lines",
    "refresh",
]
