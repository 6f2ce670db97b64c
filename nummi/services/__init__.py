"""Services package."""

from nummi.services.cache import (
    CacheError,
    CacheFormatError,
    RateCache,
)
from nummi.services.plot import GnuplotRenderer, PlotError
from nummi.services.rates import EcbRateProvider, RateFetchError
from nummi.services.storage import (
    EntryParseError,
    FileLedgerStorage,
    InMemoryLedgerStorage,
    LedgerError,
    LedgerIOError,
    LedgerStorageInterface,
)

__all__ = [
    # Rate cache
    "CacheError",
    "CacheFormatError",
    "RateCache",
    # Plot
    "GnuplotRenderer",
    "PlotError",
    # Rates
    "EcbRateProvider",
    "RateFetchError",
    # Storage
    "EntryParseError",
    "FileLedgerStorage",
    "InMemoryLedgerStorage",
    "LedgerError",
    "LedgerIOError",
    "LedgerStorageInterface",
]
