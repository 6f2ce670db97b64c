"""
Main Orchestrator for nummi

This module ties together the components and defines the flows the
command line runs:
1. Ledger (read → parse → list / verify / total / series)
2. Rates (cache → maybe fetch → conversion table)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Listing and aggregation only see a ledger that parsed completely
- Verification stops at the first bad line
- The monthly series is fed in ascending order
- Every step is audited
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from nummi.audit import AuditLogger
from nummi.config import Settings, get_settings
from nummi.models.entry import Currency, Entry, LedgerError
from nummi.queries import (
    SeriesRow,
    conversion_table,
    monthly_series,
    total,
    total_with_conversion,
    unique_currencies,
)
from nummi.services.cache import RateCache
from nummi.services.plot import GnuplotRenderer
from nummi.services.rates import EcbRateProvider
from nummi.services.storage import FileLedgerStorage, LedgerStorageInterface


class LedgerFlow:
    """
    Orchestrates reading and aggregating the ledger.

    All read operations except verify() materialize the ledger first,
    so a bad line aborts the command before anything is printed.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        name: str = "ledger",
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._name = name

    def list_entries(self) -> list[Entry]:
        """All entries, newest ledger file first."""
        entries = self._storage.read_all()
        self._audit_logger.log_ledger_read(self._name, len(entries))
        return entries

    def currencies(self) -> list[str]:
        return sorted(unique_currencies(self.list_entries()))

    def verify(self) -> Optional[LedgerError]:
        """
        Stream-validate the ledger.

        Returns:
            The first error, or None when every line parses
        """
        error = self._storage.validate()
        if error is None:
            self._audit_logger.log_ledger_validated(self._name)
        else:
            self._audit_logger.log_ledger_validation_failed(self._name, str(error))
        return error

    def totals(
        self,
        rates: Optional[dict[str, Decimal]] = None,
    ) -> tuple[dict[str, tuple[Decimal, Decimal]], Optional[tuple[Decimal, Decimal]]]:
        """
        Per-currency totals, plus the EUR totals when rates are given.

        Raises:
            LedgerError: If the ledger does not parse
            MissingRateError: If a currency has no rate
        """
        entries = self.list_entries()
        per_currency = total(entries)
        in_eur = total_with_conversion(entries, rates) if rates is not None else None
        return per_currency, in_eur

    def series(self, rates: dict[str, Decimal], end: date) -> list[SeriesRow]:
        """
        Monthly EUR series up to the month of end.

        The ledger is read oldest file first; monthly_series() requires
        ascending entries.
        """
        rows = monthly_series(
            self._storage.iter_entries(newest_first=False),
            rates,
            end,
        )
        self._audit_logger.log_series_generated(len(rows), end.isoformat())
        return rows

    def plot(
        self,
        rates: dict[str, Decimal],
        end: date,
        output: Path,
        renderer: GnuplotRenderer,
    ) -> Path:
        rows = self.series(rates, end)
        path = renderer.render(rows, output)
        self._audit_logger.log_plot_rendered(str(path))
        return path


class RatesFlow:
    """
    Orchestrates the currency rate cache.

    The provider is only called when the cache is stale or a refresh
    is forced.
    """

    def __init__(
        self,
        cache: RateCache,
        provider: EcbRateProvider,
    ):
        self._cache = cache
        self._provider = provider

    def currencies(self, force: bool = False) -> list[Currency]:
        return sorted(self._cache.get_or_refresh(self._provider, force=force))

    def conversion_table(self, force: bool = False) -> dict[str, Decimal]:
        return conversion_table(self.currencies(force=force))


def create_app_components(
    db_dir: Optional[Path] = None,
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[LedgerFlow, RatesFlow, GnuplotRenderer]:
    """
    Factory function to create all application components.

    Args:
        db_dir: Ledger directory overriding the configured one
        settings: Settings to use (default: get_settings())
        audit_logger: Shared audit logger (default: a new one)

    Returns:
        (ledger_flow, rates_flow, renderer)
    """
    settings = settings or get_settings()
    audit_logger = audit_logger or AuditLogger()

    root = settings.resolve_db_dir(db_dir)
    storage = FileLedgerStorage(root, extension=settings.ledger.ledger_extension)
    ledger_flow = LedgerFlow(storage, audit_logger=audit_logger, name=str(root))

    cache_settings = settings.cache
    rates_settings = settings.rates
    cache = RateCache(
        settings.resolve_currencies_path(),
        max_age=cache_settings.max_age_seconds,
        audit_logger=audit_logger,
    )
    provider = EcbRateProvider(
        url=rates_settings.url,
        csv_name=rates_settings.csv_name,
        timeout=rates_settings.timeout_seconds,
    )
    rates_flow = RatesFlow(cache, provider)

    renderer = GnuplotRenderer(command=settings.app.gnuplot_command)
    return ledger_flow, rates_flow, renderer
