"""
Command line interface for nummi.

    nummi [-d DB_DIR] [<command>] [<args>]

Commands:
    list            List all entries (default)
    currencies      List the currencies present in the ledger
    verify          Check every line, report the first bad one
    total           Positive/negative sums per currency and in EUR
    plot            Monthly in/out/net/cumulative chart (gnuplot)
    rates           Show cached exchange rates
    update-cache    Force an update of the exchange rate cache

Any configuration, ledger, rate or plot error aborts with a message on
stderr and exit status 1.
"""

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from nummi import PROG_NAME, __version__
from nummi.audit import AuditLogger, configure_logging
from nummi.config import ConfigurationError, get_settings
from nummi.models.entry import LedgerError
from nummi.models.money import add, format_decimal
from nummi.orchestrator import create_app_components
from nummi.queries import MissingRateError, format_series
from nummi.services.cache import CacheError
from nummi.services.plot import PlotError
from nummi.services.rates import RateFetchError


EXPECTED_ERRORS = (
    LedgerError,
    MissingRateError,
    CacheError,
    RateFetchError,
    PlotError,
    ConfigurationError,
    ValidationError,
)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r} (expected YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Personal ledger kept in plain text files.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-d", "--db-dir",
        type=Path,
        default=None,
        help="path to the database directory (default: $XDG_DATA_HOME/nummi/db)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default=None,
        help="minimum level of log records written to stderr",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="write log records as JSON",
    )

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("list", help="list all entries")
    sub.add_parser("currencies", help="list all currencies present in the database")
    sub.add_parser("verify", help="check every entry, stop at the first error")

    total = sub.add_parser("total", help="totals per currency and in EUR")
    total.add_argument(
        "--no-convert",
        action="store_true",
        help="only per-currency totals; do not load exchange rates",
    )

    plot = sub.add_parser("plot", help="plot the monthly series with gnuplot")
    plot.add_argument(
        "--end",
        type=_iso_date,
        default=None,
        help="last month to include, as a date (default: today)",
    )
    plot.add_argument(
        "-o", "--output",
        type=Path,
        default=Path(f"{PROG_NAME}.png"),
        help="PNG file to write (default: %(default)s)",
    )
    plot.add_argument(
        "--data",
        action="store_true",
        help="print the series as text instead of plotting it",
    )

    rates = sub.add_parser("rates", help="show cached exchange rates")
    rates.add_argument("--force", action="store_true", help="refresh even if the cache is fresh")
    sub.add_parser("update-cache", help="force an update of the currency exchange cache file")
    return parser


def run(args: argparse.Namespace, audit_logger: AuditLogger) -> int:
    ledger, rates, renderer = create_app_components(db_dir=args.db_dir, audit_logger=audit_logger)
    out = sys.stdout

    if args.command in (None, "list"):
        for entry in ledger.list_entries():
            out.write(entry.to_line() + "\n")

    elif args.command == "currencies":
        for code in ledger.currencies():
            out.write(code + "\n")

    elif args.command == "verify":
        error = ledger.verify()
        if error is not None:
            sys.stderr.write(f"{PROG_NAME}: {error}\n")
            return 1

    elif args.command == "total":
        table = None if args.no_convert else rates.conversion_table()
        per_currency, in_eur = ledger.totals(table)
        for code in sorted(per_currency):
            pos, neg = per_currency[code]
            out.write(f"{code} {format_decimal(pos)} {format_decimal(neg)} {format_decimal(add(pos, neg))}\n")
        if in_eur is not None:
            pos, neg = in_eur
            out.write(f"total eur {format_decimal(pos)} {format_decimal(neg)} {format_decimal(add(pos, neg))}\n")

    elif args.command == "plot":
        end = args.end or date.today()
        table = rates.conversion_table()
        if args.data:
            out.write(format_series(ledger.series(table, end)))
        else:
            path = ledger.plot(table, end, args.output, renderer)
            out.write(f"{path}\n")

    elif args.command == "rates":
        for currency in rates.currencies(force=args.force):
            out.write(currency.to_line() + "\n")

    elif args.command == "update-cache":
        rates.currencies(force=True)

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        app_settings = get_settings().app
    except ValidationError as e:
        sys.stderr.write(f"{PROG_NAME}: invalid configuration: {e}\n")
        return 1
    configure_logging(
        level=args.log_level or app_settings.log_level,
        json=app_settings.log_json if args.json_logs is None else args.json_logs,
    )
    audit_logger = AuditLogger()

    try:
        return run(args, audit_logger)
    except EXPECTED_ERRORS as e:
        audit_logger.log_error(type(e).__name__, str(e))
        sys.stderr.write(f"{PROG_NAME}: {e}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
