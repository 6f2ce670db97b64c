"""
Currency Rate Cache

Rates to EUR are kept in one small text file under the cache directory:

    usd 0.9227
    chf 0.9508

The base currency (eur) is never written; load() always adds it.

DESIGN DECISION: A refresh is fetch-then-commit.
1. The fetch function runs first; if it fails nothing on disk changes
2. The new content is written to a temporary file next to the cache
3. The temporary file is renamed over the cache file

Readers therefore see either the old file or the new one, never a
partially written file, and a failed refresh keeps the stale rates.
"""

import os
import stat
import tempfile
import time
from datetime import timedelta
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from pydantic import ValidationError

from nummi.audit import AuditLogger
from nummi.models.entry import BASE_CURRENCY, Currency
from nummi.models.money import parse_decimal


DEFAULT_MAX_AGE = timedelta(hours=24)

FetchFunction = Callable[[], Iterable[Currency]]


class CacheError(Exception):
    """Base exception for rate cache operations."""
    pass


class CacheFormatError(CacheError):
    """The cache file contains a line that is not '<code> <rate>'."""
    pass


def _as_timedelta(max_age: Union[timedelta, int, float]) -> timedelta:
    if isinstance(max_age, timedelta):
        return max_age
    return timedelta(seconds=max_age)


def is_stale(
    path: Union[str, Path],
    max_age: Union[timedelta, int, float] = DEFAULT_MAX_AGE,
    now: Optional[float] = None,
) -> bool:
    """
    True if the file does not exist or was last modified more than
    max_age ago.

    Args:
        path: Cache file
        max_age: timedelta, or a number of seconds
        now: POSIX timestamp to compare against (default: current time)

    Raises:
        CacheError: If the file exists but cannot be inspected
    """
    try:
        modified = os.stat(path).st_mtime
    except FileNotFoundError:
        return True
    except OSError as e:
        raise CacheError(f"cannot inspect cache file {path}: {e}") from e
    if now is None:
        now = time.time()
    return now - modified > _as_timedelta(max_age).total_seconds()


def _file_mode(path: Path) -> int:
    """Mode of the existing cache file, or what open() would create."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def refresh(path: Union[str, Path], rates: Iterable[Currency]) -> None:
    """
    Rewrite the cache file wholesale with one line per currency.

    The parent directory is created if needed. The base currency is
    skipped since load() synthesizes it. The file keeps its mode
    across rewrites.

    Raises:
        CacheError: If the directory or the file cannot be written
    """
    path = Path(path)
    lines = [
        f"{currency.to_line()}\n"
        for currency in rates
        if currency.code != BASE_CURRENCY
    ]

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
    except OSError as e:
        raise CacheError(f"cannot write cache in {path.parent}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            os.fchmod(f.fileno(), _file_mode(path))
            f.writelines(lines)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise CacheError(f"cannot write cache file {path}: {e}") from e


def parse_cache_lines(lines: Iterable[str], name: str = "<cache>") -> list[Currency]:
    """
    Parse cache file content, appending the base currency.

    Blank lines are ignored.

    Raises:
        CacheFormatError: On a malformed line
    """
    currencies = []
    for line_number, line in enumerate(lines, start=1):
        fields = line.split()
        if not fields:
            continue
        if len(fields) != 2:
            raise CacheFormatError(f"{name}:{line_number}: expected '<code> <rate>', got {line.strip()!r}")
        code, rate = fields
        try:
            currencies.append(Currency(code=code, to_eur=parse_decimal(rate)))
        except (ValueError, ValidationError) as e:
            raise CacheFormatError(f"{name}:{line_number}: invalid currency line {line.strip()!r}") from e

    if not any(currency.code == BASE_CURRENCY for currency in currencies):
        currencies.append(Currency.base())
    return currencies


def load(path: Union[str, Path]) -> list[Currency]:
    """
    Read the cache file.

    Raises:
        CacheError: If the file cannot be read
        CacheFormatError: If a line is malformed
    """
    try:
        with open(path, encoding="utf-8") as f:
            return parse_cache_lines(f, str(path))
    except OSError as e:
        raise CacheError(f"cannot read cache file {path}: {e}") from e


def get_or_refresh(
    path: Union[str, Path],
    force: bool,
    fetch_fn: FetchFunction,
    max_age: Union[timedelta, int, float] = DEFAULT_MAX_AGE,
) -> list[Currency]:
    """
    Return cached rates, refreshing them first when forced or stale.

    Exceptions from fetch_fn propagate unchanged and leave the existing
    cache file untouched.
    """
    if force or is_stale(path, max_age):
        refresh(path, list(fetch_fn()))
    return load(path)


class RateCache:
    """
    The rate cache of one cache directory.

    Wraps the module functions with a fixed path and max age and
    reports hits and refreshes to the audit log.
    """

    def __init__(
        self,
        path: Union[str, Path],
        max_age: Union[timedelta, int, float] = DEFAULT_MAX_AGE,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._path = Path(path)
        self._max_age = _as_timedelta(max_age)
        self._audit = audit_logger

    @property
    def path(self) -> Path:
        return self._path

    def is_stale(self) -> bool:
        return is_stale(self._path, self._max_age)

    def refresh(self, rates: Iterable[Currency]) -> None:
        refresh(self._path, rates)

    def load(self) -> list[Currency]:
        return load(self._path)

    def get_or_refresh(self, fetch_fn: FetchFunction, force: bool = False) -> list[Currency]:
        """
        Same as the module function, with audit events.

        The fetch failure is logged and re-raised.
        """
        if force or self.is_stale():
            try:
                fetched = list(fetch_fn())
            except Exception as e:
                if self._audit:
                    self._audit.log_rate_fetch_failed(str(e))
                raise
            self.refresh(fetched)
            if self._audit:
                self._audit.log_rate_cache_refreshed(str(self._path), len(fetched), force)
            return self.load()

        currencies = self.load()
        if self._audit:
            self._audit.log_rate_cache_hit(str(self._path), len(currencies))
        return currencies
