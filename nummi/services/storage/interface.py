"""
Abstract Ledger Storage Interface

DESIGN DECISION: We define an abstract interface for reading the ledger.
This allows us to:
1. Keep aggregation decoupled from where entries come from
2. Use in-memory ledgers for testing
3. Swap the flat-file layout for something else later

The interface is intentionally small - there are no queries beyond a
linear scan. Every access pattern is built on iter_entries(), so the
"stop at the first error" behaviour lives in exactly one place.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from nummi.models.entry import Entry, EntryParseError, LedgerError


class LedgerIOError(LedgerError):
    """
    A directory or ledger file could not be read.

    The underlying OSError is chained as __cause__.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage.

    Implementations only provide the lazy stream; materialization and
    validation are derived from it.
    """

    @abstractmethod
    def iter_entries(self, newest_first: bool = True) -> Iterator[Entry]:
        """
        Lazily yield every entry of the ledger.

        Args:
            newest_first: Order of the ledger files. Aggregation over
                time needs ascending order and passes False.

        Raises:
            EntryParseError: At the first malformed line
            LedgerIOError: If a directory or file cannot be read
        """
        pass

    def read_all(self, newest_first: bool = True) -> list[Entry]:
        """
        Materialize the whole ledger.

        Raises:
            LedgerError: The first parse or I/O error; nothing is returned
        """
        return list(self.iter_entries(newest_first=newest_first))

    def validate(self) -> Optional[LedgerError]:
        """
        Check every line, stopping at the first error.

        Returns:
            The first error, or None if the whole ledger parses. Files
            after the failing one are never opened.
        """
        try:
            for _ in self.iter_entries():
                pass
        except LedgerError as e:
            return e
        return None

    def count(self) -> int:
        """Number of entries; raises like read_all()."""
        return sum(1 for _ in self.iter_entries())


def parse_lines(lines, name: str) -> Iterator[Entry]:
    """
    Parse the entry section of one ledger file.

    Stops at the first blank line; whatever follows is a trailer for
    notes and is never parsed.
    """
    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if line == "":
            return
        try:
            yield Entry.from_line(line)
        except EntryParseError as e:
            raise e.at(name, line_number) from None


class InMemoryLedgerStorage(LedgerStorageInterface):
    """
    A single ledger "file" held in memory.

    Within one file entries always come in file order, so newest_first
    has nothing to reorder here.
    """

    def __init__(self, lines: list[str], name: str = "<memory>"):
        self._lines = list(lines)
        self._name = name

    def iter_entries(self, newest_first: bool = True) -> Iterator[Entry]:
        return parse_lines(self._lines, self._name)


__all__ = [
    "EntryParseError",
    "InMemoryLedgerStorage",
    "LedgerError",
    "LedgerIOError",
    "LedgerStorageInterface",
    "parse_lines",
]
