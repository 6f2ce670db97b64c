"""
Ledger Storage Package

Provides the abstract ledger interface and the flat-file implementation.
Currently implements a directory of text files as the backend, but the
aggregation code only depends on the interface.
"""

from nummi.services.storage.interface import (
    EntryParseError,
    InMemoryLedgerStorage,
    LedgerError,
    LedgerIOError,
    LedgerStorageInterface,
    parse_lines,
)
from nummi.services.storage.filesystem import (
    DEFAULT_EXTENSION,
    FileLedgerStorage,
    walk_files,
)

__all__ = [
    # Interfaces
    "InMemoryLedgerStorage",
    "LedgerStorageInterface",
    "parse_lines",
    # Exceptions
    "EntryParseError",
    "LedgerError",
    "LedgerIOError",
    # Flat-file implementation
    "DEFAULT_EXTENSION",
    "FileLedgerStorage",
    "walk_files",
]
