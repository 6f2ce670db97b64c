"""
Flat-file Ledger Storage

The ledger is a directory tree of text files, typically one file per
period (db/2020/01.txt, db/2020/02.txt, ...), named so that sorting the
paths sorts them by time.

DESIGN DECISION: Reading is a chain of generators:

    walk_files()  ->  ledger files, sorted  ->  parse_lines()  ->  Entry

Nothing is read ahead. A caller that stops at the first error (the
"verify" command) never opens the files after the one that failed.

TRADEOFFS:
- The tree itself is listed completely before the first file is read,
  because the files have to be sorted
- No index; every operation is a linear scan
"""

import os
from pathlib import Path
from typing import Iterator, Union

from nummi.models.entry import Entry
from nummi.services.storage.interface import (
    LedgerIOError,
    LedgerStorageInterface,
    parse_lines,
)


DEFAULT_EXTENSION = ".txt"


def walk_files(root: Union[str, Path]) -> Iterator[Path]:
    """
    Depth-first enumeration of every regular file under root.

    The order between directories is unspecified; sort the result if
    order matters.

    Raises:
        LedgerIOError: If any directory cannot be listed. Unreadable
            subtrees are never skipped.
    """
    stack = [Path(root)]
    while stack:
        path = stack.pop()
        if not path.is_dir():
            if path.is_file():
                yield path
            elif path == Path(root):
                raise LedgerIOError(f"ledger directory not found: {path}", str(path))
            continue
        try:
            with os.scandir(path) as it:
                children = [Path(child.path) for child in it]
        except OSError as e:
            raise LedgerIOError(f"cannot list directory {path}: {e.strerror or e}", str(path)) from e
        stack.extend(children)


class FileLedgerStorage(LedgerStorageInterface):
    """
    Ledger storage backed by a directory tree.

    Only files whose name ends with the ledger extension are read.
    """

    def __init__(
        self,
        root: Union[str, Path],
        extension: str = DEFAULT_EXTENSION,
        encoding: str = "utf-8",
    ):
        self._root = Path(root)
        self._extension = extension
        self._encoding = encoding

    @property
    def root(self) -> Path:
        return self._root

    def ledger_files(self, newest_first: bool = True) -> list[Path]:
        """Ledger files under the root, sorted by path."""
        files = [
            path for path in walk_files(self._root)
            if path.name.endswith(self._extension)
        ]
        return sorted(files, key=str, reverse=newest_first)

    def iter_entries(self, newest_first: bool = True) -> Iterator[Entry]:
        for path in self.ledger_files(newest_first=newest_first):
            yield from self._read_file(path)

    def _read_file(self, path: Path) -> Iterator[Entry]:
        try:
            with open(path, encoding=self._encoding, newline="") as f:
                yield from parse_lines(f, str(path))
        except OSError as e:
            raise LedgerIOError(f"cannot read {path}: {e.strerror or e}", str(path)) from e
        except UnicodeDecodeError as e:
            raise LedgerIOError(f"cannot decode {path}: {e.reason}", str(path)) from e
