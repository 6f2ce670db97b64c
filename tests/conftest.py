"""Shared fixtures for the nummi tests."""

from decimal import Decimal
from pathlib import Path

import pytest

from nummi.audit import configure_logging


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    configure_logging(level="warning")


@pytest.fixture
def write_file():
    """Write text to a path, creating parent directories."""
    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def ledger_dir(tmp_path, write_file):
    """
    A ledger of three monthly files plus a file that is not a ledger.

    January has a trailer after the blank line that must never be parsed.
    """
    db = tmp_path / "db"
    write_file(db / "2020" / "01.txt", (
        "2020-01-01 -100.00eur f rent\n"
        "2020-01-01 -200.00eur f groceries and more\n"
        "2020-01-02 300.00usd s salary\n"
        "\n"
        "notes: this is not an entry\n"
    ))
    write_file(db / "2020" / "02.txt", "2020-02-01 -400.00usd f travel\n")
    write_file(db / "2020" / "03.txt", "2020-03-01 500.00eur s bonus\n")
    write_file(db / "README.md", "not a ledger file\n")
    return db


@pytest.fixture
def rates():
    return {"eur": Decimal("1.0"), "usd": Decimal("3.0")}
