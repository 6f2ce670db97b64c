"""
nummi - Source Package

A personal ledger kept as plain text files: dated entries with a signed
amount and a currency, read back for listing, validation, EUR totals and
monthly time series.

DESIGN PRINCIPLES:
1. Money is exact (Decimal, never float)
2. Fail early, fail visibly
3. No silent corrections
4. Ledger files are append-only and never written by the program
"""

__version__ = "1.0.0"
__author__ = "nummi contributors"

PROG_NAME = "nummi"
