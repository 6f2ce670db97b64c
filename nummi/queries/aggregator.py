"""
Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and pure.
Every function here takes entries (and optionally a conversion table)
and returns a value; nothing is read from disk or logged.

Positive and negative sums are kept apart so that callers can show
gross inflow and outflow, not only the net.
"""

from decimal import Decimal
from typing import Iterable, Mapping

from nummi.models.entry import Currency, Entry
from nummi.models.money import ZERO, add, mul


ConversionTable = Mapping[str, Decimal]


class MissingRateError(KeyError):
    """An entry uses a currency with no known rate to EUR."""

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(currency)

    def __str__(self) -> str:
        return f"no conversion rate for currency: {self.currency}"


def unique_currencies(entries: Iterable[Entry]) -> set[str]:
    """Distinct currency codes present in the entries."""
    return {entry.currency for entry in entries}


def total(entries: Iterable[Entry]) -> dict[str, tuple[Decimal, Decimal]]:
    """
    Per-currency (positive_sum, negative_sum).

    Zero counts as non-negative. Currencies with no entries are absent.
    """
    totals: dict[str, tuple[Decimal, Decimal]] = {}
    for entry in entries:
        pos, neg = totals.get(entry.currency, (ZERO, ZERO))
        if entry.value < 0:
            neg = add(neg, entry.value)
        else:
            pos = add(pos, entry.value)
        totals[entry.currency] = (pos, neg)
    return totals


def total_with_conversion(
    entries: Iterable[Entry],
    rates: ConversionTable,
) -> tuple[Decimal, Decimal]:
    """
    (positive_sum_eur, negative_sum_eur) across all currencies.

    Raises:
        MissingRateError: If a currency in the entries has no rate
    """
    pos_eur, neg_eur = ZERO, ZERO
    for currency, (pos, neg) in total(entries).items():
        try:
            rate = rates[currency]
        except KeyError:
            raise MissingRateError(currency) from None
        pos_eur = add(pos_eur, mul(pos, rate))
        neg_eur = add(neg_eur, mul(neg, rate))
    return pos_eur, neg_eur


def conversion_table(currencies: Iterable[Currency]) -> dict[str, Decimal]:
    """
    Build a code -> rate table from Currency records.

    The base currency is always present with rate 1.
    """
    table = {currency.code: currency.to_eur for currency in currencies}
    table.setdefault(Currency.base().code, Decimal(1))
    return table
