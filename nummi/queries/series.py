"""
Monthly Series Generator

Turns an ascending entry stream into one row per calendar month with
the EUR inflow, outflow, net and running cumulative total.

ORDERING: the ledger reader yields newest files first by default.
Callers feeding this module must read with newest_first=False so the
stream is ascending; a stream that goes back to an earlier month is
rejected with EntryOrderError instead of being silently miscounted.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from nummi.models.entry import Entry, LedgerError
from nummi.models.money import ZERO, add, format_decimal, quantize
from nummi.queries.aggregator import ConversionTable, total_with_conversion


class EntryOrderError(LedgerError):
    """The entry stream was not in ascending month order."""
    pass


class SeriesRow(BaseModel):
    """One month of the series, amounts in EUR rounded to cents."""
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    pos: Decimal
    neg: Decimal
    net: Decimal
    cumulative: Decimal

    def to_line(self) -> str:
        """Text layout consumed by the plot renderer."""
        return (
            f"{self.year}-{self.month:02d} "
            f"{format_decimal(self.pos)} {format_decimal(self.neg)} "
            f"{format_decimal(self.net)} {format_decimal(self.cumulative)}\n"
        )


def month_range(start: date, end: date) -> Iterator[tuple[int, int]]:
    """
    (year, month) pairs from the month of start through the month of
    end, inclusive. Empty when end falls in an earlier month.
    """
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def monthly_series(
    entries: Iterable[Entry],
    rates: ConversionTable,
    end: date,
) -> list[SeriesRow]:
    """
    Aggregate an ascending entry stream by calendar month.

    Months without entries produce zero rows that carry the cumulative
    sum forward. Entries after the month of `end` are not consumed.

    Raises:
        LedgerError: Any error raised by the stream; no rows are returned
        EntryOrderError: If an entry belongs to an earlier month than
            the one being aggregated
        MissingRateError: If a currency has no rate
    """
    stream = iter(entries)
    pending: Optional[Entry] = next(stream, None)
    if pending is None:
        return []

    rows = []
    cumulative = ZERO
    for year, month in month_range(pending.date, end):
        group = []
        while pending is not None and (pending.date.year, pending.date.month) == (year, month):
            group.append(pending)
            pending = next(stream, None)
        if pending is not None and (pending.date.year, pending.date.month) < (year, month):
            raise EntryOrderError(
                f"entry dated {pending.date.isoformat()} follows entries "
                f"of {year}-{month:02d}"
            )

        pos, neg = total_with_conversion(group, rates)
        net = add(pos, neg)
        cumulative = add(cumulative, net)
        rows.append(SeriesRow(
            year=year,
            month=month,
            pos=quantize(pos),
            neg=quantize(neg),
            net=quantize(net),
            cumulative=quantize(cumulative),
        ))
    return rows


def format_series(rows: Iterable[SeriesRow]) -> str:
    return "".join(row.to_line() for row in rows)
