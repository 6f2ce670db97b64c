"""
Tests for aggregation and the monthly series.
"""

import pytest
from datetime import date
from decimal import Decimal

from nummi.models.entry import Currency, Entry, EntryParseError, ParseErrorKind
from nummi.queries import (
    EntryOrderError,
    MissingRateError,
    conversion_table,
    format_series,
    month_range,
    monthly_series,
    total,
    total_with_conversion,
    unique_currencies,
)


def entry(value, currency, month=1, day=1):
    return Entry(
        date=date(2020, month, day),
        value=Decimal(value),
        currency=currency,
        tag="t",
        text="description",
    )


@pytest.fixture
def entries():
    return [
        entry("-100", "eur"),
        entry("-200", "eur"),
        entry("300", "usd"),
        entry("-400", "usd"),
        entry("500", "eur"),
    ]


@pytest.fixture
def series_entries():
    return [
        entry("-100", "eur", 1, 1),
        entry("-200", "eur", 1, 1),
        entry("300", "usd", 1, 2),
        entry("-400", "usd", 2, 1),
        entry("500", "eur", 3, 1),
    ]


class TestTotals:
    """Tests for per-currency and converted totals."""

    def test_total_separates_signs(self, entries):
        assert total(entries) == {
            "eur": (Decimal("500"), Decimal("-300")),
            "usd": (Decimal("300"), Decimal("-400")),
        }

    def test_zero_counts_as_positive(self):
        assert total([entry("0", "chf")]) == {"chf": (Decimal("0"), Decimal("0"))}

    def test_total_is_exact(self):
        totals = total([entry("0.10", "eur"), entry("0.20", "eur"), entry("-0.30", "eur")])
        assert totals["eur"] == (Decimal("0.30"), Decimal("-0.30"))

    def test_total_with_conversion(self, entries, rates):
        assert total_with_conversion(entries, rates) == (Decimal("1400"), Decimal("-1500"))

    def test_total_with_conversion_missing_rate(self, entries):
        with pytest.raises(MissingRateError) as exc_info:
            total_with_conversion(entries, {"eur": Decimal(1)})
        assert exc_info.value.currency == "usd"
        assert "usd" in str(exc_info.value)

    def test_empty_input(self, rates):
        assert total([]) == {}
        assert total_with_conversion([], rates) == (Decimal(0), Decimal(0))
        assert unique_currencies([]) == set()

    def test_accepts_generators(self, entries, rates):
        assert total_with_conversion(iter(entries), rates) == (Decimal("1400"), Decimal("-1500"))


class TestUniqueCurrencies:
    """Tests for unique_currencies."""

    def test_each_code_once(self, entries):
        assert unique_currencies(entries) == {"eur", "usd"}

    def test_order_independent(self, entries):
        assert unique_currencies(reversed(entries)) == unique_currencies(entries)
        assert unique_currencies(entries * 3) == {"eur", "usd"}


class TestConversionTable:
    """Tests for building conversion tables from currencies."""

    def test_base_currency_added(self):
        table = conversion_table([Currency(code="usd", to_eur=Decimal("0.92"))])
        assert table == {"usd": Decimal("0.92"), "eur": Decimal(1)}

    def test_base_currency_kept(self):
        table = conversion_table([Currency.base()])
        assert table == {"eur": Decimal(1)}


class TestMonthRange:
    """Tests for the calendar month sequence."""

    def test_across_year_boundary(self):
        months = list(month_range(date(2020, 4, 1), date(2021, 4, 1)))
        assert months[0] == (2020, 4)
        assert months[-1] == (2021, 4)
        assert len(months) == 13
        assert (2020, 12) in months and (2021, 1) in months

    def test_same_month(self):
        assert list(month_range(date(2020, 4, 30), date(2020, 4, 1))) == [(2020, 4)]

    def test_end_before_start(self):
        assert list(month_range(date(2020, 4, 1), date(2020, 3, 31))) == []


class TestMonthlySeries:
    """Tests for the monthly series generator."""

    def test_series(self, series_entries, rates):
        rows = monthly_series(series_entries, rates, date(2020, 4, 1))
        assert format_series(rows) == (
            "2020-01 900.00 -300.00 600.00 600.00\n"
            "2020-02 0.00 -1200.00 -1200.00 -600.00\n"
            "2020-03 500.00 0.00 500.00 -100.00\n"
            "2020-04 0.00 0.00 0.00 -100.00\n"
        )

    def test_rows_are_rounded(self, rates):
        rows = monthly_series([entry("1.005", "eur")], rates, date(2020, 1, 31))
        assert len(rows) == 1
        assert rows[0].pos == Decimal("1.00")
        assert (rows[0].year, rows[0].month) == (2020, 1)

    def test_empty_input(self, rates):
        assert monthly_series([], rates, date(2020, 4, 1)) == []

    def test_end_before_first_entry(self, series_entries, rates):
        assert monthly_series(series_entries, rates, date(2019, 12, 31)) == []

    def test_entries_after_end_are_ignored(self, series_entries, rates):
        rows = monthly_series(series_entries, rates, date(2020, 2, 15))
        assert [(r.year, r.month) for r in rows] == [(2020, 1), (2020, 2)]
        assert rows[-1].cumulative == Decimal("-600.00")

    def test_stream_error_discards_rows(self, series_entries, rates):
        """An error in the middle of the stream returns no partial series."""
        def stream():
            yield from series_entries[:3]
            raise EntryParseError(ParseErrorKind.MISSING_TAG, "missing tag")

        with pytest.raises(EntryParseError):
            monthly_series(stream(), rates, date(2020, 4, 1))

    def test_error_on_first_item(self, rates):
        def stream():
            raise EntryParseError(ParseErrorKind.MISSING_DATE, "missing date")
            yield

        with pytest.raises(EntryParseError):
            monthly_series(stream(), rates, date(2020, 4, 1))

    def test_out_of_order_rejected(self, series_entries, rates):
        with pytest.raises(EntryOrderError):
            monthly_series(list(reversed(series_entries)), rates, date(2020, 4, 1))

    def test_missing_rate(self, series_entries):
        with pytest.raises(MissingRateError):
            monthly_series(series_entries, {"eur": Decimal(1)}, date(2020, 4, 1))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
