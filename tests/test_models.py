"""
Tests for nummi models

Test strategy:
1. Unit tests for the line codec and the models
2. Filesystem tests with tmp_path, never the real ledger
3. No real network or gnuplot calls in tests (use mocks)
"""

import importlib
import pytest
from datetime import date
from decimal import Decimal

import structlog
from pydantic import ValidationError

from nummi.audit import configure_logging
from nummi.audit import logger as audit_logger_module
from nummi.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from nummi.models.entry import (
    Currency,
    Entry,
    EntryParseError,
    LedgerError,
    ParseErrorKind,
    parse,
    serialize,
)
from nummi.models.money import (
    add,
    div,
    dsum,
    format_decimal,
    mul,
    parse_decimal,
    quantize,
    sub,
    to_decimal,
)


def make_entry(value="-12.50", currency="eur", day=date(2020, 1, 31), tag="f", text="groceries"):
    return Entry(date=day, value=Decimal(value), currency=currency, tag=tag, text=text)


class TestDecimal:
    """Tests for exact decimal arithmetic."""

    def test_no_binary_rounding(self):
        """0.10 + 0.20 is exactly 0.30."""
        assert add(Decimal("0.10"), Decimal("0.20")) == Decimal("0.30")
        assert dsum([Decimal("0.1")] * 10) == Decimal("1")

    def test_arithmetic(self):
        assert sub(Decimal("1.00"), Decimal("0.99")) == Decimal("0.01")
        assert mul(Decimal("-400"), Decimal("3.0")) == Decimal("-1200")
        assert div(Decimal("1"), Decimal("4")) == Decimal("0.25")

    def test_division_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            div(Decimal("1"), Decimal("0"))

    def test_parse_decimal(self):
        assert parse_decimal("-12.50") == Decimal("-12.5")
        assert parse_decimal("7") == Decimal("7")

    @pytest.mark.parametrize("text", ["", "-", "1.", ".5", "1e5", "NaN", "Infinity", "+1", "1,5", " 1"])
    def test_parse_decimal_rejects(self, text):
        with pytest.raises(ValueError):
            parse_decimal(text)

    def test_format_decimal(self):
        assert format_decimal(Decimal("900")) == "900.00"
        assert format_decimal(Decimal("-0.001")) == "0.00"
        assert format_decimal(Decimal("2.675")) == "2.68"
        assert format_decimal(Decimal("1.23456"), 4) == "1.2346"

    def test_quantize_normalises_negative_zero(self):
        assert str(quantize(Decimal("-0"))) == "0.00"

    def test_to_decimal_refuses_float(self):
        with pytest.raises(TypeError):
            to_decimal(0.1)
        assert to_decimal(3) == Decimal(3)
        assert to_decimal(" 1.5 ") == Decimal("1.5")


class TestEntryParse:
    """Tests for parsing ledger lines."""

    def test_parse_valid_line(self):
        entry = parse("2020-01-31 -12.50eur f groceries at the market")
        assert entry.date == date(2020, 1, 31)
        assert entry.value == Decimal("-12.50")
        assert entry.currency == "eur"
        assert entry.tag == "f"
        assert entry.text == "groceries at the market"

    def test_text_is_verbatim(self):
        """Free text keeps its own spacing."""
        entry = parse("2020-01-31 1.00usd x  two  spaces ")
        assert entry.text == " two  spaces "

    def test_text_may_be_empty(self):
        assert parse("2020-01-31 1.00usd x").text == ""

    def test_trailing_newline_ignored(self):
        assert parse("2020-01-31 1.00usd x salary\r\n").text == "salary"

    def test_uppercase_currency_is_lowercased(self):
        assert parse("2020-01-31 1.00USD x salary").currency == "usd"

    def test_short_negative_amount_accepted(self):
        """The grammar accepts amounts a length check would reject."""
        entry = parse("2020-01-31 -1eur x coffee")
        assert entry.value == Decimal("-1")

    def test_empty_line(self):
        with pytest.raises(EntryParseError) as exc_info:
            parse("")
        assert exc_info.value.kind == ParseErrorKind.MISSING_DATE
        assert str(exc_info.value) == "missing date"

    def test_only_date(self):
        with pytest.raises(EntryParseError) as exc_info:
            parse("2020-01-31")
        assert exc_info.value.kind == ParseErrorKind.MISSING_AMOUNT
        assert "missing amount" in str(exc_info.value)

    def test_short_amount(self):
        with pytest.raises(EntryParseError) as exc_info:
            parse("2020-01-31 1eu")
        assert exc_info.value.kind == ParseErrorKind.INVALID_AMOUNT
        assert "invalid amount" in str(exc_info.value)
        assert "1eu" in str(exc_info.value)

    def test_amount_without_currency(self):
        with pytest.raises(EntryParseError) as exc_info:
            parse("2020-01-31 100.00 f rent")
        assert exc_info.value.kind == ParseErrorKind.INVALID_AMOUNT

    def test_missing_tag(self):
        with pytest.raises(EntryParseError) as exc_info:
            parse("2020-01-31 100.00eur")
        assert exc_info.value.kind == ParseErrorKind.MISSING_TAG
        assert str(exc_info.value) == "missing tag"

    def test_long_tag(self):
        with pytest.raises(EntryParseError) as exc_info:
            parse("2020-01-31 100.00eur food groceries")
        assert exc_info.value.kind == ParseErrorKind.INVALID_TAG

    def test_line_break_tag(self):
        with pytest.raises(EntryParseError) as exc_info:
            parse("2020-01-31 100.00eur \r groceries")
        assert exc_info.value.kind == ParseErrorKind.INVALID_TAG

    @pytest.mark.parametrize("text", ["a\rb", "a\nb", "a\r\nb"])
    def test_line_break_inside_text(self, text):
        """A stray carriage return in the text is a parse error, not a model error."""
        with pytest.raises(EntryParseError) as exc_info:
            parse(f"2020-01-01 1.00eur f {text}")
        assert exc_info.value.kind == ParseErrorKind.INVALID_TEXT

    @pytest.mark.parametrize("day", ["2020-02-30", "31-01-2020", "2020-1-31", "yesterday"])
    def test_invalid_date(self, day):
        with pytest.raises(EntryParseError) as exc_info:
            parse(f"{day} 100.00eur f rent")
        assert exc_info.value.kind == ParseErrorKind.INVALID_DATE
        assert day in str(exc_info.value)

    @pytest.mark.parametrize("amount", ["1.2.3eur", "abcdeur", "1e5eur", "--1eur"])
    def test_invalid_decimal(self, amount):
        with pytest.raises(EntryParseError) as exc_info:
            parse(f"2020-01-31 {amount} f rent")
        assert exc_info.value.kind == ParseErrorKind.INVALID_DECIMAL

    def test_structural_errors_come_first(self):
        """A missing tag is reported before a bad date."""
        with pytest.raises(EntryParseError) as exc_info:
            parse("not-a-date 100.00eur")
        assert exc_info.value.kind == ParseErrorKind.MISSING_TAG

    def test_parse_error_is_ledger_error(self):
        with pytest.raises(LedgerError):
            parse("")

    def test_error_location(self):
        error = EntryParseError(ParseErrorKind.MISSING_TAG, "missing tag").at("db/01.txt", 3)
        assert str(error) == "db/01.txt:3: missing tag"
        assert error.kind == ParseErrorKind.MISSING_TAG


class TestEntrySerialize:
    """Tests for writing entries back as lines."""

    def test_two_fraction_digits(self):
        assert serialize(make_entry(value="-12.5")) == "2020-01-31 -12.50eur f groceries"
        assert make_entry(value="300").to_line() == "2020-01-31 300.00eur f groceries"

    @pytest.mark.parametrize("entry", [
        make_entry(),
        make_entry(value="0", currency="usd", tag="s", text=""),
        make_entry(value="-0.01", text="text with  several   spaces"),
        make_entry(value="123456789.99", currency="jpy", day=date(1999, 12, 31)),
    ])
    def test_round_trip(self, entry):
        assert parse(serialize(entry)) == entry

    def test_entry_is_immutable(self):
        entry = make_entry()
        with pytest.raises(ValidationError):
            entry.value = Decimal("1")

    def test_entry_rejects_float(self):
        with pytest.raises(TypeError):
            Entry(date=date(2020, 1, 1), value=0.1, currency="eur", tag="f")

    def test_entry_rejects_bad_currency(self):
        with pytest.raises(ValidationError):
            make_entry(currency="euro")


class TestCurrency:
    """Tests for the Currency model."""

    def test_ordering(self):
        currencies = sorted([
            Currency(code="usd", to_eur=Decimal("0.9")),
            Currency(code="chf", to_eur=Decimal("1.05")),
            Currency(code="chf", to_eur=Decimal("1.01")),
        ])
        assert [(c.code, c.to_eur) for c in currencies] == [
            ("chf", Decimal("1.01")),
            ("chf", Decimal("1.05")),
            ("usd", Decimal("0.9")),
        ]

    def test_base_currency(self):
        assert Currency.base() == Currency(code="eur", to_eur=Decimal(1))

    def test_to_line_never_uses_exponent(self):
        assert Currency(code="idr", to_eur=Decimal("0.0000001")).to_line() == "idr 0.0000001"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.LEDGER_READ,
            description="Read ledger",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.ledger_read(root="/db", entry_count=5)
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "ledger_read"
        assert log_dict["details"]["entry_count"] == 5

    def test_validation_failed_is_warning(self):
        event = AuditEventBuilder.ledger_validation_failed(root="/db", error="missing tag")
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "missing tag"


class TestAuditLogger:
    """Tests for the structlog setup."""

    def test_import_routes_through_stdlib_logging(self, capsys):
        """Without configure_logging(), events never reach stdout."""
        importlib.reload(audit_logger_module)
        try:
            assert isinstance(
                structlog.get_config()["logger_factory"],
                structlog.stdlib.LoggerFactory,
            )
            audit_logger_module.AuditLogger().log_error("CacheError", "disk full")
            assert capsys.readouterr().out == ""
        finally:
            configure_logging(level="warning")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
