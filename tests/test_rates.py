"""
Tests for the ECB rate provider. No real network calls.
"""

import io
import zipfile
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

import requests

from nummi.models.entry import Currency
from nummi.services.rates import EcbRateProvider, RateFetchError, parse_rates_csv


ECB_CSV = (
    "Date, USD, JPY, RUB, CHF, \n"
    "17 March 2023, 1.0000, 125.0, N/A, 0.8000, \n"
)


def zipped(text, name="eurofxref.csv"):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(name, text)
    return buffer.getvalue()


def mock_session(content=None, error=None):
    response = MagicMock()
    response.content = content
    if error is not None:
        response.raise_for_status.side_effect = error
    session = MagicMock()
    session.get.return_value = response
    return session


class TestParseRatesCsv:
    """Tests for parsing the ECB CSV."""

    def test_inverts_quotes(self):
        currencies = parse_rates_csv(ECB_CSV)
        assert currencies == [
            Currency(code="usd", to_eur=Decimal("1")),
            Currency(code="jpy", to_eur=Decimal("0.008")),
            Currency(code="chf", to_eur=Decimal("1.25")),
        ]

    def test_skips_unavailable_quotes(self):
        codes = [c.code for c in parse_rates_csv(ECB_CSV)]
        assert "rub" not in codes
        assert "date" not in codes

    def test_skips_headers_that_are_not_codes(self):
        currencies = parse_rates_csv("Date, USD, XAUX, U$D,\n17 March 2023, 1.25, 2.0, 4.0,\n")
        assert currencies == [Currency(code="usd", to_eur=Decimal("0.8"))]

    def test_only_bad_headers(self):
        with pytest.raises(RateFetchError, match="no currencies"):
            parse_rates_csv("Date, XAUX\n17 March 2023, 2.0\n")

    def test_inverse_is_rounded(self):
        currencies = parse_rates_csv("Date, GBP\n1 Jan 2024, 3\n")
        assert currencies[0].to_eur == Decimal("0.3333333333")

    def test_no_data_row(self):
        with pytest.raises(RateFetchError):
            parse_rates_csv("Date, USD\n")

    def test_no_currencies(self):
        with pytest.raises(RateFetchError):
            parse_rates_csv("Date\n17 March 2023\n")


class TestEcbRateProvider:
    """Tests for downloading and unpacking rates."""

    def test_fetch_currencies(self):
        session = mock_session(content=zipped(ECB_CSV))
        provider = EcbRateProvider(url="https://example.test/rates.zip", session=session, timeout=5)

        currencies = provider.fetch_currencies()

        session.get.assert_called_once_with("https://example.test/rates.zip", timeout=5)
        assert [c.code for c in currencies] == ["usd", "jpy", "chf"]

    def test_provider_is_callable(self):
        provider = EcbRateProvider(session=mock_session(content=zipped(ECB_CSV)))
        assert len(provider()) == 3

    def test_http_error(self):
        session = mock_session(error=requests.exceptions.HTTPError("503 Server Error"))
        with pytest.raises(RateFetchError, match="cannot download"):
            EcbRateProvider(session=session).fetch_currencies()

    def test_not_a_zip(self):
        session = mock_session(content=b"<html>maintenance</html>")
        with pytest.raises(RateFetchError, match="unexpected rate archive"):
            EcbRateProvider(session=session).fetch_currencies()

    def test_missing_csv_member(self):
        session = mock_session(content=zipped(ECB_CSV, name="other.csv"))
        with pytest.raises(RateFetchError):
            EcbRateProvider(session=session).fetch_currencies()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
