"""
ECB Reference Rate Provider

Downloads the daily euro foreign exchange reference rates published by
the European Central Bank. The archive holds a single CSV with a header
row of currency codes and one row of rates:

    Date, USD, JPY, BGN, ...,
    17 March 2023, 1.0623, 140.92, 1.9558, ...,

The ECB quotes units of currency per EUR. nummi stores rates the other
way round (1 unit of currency = to_eur EUR), so every quote is inverted.
"""

import csv
import io
import re
import zipfile
from decimal import Decimal
from typing import Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from nummi.config import ECB_RATES_URL
from nummi.models.entry import Currency
from nummi.models.money import div, parse_decimal, quantize


# Fractional digits kept after inverting an ECB quote
RATE_PLACES = 10

# Header of a currency column
_CODE_RE = re.compile(r"[a-z]{3}")


class RateFetchError(Exception):
    """Exchange rates could not be downloaded or understood."""
    pass


def parse_rates_csv(text: str) -> list[Currency]:
    """
    Parse the ECB CSV into currencies.

    Empty columns (the file ends every row with a comma), the Date
    column and any header that is not a three-letter code are
    skipped. Quotes that are not numbers (the ECB writes "N/A" for
    suspended currencies) are skipped too.

    Raises:
        RateFetchError: If the CSV has no header or no data row
    """
    reader = csv.reader(io.StringIO(text))
    try:
        headers = next(reader)
        record = next(reader)
    except StopIteration:
        raise RateFetchError("rate file has no data row") from None

    currencies = []
    for header, value in zip(headers, record):
        code = header.strip().lower()
        if not _CODE_RE.fullmatch(code):
            continue
        try:
            units_per_eur = parse_decimal(value.strip())
        except ValueError:
            continue
        if units_per_eur.is_zero():
            continue
        to_eur = quantize(div(Decimal(1), units_per_eur), RATE_PLACES)
        currencies.append(Currency(code=code, to_eur=to_eur))

    if not currencies:
        raise RateFetchError("rate file contains no currencies")
    return currencies


class EcbRateProvider:
    """
    Fetches current EUR reference rates from the ECB.

    Network errors are retried a few times before giving up.
    """

    def __init__(
        self,
        url: str = ECB_RATES_URL,
        csv_name: str = "eurofxref.csv",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self._url = url
        self._csv_name = csv_name
        self._timeout = timeout
        self._session = session or requests.Session()

    @retry(
        retry=retry_if_exception_type(requests.exceptions.ConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _download(self) -> bytes:
        response = self._session.get(self._url, timeout=self._timeout)
        response.raise_for_status()
        return response.content

    def fetch_currencies(self) -> list[Currency]:
        """
        Download and parse the current rates.

        Raises:
            RateFetchError: On network, archive or format errors
        """
        try:
            payload = self._download()
        except requests.exceptions.RequestException as e:
            raise RateFetchError(f"cannot download rates from {self._url}: {e}") from e

        try:
            with zipfile.ZipFile(io.BytesIO(payload)) as archive:
                raw = archive.read(self._csv_name)
        except (zipfile.BadZipFile, KeyError) as e:
            raise RateFetchError(f"unexpected rate archive from {self._url}: {e}") from e

        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise RateFetchError(f"cannot decode {self._csv_name}: {e}") from e
        return parse_rates_csv(text)

    def __call__(self) -> list[Currency]:
        return self.fetch_currencies()
