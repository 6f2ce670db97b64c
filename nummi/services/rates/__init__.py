"""Exchange rate providers."""

from nummi.services.rates.ecb import EcbRateProvider, RateFetchError, parse_rates_csv

__all__ = ["EcbRateProvider", "RateFetchError", "parse_rates_csv"]
