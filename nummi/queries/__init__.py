"""Aggregation package."""

from nummi.queries.aggregator import (
    ConversionTable,
    MissingRateError,
    conversion_table,
    total,
    total_with_conversion,
    unique_currencies,
)
from nummi.queries.series import (
    EntryOrderError,
    SeriesRow,
    format_series,
    month_range,
    monthly_series,
)

__all__ = [
    "ConversionTable",
    "EntryOrderError",
    "MissingRateError",
    "SeriesRow",
    "conversion_table",
    "format_series",
    "month_range",
    "monthly_series",
    "total",
    "total_with_conversion",
    "unique_currencies",
]
