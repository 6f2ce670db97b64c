"""
Exact decimal arithmetic for amounts and rates.

DESIGN DECISION: Amounts and rates are decimal.Decimal end to end.
Binary floats are rejected at the boundary so that sums such as
0.10 + 0.20 are exactly 0.30 and formatting never shows binary
rounding artifacts.

All arithmetic runs in MONEY_CONTEXT, which has enough precision for
any realistic ledger; rounding only happens when a value is formatted
or explicitly quantized for display.
"""

import re
from decimal import ROUND_HALF_EVEN, Context, Decimal, InvalidOperation, localcontext
from typing import Union


MONEY_CONTEXT = Context(prec=34, rounding=ROUND_HALF_EVEN)

ZERO = Decimal("0")

# -digits[.digits], nothing else: no exponents, no NaN/Infinity, no "+"
_DECIMAL_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?")


def parse_decimal(text: str) -> Decimal:
    """
    Parse a plain decimal literal such as "-12.50".

    Raises:
        ValueError: If the text is not of the form -?digits(.digits)?
    """
    if not _DECIMAL_RE.fullmatch(text):
        raise ValueError(f"not a decimal number: {text!r}")
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"not a decimal number: {text!r}") from e


def to_decimal(value: Union[Decimal, int, str]) -> Decimal:
    """Coerce ints and strings to Decimal; floats are refused."""
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"refusing to build a monetary value from {type(value).__name__}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return parse_decimal(value.strip())


def quantize(value: Decimal, places: int = 2) -> Decimal:
    """Round to a fixed number of fractional digits (half-even)."""
    exponent = Decimal(1).scaleb(-places)
    with localcontext(MONEY_CONTEXT):
        result = value.quantize(exponent)
    # -0.00 prints as "-0.00"; normalise the sign of zero
    return result.copy_abs() if result.is_zero() else result


def format_decimal(value: Decimal, places: int = 2) -> str:
    """Format with exactly `places` fractional digits."""
    return f"{quantize(value, places):.{places}f}"


def add(a: Decimal, b: Decimal) -> Decimal:
    with localcontext(MONEY_CONTEXT):
        return a + b


def sub(a: Decimal, b: Decimal) -> Decimal:
    with localcontext(MONEY_CONTEXT):
        return a - b


def mul(a: Decimal, b: Decimal) -> Decimal:
    with localcontext(MONEY_CONTEXT):
        return a * b


def div(a: Decimal, b: Decimal) -> Decimal:
    """
    Raises:
        ZeroDivisionError: If b is zero
    """
    if b.is_zero():
        raise ZeroDivisionError("division of a monetary value by zero")
    with localcontext(MONEY_CONTEXT):
        return a / b


def dsum(values) -> Decimal:
    """Sum an iterable of Decimals, starting from an exact zero."""
    total = ZERO
    with localcontext(MONEY_CONTEXT):
        for v in values:
            total += v
    return total
