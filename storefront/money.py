"""
Money Utilities - Safe Decimal operations for monetary values.

Cart prices are carried as Decimal from the moment a product is added and only
turned into floats at the API boundary.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Numeric = Union[str, int, float, Decimal]

MONEY_PRECISION = Decimal("0.01")
INTEGER_PRECISION = Decimal("1")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "RUB": "₽",
}

# Currencies displayed without minor units
INTEGER_CURRENCIES = {"RUB", "INR"}


def to_decimal(value: Union[Numeric, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Via str to keep 19.99 as 19.99
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Numeric, to_int: bool = False) -> Decimal:
    """
    Round monetary value to appropriate precision.

    Args:
        value: Value to round
        to_int: If True, round to whole units

    Returns:
        Rounded Decimal value
    """
    precision = INTEGER_PRECISION if to_int else MONEY_PRECISION
    return to_decimal(value).quantize(precision, rounding=ROUND_HALF_UP)


def multiply(value: Numeric, factor: Numeric) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def subtract(a: Numeric, b: Numeric) -> Decimal:
    """Safe subtraction of monetary values."""
    return to_decimal(a) - to_decimal(b)


def to_float(value: Numeric) -> float:
    """
    Convert Decimal to float for JSON serialization.

    Use only at API boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def format_money(value: Numeric, currency: str = "INR") -> str:
    """
    Format monetary value with currency symbol.

    Args:
        value: Value to format
        currency: Currency code (INR, USD, EUR, ...)

    Returns:
        Formatted string, e.g. "$1,300.00" or "1,300 ₹"
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)

    if currency in INTEGER_CURRENCIES:
        formatted = f"{int(round_money(value, to_int=True)):,}"
    else:
        formatted = f"{round_money(value):,.2f}"

    if currency in ("USD", "EUR", "GBP"):
        return f"{symbol}{formatted}"
    return f"{formatted} {symbol}"


def parse_money(value: Numeric) -> Decimal:
    """
    Strict counterpart of to_decimal for data read back from storage.

    Raises:
        ValueError: value is not a finite number (None, bools, "abc", "NaN",
            "Infinity" are all rejected)
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"not a money amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"not a money amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"not a money amount: {value!r}")
    return amount
