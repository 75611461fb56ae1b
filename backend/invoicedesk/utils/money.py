"""
Money helpers.

Amounts are carried as Decimal everywhere and only rounded to cents when they
are shown to a user or written into a payload for the remote API.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from invoicedesk.config import settings

Number = Union[None, int, float, str, Decimal]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

_CURRENCY_BY_LOCALE = {
    "de-DE": "EUR",
    "en-US": "USD",
    "fr-FR": "EUR",
    "es-ES": "EUR",
}

_CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
}


def parse_decimal(value: Number) -> Decimal:
    """
    Strict conversion of user/API input to Decimal.

    - None or "" -> 0
    - floats go through str() so 0.1 stays 0.1 instead of its binary expansion
    - anything that is not a finite number ("abc", "1,5", NaN, Infinity)
      raises ValueError
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def to_decimal(value: Number) -> Decimal:
    """
    Lenient conversion used by the calculator: unparseable input counts as 0
    so a half-typed form value never breaks a totals recomputation.
    Use parse_decimal where bad input has to be reported.
    """
    try:
        return parse_decimal(value)
    except ValueError:
        return ZERO


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(value, high))


def non_negative(value: Number) -> Decimal:
    return max(ZERO, to_decimal(value))


def round_money(value: Number) -> Decimal:
    """Round to 2 fraction digits (kaufmännisch, half up)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def currency_for_locale(locale: str) -> str:
    return _CURRENCY_BY_LOCALE.get(locale, "EUR")


def format_number(amount: Number, locale: str = None) -> str:
    """
    Format with exactly 2 fraction digits and locale separators.

    de-DE/es-ES: 1.234,56    en-US: 1,234.56
    fr-FR: 1 234,56 (narrow no-break space, as Intl.NumberFormat)
    """
    locale = locale or settings.LOCALE
    rounded = round_money(amount)
    text = f"{rounded:,.2f}"  # 1,234.56
    if locale == "en-US":
        return text
    if locale == "fr-FR":
        return text.replace(",", " ").replace(".", ",")
    return text.replace(",", "X").replace(".", ",").replace("X", ".")


def format_currency(amount: Number, locale: str = None) -> str:
    """Format a money amount for display, e.g. 1.234,56 € (de-DE) or $1,234.56 (en-US)."""
    locale = locale or settings.LOCALE
    symbol = _CURRENCY_SYMBOLS.get(currency_for_locale(locale), "€")
    number = format_number(amount, locale)
    if locale == "en-US":
        if number.startswith("-"):
            return f"-{symbol}{number[1:]}"
        return f"{symbol}{number}"
    return f"{number} {symbol}"
