"""
Rupiah formatting, parsing and rounding.

This module owns every conversion between raw editor input, Decimal money
values and the strings shown on a document:
- Numbers: Permissive coercion of user input into Decimal (never raises)
- Rounding: Two-place rounding applied to every derived money figure
- Currency: id-ID rupiah display ("Rp 1.500.000") and its inverse
- Dates: id-ID long date display ("5 Maret 2024")

Design Decisions:
- Decimal for all monetary values to avoid floating-point errors
- Floats enter through their shortest repr, so 1.005 rounds to 1.01
- Rupiah display drops fractional digits; parsing recovers integer precision
- Unparseable input degrades to zero instead of surfacing an error
- Magnitudes of 1e100 and above count as unparseable, which keeps every
  derived product inside the decimal exponent range
- Rounding widens the decimal precision to fit the value, so very large
  amounts keep their cents
"""

import logging
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

logger = logging.getLogger(__name__)


CURRENCY_SYMBOL = "Rp"

# id-ID places a no-break space between the symbol and the amount
CURRENCY_SEPARATOR = "\u00a0"

ZERO = Decimal("0")
CENT = Decimal("0.01")
UNIT = Decimal("1")

# Inputs at or above 1e100 in magnitude are read as non-numeric
MAX_ADJUSTED_EXPONENT = 99

INDONESIAN_MONTHS = [
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
]

# Leading numeric prefix, the way a lenient float parser reads "12.5 pcs"
NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

SYMBOL_PATTERN = re.compile(rf"{CURRENCY_SYMBOL}\s?")


def _bounded(value: Decimal) -> Decimal:
    """Zero for non-finite values and magnitudes past MAX_ADJUSTED_EXPONENT."""
    if not value.is_finite():
        return ZERO
    if value and value.adjusted() > MAX_ADJUSTED_EXPONENT:
        logger.debug(f"Out-of-range input {value} coerced to 0")
        return ZERO
    return value


def _quantize(value: Decimal, exponent: Decimal) -> Decimal:
    """Round half up to the exponent of `exponent` without losing integer digits."""
    with localcontext() as context:
        context.prec = max(context.prec, value.adjusted() - exponent.as_tuple().exponent + 2)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)


def _parse_numeric_prefix(text: str) -> Decimal | None:
    """Parse the numeric prefix of text, or None when there is none."""
    match = NUMERIC_PREFIX.match(text.strip())
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def to_decimal(value: Any) -> Decimal:
    """
    Coerce raw input into a finite Decimal.

    Handles:
    - Decimal, int and float values (non-finite or out-of-range values become zero)
    - Numeric strings, including a trailing unit ("3 pcs" -> 3)
    - Anything else (None, "", "abc", booleans) -> 0

    Args:
        value: Raw field value from the editor or an imported document

    Returns:
        A finite Decimal; zero when the input is not numeric
    """
    if isinstance(value, bool) or value is None:
        return ZERO

    if isinstance(value, Decimal):
        return _bounded(value)

    if isinstance(value, int):
        return _bounded(Decimal(value))

    if isinstance(value, float):
        return _bounded(Decimal(repr(value)))

    if isinstance(value, str):
        parsed = _parse_numeric_prefix(value)
        if parsed is None:
            if value.strip():
                logger.debug(f"Non-numeric input '{value}' coerced to 0")
            return ZERO
        return _bounded(parsed)

    logger.debug(f"Unsupported numeric input of type {type(value).__name__} coerced to 0")
    return ZERO


def round2(value: Any) -> Decimal:
    """
    Round to two decimal places, half away from zero.

    Example:
        round2(Decimal("2.345"))  # Decimal("2.35")
        round2(1.005)             # Decimal("1.01")
    """
    return _quantize(to_decimal(value), CENT)


def format_currency(amount: Any) -> str:
    """
    Format an amount as an id-ID rupiah string without fractional digits.

    The amount is rounded to cents first and then to whole rupiah, so
    1499999.995 displays as "Rp 1.500.000".

    Args:
        amount: Money value; missing or non-numeric input formats as zero

    Returns:
        Display string such as "Rp 1.500.000" or "-Rp 1.500"
    """
    whole = _quantize(round2(amount), UNIT)
    digits = f"{abs(int(whole)):,}".replace(",", ".")
    sign = "-" if whole < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{CURRENCY_SEPARATOR}{digits}"


def parse_currency(text: Any) -> Decimal:
    """
    Parse a rupiah display string back into a Decimal.

    Strips the currency symbol, removes "." thousands separators and reads
    "," as the decimal mark: "Rp 1.234,5" -> Decimal("1234.5").
    Empty or unparseable input yields zero.
    """
    if not isinstance(text, str) or not text:
        return ZERO

    cleaned = SYMBOL_PATTERN.sub("", text)
    cleaned = cleaned.replace(".", "").replace(",", ".").strip()

    parsed = _parse_numeric_prefix(cleaned)
    if parsed is None:
        logger.debug(f"Failed to parse currency '{text}', using 0")
        return ZERO
    return _bounded(parsed)


def format_number(value: Any) -> str:
    """Render a quantity or rate without trailing zeros ("2", "7.5")."""
    number = to_decimal(value)
    if number == number.to_integral_value():
        return str(int(number))
    return f"{number.normalize():f}"


def format_percent(value: Any) -> str:
    """Render a rate as a percentage label ("11%")."""
    return f"{format_number(value)}%"


def format_date(value: str | date | None) -> str:
    """
    Format an ISO date as an id-ID long date.

    "2024-03-05" -> "5 Maret 2024". Empty input gives an empty string;
    text that is not an ISO date is returned unchanged.
    """
    if not value:
        return ""

    if isinstance(value, date):
        parsed = value
    else:
        try:
            parsed = datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            logger.debug(f"Date '{value}' is not ISO formatted, shown as-is")
            return value

    return f"{parsed.day} {INDONESIAN_MONTHS[parsed.month - 1]} {parsed.year}"
