"""Numeric coercion and rounding shared by the reconciler and aggregator."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re
from typing import Any


ZERO = Decimal("0")
HUNDRED = Decimal("100")
_CENT = Decimal("0.01")

_SEPARATOR_PATTERN = re.compile(r"[\s,]")


def to_decimal(value: Any) -> Decimal:
    """Coerce a raw field value to Decimal.

    Rules:
    - None, empty or whitespace-only text -> 0
    - Text with thousand separators ("1,234.50") is accepted
    - Non-numeric text, NaN and infinities -> 0
    - bool is not a number here -> 0
    - Never raises
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        result = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = _SEPARATOR_PATTERN.sub("", value)
        if not cleaned:
            return ZERO
        try:
            result = Decimal(cleaned)
        except InvalidOperation:
            return ZERO
    else:
        try:
            result = Decimal(str(float(value)))
        except (TypeError, ValueError, InvalidOperation):
            return ZERO

    if not result.is_finite():
        return ZERO
    return result


def round2(value: Any) -> Decimal:
    """Round to 2 decimal places, half-up.

    Decimal's ROUND_HALF_UP rounds ties away from zero, so -0.005 becomes
    -0.01. Values too large to quantize in the current context are returned
    unrounded.
    """
    number = to_decimal(value)
    try:
        return number.quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return number


def effective_rate(gst_percentage: Any, tax_enabled: bool) -> Decimal:
    """Return the tax rate to compute with: the line rate, or 0 when tax is off.

    Out-of-range rates are not clamped.
    """
    if not tax_enabled:
        return ZERO
    return to_decimal(gst_percentage)
