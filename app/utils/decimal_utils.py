# app/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import USD_TO_AED, CAD_TO_AED

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

_AED_RATES = {
    "AED": Decimal("1"),
    "USD": USD_TO_AED,
    "CAD": CAD_TO_AED,
}


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_aed(amount, currency) -> Decimal:
    """Convert with the fixed reporting rates. Unknown currencies pass through."""
    code = getattr(currency, "value", currency)
    rate = _AED_RATES.get(code, Decimal("1"))
    return to_decimal(to_decimal(amount) * rate)


def percent_of(part, whole) -> Decimal:
    whole = to_decimal(whole)
    if whole == 0:
        return ZERO
    return to_decimal(to_decimal(part) / whole * 100)
