# accounting/amounts.py
"""Money helpers. All amounts are Decimals rounded half-up to cents."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

MONEY_Q = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value, default: Decimal = ZERO) -> Decimal:
    """Coerce int/float/str/None to Decimal; junk becomes ``default``."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def money(value) -> Decimal:
    return to_decimal(value).quantize(MONEY_Q, rounding=ROUND_HALF_UP)


def percent_of(amount, rate) -> Decimal:
    """``amount * rate / 100`` rounded to cents."""
    return money(to_decimal(amount) * to_decimal(rate) / Decimal("100"))
