# pos/services/money.py

"""
MONEY + DECIMAL HELPERS

Rules:
- All engine arithmetic is Decimal. Floats are converted through str()
  so 0.1 stays 0.1.
- Intermediate values are NOT rounded. Only persisted money is quantized
  (2dp, ROUND_HALF_UP) when a draft Sale / Return is assembled.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value, *, default: Decimal = ZERO) -> Decimal:
    """
    Lenient coercion used at the engine boundary.
    Blank / invalid / non-finite input becomes `default`.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, Decimal):
        d = value
    else:
        raw = str(value).strip()
        if not raw:
            return default
        try:
            d = Decimal(raw)
        except (InvalidOperation, ValueError):
            return default

    if not d.is_finite():
        return default
    return d


def money(value) -> Decimal:
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def ceil_to(value, step) -> Decimal:
    """Round `value` up to the next multiple of `step`."""
    v = to_decimal(value)
    s = to_decimal(step)
    if s <= ZERO:
        return v
    return (v / s).to_integral_value(rounding=ROUND_CEILING) * s


def format_currency(amount, currency) -> str:
    """
    Render an amount with the configured symbol, e.g. "$12.50" or "12.50 kr".
    `currency` is a pos.services.config.Currency.
    """
    formatted = f"{money(amount):.2f}"
    if getattr(currency, "position", "before") == "after":
        return f"{formatted}{currency.symbol}"
    return f"{currency.symbol}{formatted}"
