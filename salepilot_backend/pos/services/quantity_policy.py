# pos/services/quantity_policy.py

"""
QUANTITY POLICY

Pure functions for line quantities:
- discrete units step by 1
- weighed goods (kg) step by 0.1
- every stored quantity is rounded to 0.001 to absorb drift

No side effects. No errors: any input is coerced to a valid quantity.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pos.services.money import ZERO, to_decimal

UNIT = "unit"
KG = "kg"

UNITS_OF_MEASURE = (UNIT, KG)

QUANTITY_PLACES = Decimal("0.001")

_STEPS = {
    UNIT: Decimal("1"),
    KG: Decimal("0.1"),
}


def normalize_unit(unit_of_measure) -> str:
    u = str(unit_of_measure or "").strip().lower()
    return u if u in _STEPS else UNIT


def step(unit_of_measure) -> Decimal:
    return _STEPS[normalize_unit(unit_of_measure)]


def round_quantity(quantity) -> Decimal:
    return to_decimal(quantity).quantize(QUANTITY_PLACES, rounding=ROUND_HALF_UP)


def clamp(quantity, ceiling) -> Decimal:
    upper = max(ZERO, round_quantity(ceiling))
    return min(max(ZERO, round_quantity(quantity)), upper)
