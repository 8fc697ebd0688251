# pos/services/tender.py

"""
TENDER CALCULATOR (PURE, PRESENTATIONAL)

- change_due: how much cash goes back to the customer.
- suggested_tenders: quick-pick buttons for the cash drawer.
- is_cash_method: a payment method counts as cash when its NAME contains
  "cash" (case-insensitive). Payment methods carry no type field.
"""

from __future__ import annotations

from decimal import Decimal

from pos.services.money import ZERO, ceil_to, to_decimal

TEN = Decimal("10")
TWENTY = Decimal("20")


def is_cash_method(method_name) -> bool:
    return "cash" in str(method_name or "").lower()


def change_due(total, cash_received) -> Decimal:
    return max(ZERO, to_decimal(cash_received) - to_decimal(total))


def suggested_tenders(total) -> list[Decimal]:
    t = max(ZERO, to_decimal(total))
    options = [t, ceil_to(t, TEN), t + TEN, t + TWENTY]

    out: list[Decimal] = []
    for option in options:
        if option not in out:
            out.append(option)
    return out
