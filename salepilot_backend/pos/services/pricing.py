# pos/services/pricing.py

"""
PRICING ENGINE (PURE)

subtotal -> discount -> tax -> store credit -> total

Rules:
- Always derived from the canonical cart lines + inputs. A previous
  PricingSnapshot is never an input, so derive() is idempotent.
- No rounding here. Quantization to 2dp happens when a Sale draft is built.
- discount is clamped to [0, subtotal]; the taxable base is never negative.
- applied credit <= min(requested, customer credit, total before credit).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from pos.services.money import ZERO, to_decimal


@dataclass(frozen=True)
class PricingSnapshot:
    subtotal: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    tax_amount: Decimal
    total_before_credit: Decimal
    applied_store_credit: Decimal
    total: Decimal


def subtotal_of(lines: Iterable) -> Decimal:
    return sum((line.unit_price * line.quantity for line in lines), ZERO)


def derive(
    lines: Iterable,
    *,
    discount_amount=ZERO,
    tax_rate=ZERO,
    customer_store_credit=ZERO,
    requested_credit=ZERO,
) -> PricingSnapshot:
    subtotal = subtotal_of(lines)

    discount = min(max(ZERO, to_decimal(discount_amount)), subtotal)
    taxable_base = max(ZERO, subtotal - discount)

    rate = max(ZERO, to_decimal(tax_rate))
    tax_amount = taxable_base * rate
    total_before_credit = taxable_base + tax_amount

    applied = min(
        max(ZERO, to_decimal(requested_credit)),
        max(ZERO, to_decimal(customer_store_credit)),
        total_before_credit,
    )

    return PricingSnapshot(
        subtotal=subtotal,
        discount_amount=discount,
        taxable_base=taxable_base,
        tax_amount=tax_amount,
        total_before_credit=total_before_credit,
        applied_store_credit=applied,
        total=total_before_credit - applied,
    )


def credit_to_apply(total_before_credit, customer_store_credit) -> Decimal:
    """
    Amount requested when "apply store credit" is toggled on.
    It is all-or-nothing: everything the customer has, up to the bill.
    """
    return max(
        ZERO,
        min(to_decimal(total_before_credit), to_decimal(customer_store_credit)),
    )
