# sales/services/payment_service.py

"""
INVOICE PAYMENTS

- Only unpaid / partially paid sales accept payments.
- 0 < amount <= balance due.
- Status: amount_paid >= total -> paid, otherwise partially_paid.
- The customer's account balance shrinks by the same amount.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction

from customers.services import customer_service
from pos.services.money import money
from pos.services.records import PAYMENT_PAID, PAYMENT_PARTIALLY_PAID
from sales.models import Sale, SalePayment
from sales.services.sale_service import get_sale_by_transaction_id

logger = logging.getLogger(__name__)


def _amount(value) -> Decimal:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError("amount is required")
    try:
        amt = money(Decimal(str(value)))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("amount must be a valid decimal") from exc
    if amt <= 0:
        raise ValidationError("amount must be greater than zero")
    return amt


@transaction.atomic
def record_payment(*, transaction_id, amount, method: str, user=None) -> Sale:
    try:
        sale = get_sale_by_transaction_id(transaction_id, for_update=True)
    except Sale.DoesNotExist as exc:
        raise ValidationError(f"Sale {transaction_id} was not found.") from exc

    amt = _amount(amount)
    method = str(method or "").strip()
    if not method:
        raise ValidationError("method is required")

    if sale.payment_status == PAYMENT_PAID:
        raise ValidationError(f"Sale {sale.transaction_id} is already fully paid.")

    balance_due = sale.balance_due
    if amt > balance_due:
        raise ValidationError(f"Payment {amt} exceeds the balance due ({balance_due}).")

    recorded_by = user if getattr(user, "is_authenticated", False) else None

    SalePayment.objects.create(
        sale=sale,
        method=method,
        amount=amt,
        recorded_by=recorded_by,
    )

    sale.amount_paid = sale.amount_paid + amt
    sale.payment_status = PAYMENT_PAID if sale.amount_paid >= sale.total else PAYMENT_PARTIALLY_PAID
    sale.save(update_fields=["amount_paid", "payment_status"])

    if sale.customer_id:
        customer_service.settle_account(customer=sale.customer_id, amount=amt)

    logger.info(
        "Payment recorded",
        extra={
            "transaction_id": sale.transaction_id,
            "amount": str(amt),
            "payment_status": sale.payment_status,
        },
    )
    return sale
