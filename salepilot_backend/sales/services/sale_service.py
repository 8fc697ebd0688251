# sales/services/sale_service.py

"""
======================================================
PATH: sales/services/sale_service.py
======================================================
CORE SALES DOMAIN SERVICE

SINGLE SOURCE OF TRUTH for:
- Sale + SaleItem + SalePayment creation from an engine draft
- Stock deduction (through products.services.inventory)
- Store credit debit / account balance charge
- Sale -> SaleRecord mapping (the shape the POS engine consumes)

GUARANTEES:
- Fully atomic: any failure rolls back stock, credit and rows
- The client transaction_id (temp_...) is never persisted;
  the server assigns SALE-YYYYMMDD-XXXXXXXX
- Line prices are the draft's snapshot prices
"""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from customers.models import Customer
from customers.services import customer_service
from pos.services import quantity_policy
from pos.services.config import load_pos_config
from pos.services.money import ZERO, money
from pos.services.records import (
    PAYMENT_PAID,
    PAYMENT_PARTIALLY_PAID,
    PAYMENT_UNPAID,
    Payment,
    SaleLine,
    SaleRecord,
)
from products.models import Product
from products.services.inventory import deduct_stock
from sales.models import Sale, SaleItem, SalePayment

logger = logging.getLogger(__name__)

# drafts quantize each component separately, so totals may drift by a cent
ROUNDING_TOLERANCE = Decimal("0.02")


# ============================================================
# MAPPING
# ============================================================


def sale_to_record(sale: Sale) -> SaleRecord:
    items = list(sale.items.all().order_by("position", "id"))
    payments = list(sale.payments.all().order_by("paid_at"))

    return SaleRecord(
        transaction_id=sale.transaction_id,
        timestamp=sale.created_at,
        cart=tuple(
            SaleLine(
                product_id=str(item.product_id),
                name=item.product_name,
                price=Decimal(item.unit_price),
                quantity=Decimal(item.quantity),
                unit_of_measure=item.unit_of_measure,
                cost_price=Decimal(item.cost_price),
                returned_quantity=Decimal(item.returned_quantity),
            )
            for item in items
        ),
        subtotal=Decimal(sale.subtotal),
        discount=Decimal(sale.discount),
        tax=Decimal(sale.tax),
        total=Decimal(sale.total),
        store_credit_used=Decimal(sale.store_credit_used),
        refund_status=sale.refund_status,
        customer_id=str(sale.customer_id) if sale.customer_id else None,
        customer_name=sale.customer_name or None,
        payment_status=sale.payment_status,
        amount_paid=Decimal(sale.amount_paid),
        due_date=sale.due_date,
        payments=tuple(
            Payment(
                id=p.reference,
                date=p.paid_at,
                amount=Decimal(p.amount),
                method=p.method,
            )
            for p in payments
        ),
    )


# ============================================================
# LOOKUP
# ============================================================


def get_sale_by_transaction_id(transaction_id, *, for_update: bool = False) -> Sale:
    """
    Trimmed, case-insensitive. Raises Sale.DoesNotExist.
    """
    key = str(transaction_id or "").strip()
    if not key:
        raise Sale.DoesNotExist("Transaction ID is required")

    qs = Sale.objects.all()
    if for_update:
        qs = qs.select_for_update()
    return qs.get(transaction_id__iexact=key)


# ============================================================
# VALIDATION
# ============================================================


def _resolve_customer(draft: SaleRecord) -> Customer | None:
    if not draft.customer_id:
        return None
    try:
        return Customer.objects.get(id=draft.customer_id)
    except (Customer.DoesNotExist, ValueError, ValidationError) as exc:
        raise ValidationError(f"Customer {draft.customer_id} does not exist") from exc


def _resolve_products(draft: SaleRecord) -> dict[str, Product]:
    ids = [line.product_id for line in draft.cart]
    if len(set(ids)) != len(ids):
        raise ValidationError("Each product may appear only once in a sale.")

    try:
        products = {str(p.id): p for p in Product.objects.filter(id__in=ids)}
    except (ValueError, ValidationError) as exc:
        raise ValidationError("Sale contains an invalid product id.") from exc

    for line in draft.cart:
        product = products.get(line.product_id)
        if product is None:
            raise ValidationError(f'Product "{line.name or line.product_id}" does not exist.')
        if not product.is_active:
            raise ValidationError(f'Product "{product.name}" is no longer for sale.')
    return products


def _validate_draft(draft: SaleRecord) -> None:
    if not draft.cart:
        raise ValidationError("Cannot create a sale with no items.")

    for line in draft.cart:
        if line.quantity <= 0:
            raise ValidationError(f'Quantity for "{line.name}" must be greater than zero.')
        if line.price < 0:
            raise ValidationError(f'Price for "{line.name}" cannot be negative.')

    for name in ("subtotal", "discount", "tax", "total", "store_credit_used"):
        if getattr(draft, name) < 0:
            raise ValidationError(f"{name} cannot be negative.")

    lines_subtotal = sum((line.price * line.quantity for line in draft.cart), ZERO)
    if abs(money(lines_subtotal) - money(draft.subtotal)) > ROUNDING_TOLERANCE:
        raise ValidationError(
            f"Subtotal {money(draft.subtotal)} does not match the sale lines ({money(lines_subtotal)})."
        )

    expected_total = draft.subtotal - draft.discount + draft.tax - draft.store_credit_used
    if abs(money(expected_total) - money(draft.total)) > ROUNDING_TOLERANCE:
        raise ValidationError(f"Total {money(draft.total)} does not add up.")

    if draft.payment_status not in (PAYMENT_PAID, PAYMENT_UNPAID, PAYMENT_PARTIALLY_PAID):
        raise ValidationError(f"Unknown payment status: {draft.payment_status}")


# ============================================================
# CREATE
# ============================================================


@transaction.atomic
def create_sale(*, draft: SaleRecord, user=None) -> Sale:
    """
    Persist an engine draft.

    Paid drafts store one SalePayment of the full total.
    Unpaid drafts (charge to account) need a customer; the total is added
    to the customer's account balance and a due date is set.
    """
    _validate_draft(draft)
    customer = _resolve_customer(draft)
    products = _resolve_products(draft)

    total = money(draft.total)
    is_paid = draft.payment_status == PAYMENT_PAID

    if not is_paid and customer is None:
        raise ValidationError("A customer is required to charge a sale to an account.")

    if draft.store_credit_used > 0 and customer is None:
        raise ValidationError("Store credit can only be used with a customer.")

    now = timezone.now()
    due_date = None
    if not is_paid:
        due_date = draft.due_date or now + timedelta(days=load_pos_config().invoice_due_days)

    sale = Sale.objects.create(
        user=user if getattr(user, "is_authenticated", False) else None,
        customer=customer,
        customer_name=customer.name if customer else (draft.customer_name or ""),
        subtotal=money(draft.subtotal),
        discount=money(draft.discount),
        tax=money(draft.tax),
        total=total,
        store_credit_used=money(draft.store_credit_used),
        payment_status=PAYMENT_PAID if is_paid else PAYMENT_UNPAID,
        amount_paid=total if is_paid else ZERO,
        due_date=due_date,
        created_at=now,
    )

    for position, line in enumerate(draft.cart):
        product = products[line.product_id]
        SaleItem.objects.create(
            sale=sale,
            product=product,
            position=position,
            product_name=line.name or product.name,
            unit_price=money(line.price),
            cost_price=money(line.cost_price or product.cost_price),
            unit_of_measure=quantity_policy.normalize_unit(line.unit_of_measure),
            quantity=quantity_policy.round_quantity(line.quantity),
        )
        deduct_stock(
            product=product,
            quantity=line.quantity,
            reference=sale.transaction_id,
            user=sale.user,
        )

    if is_paid:
        method = draft.payments[0].method if draft.payments else "Cash"
        SalePayment.objects.create(
            sale=sale,
            reference=(draft.payments[0].id or "") if draft.payments else "",
            method=method,
            amount=total,
            recorded_by=sale.user,
            paid_at=now,
        )

    if customer is not None:
        customer_service.spend_store_credit(customer=customer, amount=sale.store_credit_used)
        if not is_paid:
            customer_service.charge_account(customer=customer, amount=total)

    logger.info(
        "Sale created",
        extra={
            "transaction_id": sale.transaction_id,
            "total": str(sale.total),
            "payment_status": sale.payment_status,
            "lines": len(draft.cart),
        },
    )
    return sale
