# sales/services/return_service.py

"""
======================================================
PATH: sales/services/return_service.py
======================================================
RETURN SERVICE (PARTIAL RETURNS)

Responsibilities:
- Validate a return draft against the persisted sale (row-locked)
- Append SaleReturn + SaleReturnItem rows
- Advance SaleItem.returned_quantity and Sale.refund_status
- Restock items flagged add_to_stock
- Grant store credit for store_credit refunds

Rules:
- Cumulative returned quantity never exceeds the sold quantity.
- The refund amount is recomputed here from the locked sale; the
  draft's amount is informational only.
- A return must refund more than zero.
- Fully atomic.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from customers.services import customer_service
from pos.services import quantity_policy
from pos.services.config import load_pos_config
from pos.services.money import money
from pos.services.records import (
    REFUND_STORE_CREDIT,
    ReturnedItem,
    ReturnRecord,
)
from pos.services.refund_engine import ReturnSelection, quote_refund, refund_status_for
from products.services.inventory import restock
from sales.models import Sale, SaleReturn, SaleReturnItem
from sales.services.sale_service import get_sale_by_transaction_id, sale_to_record

logger = logging.getLogger(__name__)


def return_to_record(sale_return: SaleReturn) -> ReturnRecord:
    return ReturnRecord(
        id=sale_return.reference,
        original_sale_id=sale_return.sale.transaction_id,
        timestamp=sale_return.created_at,
        returned_items=tuple(
            ReturnedItem(
                product_id=str(item.sale_item.product_id),
                product_name=item.product_name,
                quantity=Decimal(item.quantity),
                reason=item.reason,
                add_to_stock=item.add_to_stock,
            )
            for item in sale_return.items.select_related("sale_item").order_by("id")
        ),
        refund_amount=Decimal(sale_return.refund_amount),
        refund_method=sale_return.refund_method,
    )


def _reference_for(draft: ReturnRecord) -> str:
    ref = str(draft.id or "").strip()
    if ref and not SaleReturn.objects.filter(reference=ref).exists():
        return ref
    return f"RET-{uuid.uuid4().hex[:12].upper()}"


def _merge_items(items) -> dict[str, ReturnedItem]:
    merged: dict[str, ReturnedItem] = {}
    for item in items:
        prev = merged.get(item.product_id)
        if prev is None:
            merged[item.product_id] = item
        else:
            merged[item.product_id] = ReturnedItem(
                product_id=item.product_id,
                product_name=prev.product_name,
                quantity=prev.quantity + item.quantity,
                reason=prev.reason,
                add_to_stock=prev.add_to_stock or item.add_to_stock,
            )
    return merged


@transaction.atomic
def submit_return(*, draft: ReturnRecord, user=None) -> SaleReturn:
    try:
        sale = get_sale_by_transaction_id(draft.original_sale_id, for_update=True)
    except Sale.DoesNotExist as exc:
        raise ValidationError(f"Sale {draft.original_sale_id} was not found.") from exc

    requested = _merge_items(draft.returned_items)
    if not requested:
        raise ValidationError("Select at least one item to return.")

    items_by_product = {
        str(item.product_id): item for item in sale.items.select_for_update().select_related("product")
    }

    # --------------------------------------------------
    # VALIDATE AGAINST REMAINING QUANTITIES
    # --------------------------------------------------
    for product_id, item in requested.items():
        sale_item = items_by_product.get(product_id)
        if sale_item is None:
            raise ValidationError(f'"{item.product_name or product_id}" is not part of sale {sale.transaction_id}.')

        qty = quantity_policy.round_quantity(item.quantity)
        if qty <= 0:
            raise ValidationError(f'Return quantity for "{sale_item.product_name}" must be greater than zero.')
        if qty > sale_item.remaining_quantity:
            raise ValidationError(
                f'Cannot return {qty} of "{sale_item.product_name}": '
                f"only {sale_item.remaining_quantity} remaining."
            )

    if draft.refund_method == REFUND_STORE_CREDIT and sale.customer_id is None:
        raise ValidationError("A store credit refund requires a sale with a customer.")

    # --------------------------------------------------
    # AUTHORITATIVE REFUND AMOUNT
    # --------------------------------------------------
    quote = quote_refund(
        sale=sale_to_record(sale),
        selections=[
            ReturnSelection(
                product_id=product_id,
                quantity=item.quantity,
                reason=item.reason,
                restock=item.add_to_stock,
            )
            for product_id, item in requested.items()
        ],
        tax_rate=load_pos_config().tax_rate,
    )
    refund_amount = money(quote.refund_total)
    if refund_amount <= 0:
        raise ValidationError("Nothing to refund.")

    if draft.refund_amount and abs(money(draft.refund_amount) - refund_amount) > Decimal("0.01"):
        logger.warning(
            "Refund amount differs from client quote",
            extra={
                "transaction_id": sale.transaction_id,
                "client_amount": str(draft.refund_amount),
                "server_amount": str(refund_amount),
            },
        )

    sale_return = SaleReturn.objects.create(
        reference=_reference_for(draft),
        sale=sale,
        refund_amount=refund_amount,
        refund_method=draft.refund_method,
        processed_by=user if getattr(user, "is_authenticated", False) else None,
    )

    for product_id, item in requested.items():
        sale_item = items_by_product[product_id]
        qty = quantity_policy.round_quantity(item.quantity)

        SaleReturnItem.objects.create(
            sale_return=sale_return,
            sale_item=sale_item,
            product_name=sale_item.product_name,
            quantity=qty,
            reason=item.reason,
            add_to_stock=item.add_to_stock,
        )

        sale_item.returned_quantity = min(sale_item.quantity, sale_item.returned_quantity + qty)
        sale_item.save(update_fields=["returned_quantity"])

        if item.add_to_stock:
            restock(
                product=sale_item.product,
                quantity=qty,
                reference=sale_return.reference,
                user=sale_return.processed_by,
            )

    sale.refund_status = refund_status_for(sale_to_record(sale).cart)
    sale.save(update_fields=["refund_status"])

    if draft.refund_method == REFUND_STORE_CREDIT:
        customer_service.grant_store_credit(customer=sale.customer_id, amount=refund_amount)

    logger.info(
        "Return stored",
        extra={
            "return_id": sale_return.reference,
            "transaction_id": sale.transaction_id,
            "refund_amount": str(refund_amount),
            "refund_status": sale.refund_status,
        },
    )
    return sale_return
