# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY CORE SERVICES

Purpose:
- Deduct stock when a sale is persisted.
- Restock when a returned item is flagged add_to_stock.
- Expose read-only catalog snapshots for the POS engine.

Rules:
- Quantities are Decimal, 3dp (weighed goods).
- Every stock change writes an immutable StockMovement.
- Rows are locked (select_for_update) before any change.
- Stock never goes negative: an oversell raises ValidationError.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from pos.services.records import ProductSnapshot
from products.models import Product, StockMovement

QTY_PLACES = Decimal("0.001")


def _to_quantity(value, *, field_name="quantity") -> Decimal:
    if value is None or value == "" or value == "null" or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    try:
        qty = Decimal(str(value)).quantize(QTY_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"{field_name} must be a valid decimal") from exc
    if qty <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return qty


def _lock(product) -> Product:
    product_id = getattr(product, "id", product)
    try:
        return Product.objects.select_for_update().get(id=product_id)
    except Product.DoesNotExist as exc:
        raise ValidationError(f"Product {product_id} does not exist") from exc


def default_low_stock_threshold() -> int:
    return int(getattr(settings, "POS", {}).get("LOW_STOCK_THRESHOLD", 5))


def is_low_stock(product: Product, *, threshold: int | None = None) -> bool:
    if threshold is None:
        threshold = default_low_stock_threshold()
    return product.is_low_stock(default_threshold=threshold)


def to_snapshot(product: Product) -> ProductSnapshot:
    return ProductSnapshot(
        id=str(product.id),
        name=product.name,
        price=Decimal(product.unit_price),
        stock=Decimal(product.stock),
        unit_of_measure=product.unit_of_measure,
        cost_price=Decimal(product.cost_price or 0),
        sku=product.sku,
        barcode=product.barcode,
        is_active=product.is_active,
    )


def catalog_snapshot(*, active_only: bool = True) -> list[ProductSnapshot]:
    qs = Product.objects.all().order_by("name")
    if active_only:
        qs = qs.filter(is_active=True)
    return [to_snapshot(p) for p in qs]


@transaction.atomic
def deduct_stock(*, product, quantity, reference: str, user=None) -> Product:
    """
    SALE: stock -= quantity.
    """
    qty = _to_quantity(quantity)
    locked = _lock(product)

    if qty > locked.stock:
        raise ValidationError(
            f'Insufficient stock for "{locked.name}": requested {qty}, available {locked.stock}'
        )

    locked.stock = locked.stock - qty
    locked.save(update_fields=["stock", "updated_at"])

    StockMovement.objects.create(
        product=locked,
        movement_type=StockMovement.MovementType.OUT,
        reason=StockMovement.Reason.SALE,
        quantity=qty,
        stock_after=locked.stock,
        reference=reference,
        performed_by=user,
    )
    return locked


@transaction.atomic
def restock(*, product, quantity, reference: str, user=None) -> Product:
    """
    RETURN: stock += quantity (only for items flagged add_to_stock).
    """
    qty = _to_quantity(quantity)
    locked = _lock(product)

    locked.stock = locked.stock + qty
    locked.save(update_fields=["stock", "updated_at"])

    StockMovement.objects.create(
        product=locked,
        movement_type=StockMovement.MovementType.IN,
        reason=StockMovement.Reason.RETURN,
        quantity=qty,
        stock_after=locked.stock,
        reference=reference,
        performed_by=user,
    )
    return locked
