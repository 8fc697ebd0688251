# sales/models/sale_return.py

"""
======================================================
PATH: sales/models/sale_return.py
======================================================
SALE RETURN (PARTIAL RETURN LEDGER)

Purpose:
- Immutable, append-only record of a customer return.
- One SaleReturn per submission, one SaleReturnItem per returned line.
- Source of truth for refund amounts and restock decisions.

Design guarantees:
- Append-only (no updates, no deletes)
- Many returns per sale allowed
- Over-returning is prevented at the service layer
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class SaleReturn(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    reference = models.CharField(max_length=64, unique=True)

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="returns",
    )

    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    refund_method = models.CharField(
        max_length=64,
        help_text="original_method, store_credit, or a payment method name",
    )

    processed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sale_returns",
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="sales_ret_sale_created_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("SaleReturn records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("SaleReturn records cannot be deleted")

    def __str__(self):
        return f"{self.reference} | {self.sale_id} | {self.refund_amount}"


class SaleReturnItem(models.Model):
    sale_return = models.ForeignKey(
        SaleReturn,
        on_delete=models.CASCADE,
        related_name="items",
    )

    sale_item = models.ForeignKey(
        "sales.SaleItem",
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    product_name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    reason = models.CharField(max_length=255, default="Other")
    add_to_stock = models.BooleanField(default=False)

    class Meta:
        ordering = ["id"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("SaleReturnItem records are immutable")
        if self.quantity is None or Decimal(self.quantity) <= 0:
            raise ValueError("quantity must be greater than zero")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("SaleReturnItem records cannot be deleted")

    def __str__(self):
        return f"Return | {self.sale_item_id} | qty={self.quantity}"
