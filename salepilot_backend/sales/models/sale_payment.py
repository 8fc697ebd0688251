# sales/models/sale_payment.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class SalePayment(models.Model):
    """
    Immutable payment received against a Sale.

    RULES:
    - Immediate sales: exactly one payment of sale.total at creation.
    - Invoice sales: zero at creation, appended by payment_service.record_payment().
    - Write-once.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    reference = models.CharField(max_length=64, blank=True, default="")
    method = models.CharField(max_length=64)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sale_payments",
    )

    paid_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["paid_at"]
        indexes = [
            models.Index(fields=["sale"], name="sales_pay_sale_idx"),
            models.Index(fields=["method"], name="sales_pay_method_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("SalePayment records are immutable")
        if not self.reference:
            self.reference = f"PAY-{uuid.uuid4().hex[:10].upper()}"
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("SalePayment records cannot be deleted")

    def __str__(self):
        return f"{self.sale_id} | {self.method} | {self.amount}"
