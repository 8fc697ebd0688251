# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a persisted POS transaction.

    GUARANTEES:
    - Money fields are frozen once written (see _IMMUTABLE_FIELDS)
    - Only payment_status / amount_paid / refund_status change later
      (payments append SalePayment rows, returns append SaleReturn rows)
    - transaction_id is server-assigned: SALE-YYYYMMDD-XXXXXXXX
    """

    PAYMENT_PAID = "paid"
    PAYMENT_UNPAID = "unpaid"
    PAYMENT_PARTIALLY_PAID = "partially_paid"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_UNPAID, "Unpaid"),
        (PAYMENT_PARTIALLY_PAID, "Partially paid"),
    ]

    REFUND_NONE = "none"
    REFUND_PARTIAL = "partially_refunded"
    REFUND_FULL = "fully_refunded"

    REFUND_STATUS_CHOICES = [
        (REFUND_NONE, "None"),
        (REFUND_PARTIAL, "Partially refunded"),
        (REFUND_FULL, "Fully refunded"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    transaction_id = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated receipt number",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Cashier who processed the sale",
    )

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )
    customer_name = models.CharField(max_length=255, blank=True, default="")

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    store_credit_used = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    payment_status = models.CharField(
        max_length=32,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PAID,
    )
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    due_date = models.DateTimeField(null=True, blank=True)

    refund_status = models.CharField(
        max_length=32,
        choices=REFUND_STATUS_CHOICES,
        default=REFUND_NONE,
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="sales_sale_created_idx"),
            models.Index(fields=["payment_status"], name="sales_sale_paystat_idx"),
            models.Index(fields=["refund_status"], name="sales_sale_refstat_idx"),
        ]

    _IMMUTABLE_FIELDS = (
        "transaction_id",
        "user_id",
        "customer_id",
        "subtotal",
        "discount",
        "tax",
        "total",
        "store_credit_used",
        "created_at",
    )

    def _validate_immutable(self, previous: "Sale"):
        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Sale {previous.transaction_id} is immutable. "
                    f"Field '{field}' cannot be changed."
                )

    @staticmethod
    def generate_transaction_id() -> str:
        prefix = timezone.now().strftime("SALE-%Y%m%d")
        return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.transaction_id:
            self.transaction_id = self.generate_transaction_id()

        super().save(*args, **kwargs)

    @property
    def balance_due(self) -> Decimal:
        return max(Decimal("0.00"), Decimal(self.total) - Decimal(self.amount_paid))

    def __str__(self):
        return f"{self.transaction_id} | {self.total}"
