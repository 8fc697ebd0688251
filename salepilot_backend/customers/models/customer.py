# customers/models/customer.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Customer(models.Model):
    """
    A registered customer.

    BALANCES:
    - store_credit: prepaid balance the customer can spend (returns may add to it)
    - account_balance: receivable from charge-to-account (invoice) sales

    Both change ONLY via customers.services.customer_service.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    store_credit = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    account_balance = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="customers_name_idx"),
            models.Index(fields=["phone"], name="customers_phone_idx"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.store_credit is not None and Decimal(self.store_credit) < 0:
            raise ValidationError("store_credit cannot be negative")
        if self.account_balance is not None and Decimal(self.account_balance) < 0:
            raise ValidationError("account_balance cannot be negative")
