# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL:
    - stock lives on the product row (Decimal, 3dp so weighed goods work)
    - stock changes ONLY via products.services.inventory
      (every change writes a StockMovement)

    PRICE MODEL:
    - unit_price is the current selling price
    - the sale line snapshots it at add time; later changes never touch past sales
    """

    class UnitOfMeasure(models.TextChoices):
        UNIT = "unit", "Unit"
        KG = "kg", "Kilogram"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    barcode = models.CharField(max_length=128, blank=True, null=True, unique=True)
    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=128, blank=True, default="")

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    cost_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )

    stock = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )
    unit_of_measure = models.CharField(
        max_length=8,
        choices=UnitOfMeasure.choices,
        default=UnitOfMeasure.UNIT,
    )

    # Falls back to settings.POS["LOW_STOCK_THRESHOLD"] when empty.
    reorder_point = models.PositiveIntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["sku"], name="products_pr_sku_idx"),
            models.Index(fields=["name"], name="products_pr_name_idx"),
            models.Index(fields=["barcode"], name="products_pr_barcode_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) < 0:
            raise ValidationError("Unit price must be non-negative")

        if self.stock is not None and Decimal(self.stock) < 0:
            raise ValidationError("Stock cannot be negative")

    def is_low_stock(self, *, default_threshold: int) -> bool:
        threshold = self.reorder_point or default_threshold
        stock = Decimal(self.stock or 0)
        return Decimal("0") < stock <= Decimal(threshold)
