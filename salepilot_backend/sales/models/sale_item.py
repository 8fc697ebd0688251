# sales/models/sale_item.py

from decimal import Decimal

from django.db import models


class SaleItem(models.Model):
    """
    One line of a Sale.

    Snapshots (never refreshed from the catalog):
    - product_name, unit_price, cost_price, unit_of_measure

    returned_quantity is the ONLY mutable field; it grows with each return
    and never exceeds quantity.
    """

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="sale_items",
    )

    position = models.PositiveIntegerField(default=0)

    product_name = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    cost_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    unit_of_measure = models.CharField(max_length=8, default="unit")

    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    returned_quantity = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )

    class Meta:
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(fields=["sale", "product"], name="sales_item_unique_product"),
        ]

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.unit_price) * Decimal(self.quantity)

    @property
    def remaining_quantity(self) -> Decimal:
        return max(Decimal("0"), Decimal(self.quantity) - Decimal(self.returned_quantity))

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
