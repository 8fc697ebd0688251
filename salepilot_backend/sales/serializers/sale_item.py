# sales/serializers/sale_item.py

from rest_framework import serializers

from sales.models import SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    """
    Sale line (read-only), in the POS engine's SaleLine shape.
    """

    product_id = serializers.CharField(read_only=True)
    name = serializers.CharField(source="product_name", read_only=True)
    price = serializers.DecimalField(source="unit_price", max_digits=10, decimal_places=2, read_only=True)
    remaining_quantity = serializers.DecimalField(max_digits=12, decimal_places=3, read_only=True)

    class Meta:
        model = SaleItem
        fields = [
            "product_id",
            "name",
            "price",
            "quantity",
            "unit_of_measure",
            "cost_price",
            "returned_quantity",
            "remaining_quantity",
        ]
        read_only_fields = fields
