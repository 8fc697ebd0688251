# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Read-only catalog shape consumed by the POS terminal.
- is_low_stock is derived server-side (reorder_point or the POS default).
"""

from rest_framework import serializers

from products.models import Product
from products.services.inventory import is_low_stock


class ProductSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(source="unit_price", max_digits=10, decimal_places=2, read_only=True)
    is_low_stock = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "barcode",
            "name",
            "category",
            "price",
            "cost_price",
            "stock",
            "unit_of_measure",
            "reorder_point",
            "is_low_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_is_low_stock(self, obj) -> bool:
        return is_low_stock(obj)
