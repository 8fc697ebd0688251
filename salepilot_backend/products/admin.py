# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Product fields are editable except stock.
- Stock changes only through sales / returns (StockMovement ledger).
- StockMovement rows are view-only.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, StockMovement


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "category",
        "unit_price",
        "stock",
        "unit_of_measure",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "unit_of_measure", "category")
    search_fields = ("sku", "name", "barcode")
    ordering = ("name",)
    readonly_fields = ("created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        # New products may be created with opening stock.
        if obj is None:
            return self.readonly_fields
        return self.readonly_fields + ("stock",)


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "product",
        "reason",
        "movement_type",
        "quantity",
        "stock_after",
        "reference",
        "created_at",
    )
    list_filter = ("reason", "movement_type", "created_at")
    search_fields = ("reference", "product__name", "product__sku")
    ordering = ("-created_at",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False
