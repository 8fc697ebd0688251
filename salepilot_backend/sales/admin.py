# sales/admin.py

from django.contrib import admin

from sales.models import Sale, SaleItem, SalePayment, SaleReturn, SaleReturnItem


# ======================================================
# SALE ADMIN
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "product_name",
        "unit_price",
        "cost_price",
        "unit_of_measure",
        "quantity",
        "returned_quantity",
    )


class SalePaymentInline(admin.TabularInline):
    model = SalePayment
    extra = 0
    can_delete = False
    readonly_fields = ("reference", "method", "amount", "recorded_by", "paid_at")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "transaction_id",
        "customer_name",
        "total",
        "payment_status",
        "amount_paid",
        "refund_status",
        "created_at",
    )
    readonly_fields = (
        "transaction_id",
        "user",
        "customer",
        "customer_name",
        "subtotal",
        "discount",
        "tax",
        "total",
        "store_credit_used",
        "payment_status",
        "amount_paid",
        "due_date",
        "refund_status",
        "created_at",
    )
    search_fields = ("transaction_id", "customer_name")
    list_filter = ("payment_status", "refund_status", "created_at")
    inlines = [SaleItemInline, SalePaymentInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# RETURNS ADMIN (APPEND-ONLY LEDGER)
# ======================================================


class SaleReturnItemInline(admin.TabularInline):
    model = SaleReturnItem
    extra = 0
    can_delete = False
    readonly_fields = ("sale_item", "product_name", "quantity", "reason", "add_to_stock")


@admin.register(SaleReturn)
class SaleReturnAdmin(admin.ModelAdmin):
    list_display = ("reference", "sale", "refund_amount", "refund_method", "processed_by", "created_at")
    readonly_fields = ("reference", "sale", "refund_amount", "refund_method", "processed_by", "created_at")
    search_fields = ("reference", "sale__transaction_id")
    inlines = [SaleReturnItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
