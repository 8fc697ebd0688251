# sales/serializers/sale_return.py

from decimal import Decimal

from rest_framework import serializers

from pos.services.records import DEFAULT_RETURN_REASON, REFUND_ORIGINAL_METHOD
from pos.services.refund_engine import ReturnSelection
from sales.models import SaleReturn, SaleReturnItem


class SaleReturnItemSerializer(serializers.ModelSerializer):
    product_id = serializers.SerializerMethodField()

    class Meta:
        model = SaleReturnItem
        fields = ["product_id", "product_name", "quantity", "reason", "add_to_stock"]
        read_only_fields = fields

    def get_product_id(self, obj) -> str:
        return str(obj.sale_item.product_id)


class SaleReturnSerializer(serializers.ModelSerializer):
    """
    Immutable return record (read-only).
    """

    id = serializers.CharField(source="reference", read_only=True)
    original_sale_id = serializers.CharField(source="sale.transaction_id", read_only=True)
    timestamp = serializers.DateTimeField(source="created_at", read_only=True)
    returned_items = SaleReturnItemSerializer(source="items", many=True, read_only=True)

    class Meta:
        model = SaleReturn
        fields = [
            "id",
            "original_sale_id",
            "timestamp",
            "returned_items",
            "refund_amount",
            "refund_method",
        ]
        read_only_fields = fields


class RefundLineSerializer(serializers.Serializer):
    product_id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, read_only=True)
    reason = serializers.CharField(read_only=True)
    restock = serializers.BooleanField(read_only=True)
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)


class RefundQuoteSerializer(serializers.Serializer):
    """
    Read-only rendering of pos.services.refund_engine.RefundQuote.
    Amounts are shown at 2dp; the engine keeps full precision.
    """

    lines = RefundLineSerializer(many=True, read_only=True)
    refund_subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    proportion_of_sale = serializers.DecimalField(max_digits=20, decimal_places=6, read_only=True)
    refund_discount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    taxable_refund = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    refund_tax = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    refund_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    is_refundable = serializers.BooleanField(read_only=True)


# ============================================================
# COMMANDS
# ============================================================


class ReturnSelectionSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal("0"))
    reason = serializers.CharField(required=False, allow_blank=True, default=DEFAULT_RETURN_REASON)
    add_to_stock = serializers.BooleanField(required=False, default=False)

    def to_selection(self, data=None) -> ReturnSelection:
        data = data if data is not None else self.validated_data
        return ReturnSelection(
            product_id=str(data["product_id"]),
            quantity=data["quantity"],
            reason=data.get("reason") or DEFAULT_RETURN_REASON,
            restock=bool(data.get("add_to_stock", False)),
        )


class RefundQuoteInputSerializer(serializers.Serializer):
    items = ReturnSelectionSerializer(many=True, allow_empty=False)

    def selections(self) -> list[ReturnSelection]:
        child = ReturnSelectionSerializer()
        return [child.to_selection(item) for item in self.validated_data["items"]]


class ReturnCreateSerializer(RefundQuoteInputSerializer):
    transaction_id = serializers.CharField()
    refund_method = serializers.CharField(required=False, default=REFUND_ORIGINAL_METHOD)
