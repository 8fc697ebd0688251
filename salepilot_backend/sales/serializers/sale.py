# sales/serializers/sale.py

"""
SALE SERIALIZERS

Read:
- SaleSerializer: receipt / history shape (matches pos.services.records.SaleRecord)

Commands:
- SaleCreateSerializer: a finalized POS draft -> SaleRecord
- PaymentInputSerializer: invoice payment
"""

from decimal import Decimal

from rest_framework import serializers

from pos.services.records import (
    PAYMENT_PAID,
    PAYMENT_UNPAID,
    Payment,
    SaleLine,
    SaleRecord,
)
from sales.models import Sale, SalePayment
from sales.serializers.sale_item import SaleItemSerializer


class SalePaymentSerializer(serializers.ModelSerializer):
    id = serializers.CharField(source="reference", read_only=True)
    date = serializers.DateTimeField(source="paid_at", read_only=True)

    class Meta:
        model = SalePayment
        fields = ["id", "date", "amount", "method"]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    timestamp = serializers.DateTimeField(source="created_at", read_only=True)
    cart = SaleItemSerializer(source="items", many=True, read_only=True)
    payments = SalePaymentSerializer(many=True, read_only=True)
    customer_id = serializers.SerializerMethodField()
    cashier = serializers.SerializerMethodField()
    balance_due = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Sale
        fields = [
            "transaction_id",
            "timestamp",
            "cart",
            "subtotal",
            "discount",
            "tax",
            "total",
            "store_credit_used",
            "refund_status",
            "customer_id",
            "customer_name",
            "payment_status",
            "amount_paid",
            "balance_due",
            "due_date",
            "payments",
            "cashier",
        ]
        read_only_fields = fields

    def get_customer_id(self, obj):
        return str(obj.customer_id) if obj.customer_id else None

    def get_cashier(self, obj):
        return obj.user.get_username() if obj.user_id else None


# ============================================================
# COMMANDS
# ============================================================


class SaleLineInputSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    name = serializers.CharField(required=False, allow_blank=True, default="")
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal("0.001"))
    unit_of_measure = serializers.CharField(required=False, default="unit")
    cost_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=Decimal("0"))


class SaleCreateSerializer(serializers.Serializer):
    """
    Documents ONLY what the client is allowed to send.
    transaction_id / timestamp / amount_paid are server-assigned.
    """

    cart = SaleLineInputSerializer(many=True, allow_empty=False)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=Decimal("0"))
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=Decimal("0"))
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    store_credit_used = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=Decimal("0")
    )
    customer_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    payment_status = serializers.ChoiceField(choices=[PAYMENT_PAID, PAYMENT_UNPAID], default=PAYMENT_PAID)
    payment_method = serializers.CharField(required=False, default="Cash")
    due_date = serializers.DateTimeField(required=False, allow_null=True, default=None)

    def to_draft(self) -> SaleRecord:
        data = self.validated_data
        is_paid = data["payment_status"] == PAYMENT_PAID
        customer_id = data.get("customer_id")

        return SaleRecord(
            transaction_id="",
            cart=tuple(
                SaleLine(
                    product_id=line["product_id"],
                    name=line.get("name", ""),
                    price=line["price"],
                    quantity=line["quantity"],
                    unit_of_measure=line.get("unit_of_measure", "unit"),
                    cost_price=line.get("cost_price", Decimal("0")),
                )
                for line in data["cart"]
            ),
            subtotal=data["subtotal"],
            discount=data["discount"],
            tax=data["tax"],
            total=data["total"],
            store_credit_used=data["store_credit_used"],
            customer_id=str(customer_id) if customer_id else None,
            payment_status=data["payment_status"],
            amount_paid=data["total"] if is_paid else Decimal("0"),
            due_date=data.get("due_date"),
            payments=(Payment(amount=data["total"], method=data["payment_method"]),) if is_paid else (),
        )


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    method = serializers.CharField()
