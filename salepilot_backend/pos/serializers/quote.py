# pos/serializers/quote.py

"""
POS QUOTE INPUT

A terminal posts its current register state; the server prices it with the
same engine the terminal runs (cart clamping, pricing, tendering).

Each line gives either a quantity or, for weighed goods, a target amount.
"""

from decimal import Decimal

from rest_framework import serializers


class QuoteLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, required=False, allow_null=True, default=None
    )
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True,
        default=None,
        help_text="Target money amount (weighed goods only)",
    )


class QuoteInputSerializer(serializers.Serializer):
    lines = QuoteLineInputSerializer(many=True, allow_empty=True)
    discount_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=Decimal("0")
    )
    customer_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    use_store_credit = serializers.BooleanField(required=False, default=False)
    payment_method = serializers.CharField(required=False, allow_blank=True, default="")
    cash_received = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=Decimal("0")
    )
