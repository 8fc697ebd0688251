# customers/serializers/customer.py

from rest_framework import serializers

from customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    """
    Read-only customer shape for the POS terminal.
    Balances are server-owned and never written from here.
    """

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "notes",
            "store_credit",
            "account_balance",
            "created_at",
        ]
        read_only_fields = fields
