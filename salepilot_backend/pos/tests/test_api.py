# pos/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from customers.models import Customer
from products.models import Product

User = get_user_model()

POS_SETTINGS = {
    "TAX_RATE_PERCENT": "10",
    "PAYMENT_METHODS": ["Cash", "Card"],
    "CURRENCY_SYMBOL": "$",
}


@override_settings(POS=POS_SETTINGS)
class PosConfigApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=User.objects.create_user(username="u", password="password123"))

    def test_config(self):
        res = self.client.get("/api/pos/config/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["tax_rate_percent"], Decimal("10"))
        self.assertEqual(
            res.data["payment_methods"],
            [{"id": "cash", "name": "Cash"}, {"id": "card", "name": "Card"}],
        )
        self.assertEqual(res.data["currency"]["code"], "USD")

    @override_settings(POS={"TAX_RATE_PERCENT": "-1"})
    def test_misconfigured_register(self):
        res = self.client.get("/api/pos/config/")

        self.assertEqual(res.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(res.data["error"]["code"], "POS_MISCONFIGURED")

    def test_requires_authentication(self):
        res = APIClient().get("/api/pos/config/")

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


@override_settings(POS=POS_SETTINGS)
class PricingQuoteApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=User.objects.create_user(username="u", password="password123"))

        self.apples = Product.objects.create(
            name="Apples", sku="APL", unit_price=Decimal("2.50"), stock=Decimal("10")
        )
        self.cheese = Product.objects.create(
            name="Cheese",
            sku="CHS",
            unit_price=Decimal("12.00"),
            stock=Decimal("1.500"),
            unit_of_measure=Product.UnitOfMeasure.KG,
        )
        self.customer = Customer.objects.create(name="Grace", store_credit=Decimal("4.00"))

    def _quote(self, **payload):
        return self.client.post("/api/pos/quote/", payload, format="json")

    def test_cash_quote(self):
        res = self._quote(
            lines=[
                {"product_id": str(self.apples.id), "quantity": "4"},
                {"product_id": str(self.cheese.id), "amount": "3.00"},
            ],
            payment_method="Cash",
            cash_received="20",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([line["quantity"] for line in res.data["lines"]], ["4.000", "0.250"])
        self.assertEqual(res.data["pricing"]["subtotal"], "13.00")
        self.assertEqual(res.data["pricing"]["tax_amount"], "1.30")
        self.assertEqual(res.data["pricing"]["total"], "14.30")
        self.assertEqual(res.data["pricing"]["total_display"], "$14.30")
        self.assertTrue(res.data["is_cash_payment"])
        self.assertEqual(res.data["change_due"], "5.70")
        self.assertEqual(res.data["suggested_tenders"], ["14.30", "20.00", "24.30", "34.30"])
        self.assertEqual(res.data["warnings"], [])

    def test_quantity_is_clamped_to_stock_with_warning(self):
        res = self._quote(lines=[{"product_id": str(self.apples.id), "quantity": "12"}])

        self.assertEqual(res.data["lines"][0]["quantity"], "10.000")
        self.assertEqual(res.data["warnings"][0]["code"], "ADJUSTED")
        self.assertIn("available stock", res.data["warnings"][0]["message"])

    def test_out_of_stock_and_unknown_products_are_warned(self):
        Product.objects.filter(pk=self.apples.pk).update(stock=Decimal("0"))

        res = self._quote(
            lines=[
                {"product_id": str(self.apples.id), "quantity": "1"},
                {"product_id": "00000000-0000-0000-0000-000000000001", "quantity": "1"},
            ]
        )

        self.assertEqual(res.data["lines"], [])
        self.assertEqual([w["code"] for w in res.data["warnings"]], ["OUT_OF_STOCK", "NOT_FOUND"])

    def test_target_amount_on_unit_item_is_declined(self):
        res = self._quote(lines=[{"product_id": str(self.apples.id), "amount": "5.00"}])

        # the add still stands at one unit
        self.assertEqual(res.data["lines"][0]["quantity"], "1.000")
        self.assertEqual(res.data["warnings"][0]["code"], "INVALID_UNIT")

    def test_store_credit_and_card_payment(self):
        res = self._quote(
            lines=[{"product_id": str(self.apples.id), "quantity": "4"}],
            customer_id=str(self.customer.id),
            use_store_credit=True,
            payment_method="card",
        )

        # 10.00 + 10% tax = 11.00, minus 4.00 credit
        self.assertEqual(res.data["pricing"]["applied_store_credit"], "4.00")
        self.assertEqual(res.data["pricing"]["total"], "7.00")
        self.assertEqual(res.data["payment_method"], "Card")
        self.assertFalse(res.data["is_cash_payment"])
        self.assertEqual(res.data["suggested_tenders"], [])

    def test_store_credit_without_customer_warns(self):
        res = self._quote(
            lines=[{"product_id": str(self.apples.id), "quantity": "1"}],
            use_store_credit=True,
        )

        self.assertEqual(res.data["pricing"]["applied_store_credit"], "0.00")
        self.assertEqual(res.data["warnings"][-1]["code"], "CUSTOMER_REQUIRED")

    def test_discount_is_clamped_to_subtotal(self):
        res = self._quote(
            lines=[{"product_id": str(self.apples.id), "quantity": "2"}],
            discount_amount="50",
        )

        self.assertEqual(res.data["pricing"]["discount_amount"], "5.00")
        self.assertEqual(res.data["pricing"]["total"], "0.00")

    def test_unknown_customer(self):
        res = self._quote(lines=[], customer_id="00000000-0000-0000-0000-000000000001")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")

    def test_unknown_payment_method(self):
        res = self._quote(lines=[], payment_method="Cheque")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")

    def test_quote_has_no_side_effects(self):
        self._quote(
            lines=[{"product_id": str(self.apples.id), "quantity": "4"}],
            customer_id=str(self.customer.id),
            use_store_credit=True,
        )

        self.apples.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(self.apples.stock, Decimal("10.000"))
        self.assertEqual(self.customer.store_credit, Decimal("4.00"))
