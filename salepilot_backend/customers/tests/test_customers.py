# customers/tests/test_customers.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from customers.models import Customer
from customers.services import (
    charge_account,
    grant_store_credit,
    settle_account,
    spend_store_credit,
    to_snapshot,
)

User = get_user_model()


class CustomerBalanceServiceTests(TestCase):
    def setUp(self):
        self.customer = Customer.objects.create(
            name="Ada",
            store_credit=Decimal("50.00"),
            account_balance=Decimal("20.00"),
        )

    def test_spend_store_credit(self):
        spend_store_credit(customer=self.customer, amount="12.345")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.store_credit, Decimal("37.65"))

    def test_cannot_overspend_store_credit(self):
        with self.assertRaises(ValidationError):
            spend_store_credit(customer=self.customer, amount="50.01")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.store_credit, Decimal("50.00"))

    def test_grant_store_credit(self):
        grant_store_credit(customer=self.customer, amount="21.60")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.store_credit, Decimal("71.60"))

    def test_half_cent_rounds_up(self):
        grant_store_credit(customer=self.customer, amount="0.005")
        charge_account(customer=self.customer, amount="0.125")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.store_credit, Decimal("50.01"))
        self.assertEqual(self.customer.account_balance, Decimal("20.13"))

    def test_charge_and_settle_account(self):
        charge_account(customer=self.customer, amount="80")
        settle_account(customer=self.customer, amount="30")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.account_balance, Decimal("70.00"))

    def test_settle_account_floors_at_zero(self):
        settle_account(customer=self.customer, amount="500")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.account_balance, Decimal("0.00"))

    def test_unknown_customer(self):
        with self.assertRaises(ValidationError):
            charge_account(customer="not-a-uuid", amount="1")

    def test_snapshot(self):
        snap = to_snapshot(self.customer)

        self.assertEqual(snap.id, str(self.customer.id))
        self.assertEqual(snap.store_credit, Decimal("50.00"))


class CustomerApiTests(TestCase):
    def setUp(self):
        user = User.objects.create_user(username="cashier", password="password123")
        self.client = APIClient()
        self.client.force_authenticate(user=user)

        Customer.objects.create(name="Ada Lovelace", phone="555-0101")
        Customer.objects.create(name="Grace Hopper", email="grace@example.com")

    def test_search(self):
        res = self.client.get("/api/customers/", {"q": "grace"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row["name"] for row in res.data["results"]], ["Grace Hopper"])

    def test_retrieve(self):
        customer = Customer.objects.get(name="Ada Lovelace")

        res = self.client.get(f"/api/customers/{customer.id}/")

        self.assertEqual(res.data["phone"], "555-0101")
        self.assertEqual(res.data["store_credit"], "0.00")

    def test_read_only(self):
        res = self.client.post("/api/customers/", {"name": "Nope"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
