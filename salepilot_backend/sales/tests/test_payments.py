# sales/tests/test_payments.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from sales.models import Sale
from sales.services.payment_service import record_payment
from sales.services.sale_service import create_sale
from sales.tests.factories import make_customer, make_draft, make_product


class RecordPaymentTests(TestCase):
    def setUp(self):
        self.product = make_product("rice", price="10.00", stock="10")
        self.customer = make_customer(balance="0")
        self.invoice = create_sale(
            draft=make_draft((self.product, 3), customer=self.customer, paid=False)
        )

    def test_partial_then_full_payment(self):
        sale = record_payment(transaction_id=self.invoice.transaction_id, amount="10.00", method="Card")

        self.assertEqual(sale.payment_status, Sale.PAYMENT_PARTIALLY_PAID)
        self.assertEqual(sale.amount_paid, Decimal("10.00"))
        self.assertEqual(sale.balance_due, Decimal("20.00"))

        sale = record_payment(transaction_id=self.invoice.transaction_id, amount="20.00", method="Cash")

        self.assertEqual(sale.payment_status, Sale.PAYMENT_PAID)
        self.assertEqual(sale.payments.count(), 2)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.account_balance, Decimal("0.00"))

    def test_overpayment_is_rejected(self):
        with self.assertRaises(ValidationError):
            record_payment(transaction_id=self.invoice.transaction_id, amount="30.01", method="Cash")

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.amount_paid, Decimal("0.00"))

    def test_amount_is_rounded_half_up(self):
        sale = record_payment(transaction_id=self.invoice.transaction_id, amount="10.005", method="Card")

        self.assertEqual(sale.amount_paid, Decimal("10.01"))
        self.assertEqual(sale.payments.get().amount, Decimal("10.01"))

    def test_non_positive_amount_is_rejected(self):
        for bad in ("0", "-5", "abc", None):
            with self.assertRaises(ValidationError):
                record_payment(transaction_id=self.invoice.transaction_id, amount=bad, method="Cash")

    def test_paid_sale_rejects_payment(self):
        paid = create_sale(draft=make_draft((self.product, 1)))

        with self.assertRaises(ValidationError):
            record_payment(transaction_id=paid.transaction_id, amount="1.00", method="Cash")

    def test_method_is_required(self):
        with self.assertRaises(ValidationError):
            record_payment(transaction_id=self.invoice.transaction_id, amount="1.00", method="  ")

    def test_unknown_sale_is_rejected(self):
        with self.assertRaises(ValidationError):
            record_payment(transaction_id="SALE-19990101-DEADBEEF", amount="1.00", method="Cash")
