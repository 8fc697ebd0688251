# sales/tests/test_gateway.py

"""
DjangoSaleGateway + the POS engine end to end (async).
"""

from decimal import Decimal
from unittest import mock

from django.db import OperationalError
from django.test import TestCase, override_settings

from customers.models import Customer
from pos.services import exceptions
from pos.services.config import load_pos_config
from pos.services.gateway import SaleGateway
from pos.services.records import PAYMENT_PARTIALLY_PAID, REFUND_PARTIAL
from pos.services.refund_engine import RefundEngine
from pos.services.sale_finalizer import FinalizationMode, FinalizerState, SaleFinalizer
from pos.services.session import PosSession
from products.models import Product
from products.services.inventory import to_snapshot
from sales.models import Sale
from sales.services.gateway import DjangoSaleGateway
from sales.tests.factories import make_customer, make_draft, make_product


class DjangoSaleGatewayTests(TestCase):
    def setUp(self):
        self.apples = make_product("apples", price="2.50", stock="10")
        self.cheese = make_product("cheese", price="12.00", stock="1.500", unit="kg")
        self.customer = make_customer("Grace", credit="4.00")
        self.gateway = DjangoSaleGateway()

    def test_implements_protocol(self):
        self.assertIsInstance(self.gateway, SaleGateway)

    async def test_create_and_fetch_sale(self):
        created = await self.gateway.create_sale(make_draft((self.apples, 2)))

        self.assertTrue(created.transaction_id.startswith("SALE-"))
        self.assertEqual(created.total, Decimal("5.00"))

        fetched = await self.gateway.fetch_sale_by_transaction_id(f" {created.transaction_id.lower()} ")
        self.assertEqual(fetched.transaction_id, created.transaction_id)
        self.assertEqual(fetched.cart[0].quantity, Decimal("2.000"))

    async def test_validation_errors_are_translated(self):
        with self.assertRaises(exceptions.ValidationError) as ctx:
            await self.gateway.create_sale(make_draft((self.apples, 11)))

        self.assertIn("Insufficient stock", ctx.exception.message)
        self.assertEqual(await Sale.objects.acount(), 0)

    async def test_database_outage_is_a_network_error(self):
        with mock.patch(
            "sales.services.sale_service.create_sale",
            side_effect=OperationalError("connection refused"),
        ):
            with self.assertRaises(exceptions.NetworkError):
                await self.gateway.create_sale(make_draft((self.apples, 1)))

    async def test_missing_rows_are_not_found(self):
        with self.assertRaises(exceptions.NotFound):
            await self.gateway.fetch_sale_by_transaction_id("SALE-19990101-DEADBEEF")
        with self.assertRaises(exceptions.NotFound):
            await self.gateway.fetch_customer("not-a-uuid")

    async def test_fetch_customer_and_catalog(self):
        snapshot = await self.gateway.fetch_customer(str(self.customer.id))
        self.assertEqual(snapshot.name, "Grace")
        self.assertEqual(snapshot.store_credit, Decimal("4.00"))

        catalog = await self.gateway.fetch_product_catalog()
        self.assertEqual([p.name for p in catalog], ["Apples", "Cheese"])
        self.assertEqual(catalog[1].unit_of_measure, "kg")

    async def test_record_payment(self):
        invoice = await self.gateway.create_sale(
            make_draft((self.apples, 4), customer=self.customer, paid=False)
        )

        updated = await self.gateway.record_payment(invoice.transaction_id, Decimal("4.00"), "Card")

        self.assertEqual(updated.payment_status, PAYMENT_PARTIALLY_PAID)
        self.assertEqual(updated.amount_paid, Decimal("4.00"))
        self.assertEqual(updated.payments[0].method, "Card")


@override_settings(POS={"TAX_RATE_PERCENT": "10"})
class PosEngineOverGatewayTests(TestCase):
    """
    The register flow against real rows: build a cart, finalize, refund.
    """

    def setUp(self):
        self.apples = make_product("apples", price="2.50", stock="10")
        self.cheese = make_product("cheese", price="12.00", stock="1.500", unit="kg")
        self.customer = make_customer("Grace", credit="4.00")
        self.config = load_pos_config()
        self.gateway = DjangoSaleGateway()

    def _session(self) -> PosSession:
        session = PosSession(config=self.config)
        session.add_product(to_snapshot(self.apples))
        session.set_quantity(str(self.apples.id), 4)
        session.add_product(to_snapshot(self.cheese))
        session.quantity_from_target_amount(str(self.cheese.id), "3.00")
        return session

    async def test_finalize_persists_and_resets_session(self):
        session = self._session()
        # 10.00 + 0.25kg * 12.00 = 13.00, tax 10% -> 14.30
        session.set_cash_received("20")

        finalizer = SaleFinalizer(gateway=self.gateway)
        record = await finalizer.finalize(session, mode=FinalizationMode.IMMEDIATE)

        self.assertEqual(finalizer.state, FinalizerState.PERSISTED)
        self.assertEqual(record.total, Decimal("14.30"))
        self.assertTrue(session.cart.is_empty)

        apples = await Product.objects.aget(pk=self.apples.pk)
        cheese = await Product.objects.aget(pk=self.cheese.pk)
        self.assertEqual(apples.stock, Decimal("6.000"))
        self.assertEqual(cheese.stock, Decimal("1.250"))

    async def test_store_credit_sale_debits_customer(self):
        session = self._session()
        session.select_customer(await self.gateway.fetch_customer(str(self.customer.id)))
        self.assertTrue(session.toggle_store_credit())
        session.select_payment_method("Card")

        record = await SaleFinalizer(gateway=self.gateway).finalize(session)

        self.assertEqual(record.store_credit_used, Decimal("4.00"))
        self.assertEqual(record.total, Decimal("10.30"))
        customer = await Customer.objects.aget(pk=self.customer.pk)
        self.assertEqual(customer.store_credit, Decimal("0.00"))

    async def test_stale_stock_fails_and_keeps_cart(self):
        session = self._session()
        session.set_cash_received("20")
        await Product.objects.filter(pk=self.apples.pk).aupdate(stock=Decimal("1"))

        finalizer = SaleFinalizer(gateway=self.gateway)
        with self.assertRaises(exceptions.ValidationError):
            await finalizer.finalize(session)

        self.assertEqual(finalizer.state, FinalizerState.FAILED)
        self.assertFalse(finalizer.in_flight)
        self.assertEqual(len(session.cart), 2)
        self.assertEqual(await Sale.objects.acount(), 0)

    async def test_invoice_finalize_charges_account(self):
        session = self._session()
        session.select_customer(await self.gateway.fetch_customer(str(self.customer.id)))

        record = await SaleFinalizer(gateway=self.gateway).finalize(session, mode=FinalizationMode.INVOICE)

        self.assertEqual(record.payment_status, "unpaid")
        self.assertEqual(record.payments, ())
        customer = await Customer.objects.aget(pk=self.customer.pk)
        self.assertEqual(customer.account_balance, Decimal("14.30"))

    async def test_refund_engine_round_trip(self):
        session = self._session()
        session.set_cash_received("20")
        record = await SaleFinalizer(gateway=self.gateway).finalize(session)

        engine = RefundEngine(gateway=self.gateway, tax_rate=self.config.tax_rate)
        sale = await engine.lookup_sale(record.transaction_id.lower())
        result = await engine.process(
            sale=sale,
            selections={str(self.apples.id): {"quantity": 2, "restock": True}},
        )

        # 5.00 of 13.00 subtotal, no discount, +10% tax
        self.assertEqual(result.return_record.refund_amount, Decimal("5.50"))
        self.assertEqual(result.sale.refund_status, REFUND_PARTIAL)

        apples = await Product.objects.aget(pk=self.apples.pk)
        self.assertEqual(apples.stock, Decimal("8.000"))

        refetched = await self.gateway.fetch_sale_by_transaction_id(record.transaction_id)
        self.assertEqual(refetched.line(str(self.apples.id)).returned_quantity, Decimal("2.000"))
