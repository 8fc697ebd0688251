# sales/tests/test_returns.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from pos.services.records import (
    REFUND_FULL,
    REFUND_NONE,
    REFUND_ORIGINAL_METHOD,
    REFUND_PARTIAL,
    REFUND_STORE_CREDIT,
    ReturnedItem,
    ReturnRecord,
)
from products.models import StockMovement
from sales.models import Sale, SaleReturn, SaleReturnItem
from sales.services.return_service import return_to_record, submit_return
from sales.services.sale_service import create_sale
from sales.tests.factories import make_customer, make_draft, make_product


def _return_draft(sale, *items, method=REFUND_ORIGINAL_METHOD, amount="0", ref="RET-1709294400000"):
    """
    items: (Product, quantity[, add_to_stock])
    """
    return ReturnRecord(
        id=ref,
        original_sale_id=sale.transaction_id,
        returned_items=tuple(
            ReturnedItem(
                product_id=str(spec[0].id),
                product_name=spec[0].name,
                quantity=Decimal(str(spec[1])),
                add_to_stock=spec[2] if len(spec) > 2 else False,
            )
            for spec in items
        ),
        refund_amount=Decimal(amount),
        refund_method=method,
    )


@override_settings(POS={"TAX_RATE_PERCENT": "8"})
class SubmitReturnTests(TestCase):
    """
    Partial returns.

    GUARANTEES:
    - Cumulative returned quantity never exceeds sold quantity
    - Refund amount is recomputed from the stored sale
    - refund_status tracks none -> partially_refunded -> fully_refunded
    """

    def setUp(self):
        # subtotal 100, discount 20, tax 8% of 80 = 6.40, total 86.40
        self.a = make_product("alpha", price="25.00", stock="10")
        self.b = make_product("bravo", price="25.00", stock="10")
        self.customer = make_customer(credit="0")
        self.sale = create_sale(
            draft=make_draft((self.a, 1), (self.b, 3), discount="20", tax="6.40", customer=self.customer)
        )

    def test_partial_return_is_stored_and_priced(self):
        sale_return = submit_return(draft=_return_draft(self.sale, (self.b, 1)))

        # 25 - 5 (proportional discount) + 8% tax = 21.60
        self.assertEqual(sale_return.refund_amount, Decimal("21.60"))
        self.assertEqual(sale_return.reference, "RET-1709294400000")
        self.assertEqual(sale_return.items.count(), 1)

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.refund_status, REFUND_PARTIAL)
        item = self.sale.items.get(product=self.b)
        self.assertEqual(item.returned_quantity, Decimal("1.000"))

    def test_client_amount_does_not_override_server_amount(self):
        sale_return = submit_return(draft=_return_draft(self.sale, (self.b, 1), amount="99.99"))

        self.assertEqual(sale_return.refund_amount, Decimal("21.60"))

    def test_full_return_over_two_submissions(self):
        submit_return(draft=_return_draft(self.sale, (self.a, 1), (self.b, 1), ref="RET-1"))
        self.sale.refresh_from_db()
        self.assertEqual(self.sale.refund_status, REFUND_PARTIAL)

        submit_return(draft=_return_draft(self.sale, (self.b, 2), ref="RET-2"))
        self.sale.refresh_from_db()
        self.assertEqual(self.sale.refund_status, REFUND_FULL)

    def test_cumulative_quantity_is_bounded(self):
        submit_return(draft=_return_draft(self.sale, (self.b, 2), ref="RET-1"))

        with self.assertRaises(ValidationError):
            submit_return(draft=_return_draft(self.sale, (self.b, 2), ref="RET-2"))

        self.assertEqual(SaleReturn.objects.count(), 1)
        self.assertEqual(self.sale.items.get(product=self.b).returned_quantity, Decimal("2.000"))

    def test_duplicate_lines_are_merged_before_checking(self):
        with self.assertRaises(ValidationError):
            submit_return(draft=_return_draft(self.sale, (self.a, 1), (self.a, 1)))

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.refund_status, REFUND_NONE)

    def test_product_not_in_sale_is_rejected(self):
        other = make_product("other")

        with self.assertRaises(ValidationError):
            submit_return(draft=_return_draft(self.sale, (other, 1)))

    def test_empty_return_is_rejected(self):
        with self.assertRaises(ValidationError):
            submit_return(draft=_return_draft(self.sale))

    def test_zero_value_return_is_rejected(self):
        freebie = make_product("freebie", price="0.00", stock="5")
        sale = create_sale(draft=make_draft((freebie, 1)))

        with self.assertRaisesMessage(ValidationError, "Nothing to refund."):
            submit_return(draft=_return_draft(sale, (freebie, 1, True)))

        self.assertFalse(SaleReturn.objects.filter(sale=sale).exists())
        freebie.refresh_from_db()
        self.assertEqual(freebie.stock, Decimal("4.000"))

    def test_unknown_sale_is_rejected(self):
        draft = ReturnRecord(
            id="RET-X",
            original_sale_id="SALE-19990101-DEADBEEF",
            returned_items=(),
            refund_amount=Decimal("0"),
            refund_method=REFUND_ORIGINAL_METHOD,
        )
        with self.assertRaises(ValidationError):
            submit_return(draft=draft)

    def test_restock_only_flagged_items(self):
        submit_return(draft=_return_draft(self.sale, (self.a, 1, True), (self.b, 1, False)))

        self.a.refresh_from_db()
        self.b.refresh_from_db()
        self.assertEqual(self.a.stock, Decimal("10.000"))
        self.assertEqual(self.b.stock, Decimal("7.000"))
        self.assertEqual(
            StockMovement.objects.filter(reason=StockMovement.Reason.RETURN).count(),
            1,
        )

    def test_store_credit_refund_grants_credit(self):
        sale_return = submit_return(draft=_return_draft(self.sale, (self.b, 1), method=REFUND_STORE_CREDIT))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.store_credit, sale_return.refund_amount)

    def test_store_credit_refund_needs_customer(self):
        walk_in = create_sale(draft=make_draft((self.a, 1)))

        with self.assertRaises(ValidationError):
            submit_return(draft=_return_draft(walk_in, (self.a, 1), method=REFUND_STORE_CREDIT))

    def test_reused_reference_gets_a_fresh_one(self):
        first = submit_return(draft=_return_draft(self.sale, (self.b, 1), ref="RET-SAME"))
        second = submit_return(draft=_return_draft(self.sale, (self.b, 1), ref="RET-SAME"))

        self.assertEqual(first.reference, "RET-SAME")
        self.assertNotEqual(second.reference, "RET-SAME")
        self.assertTrue(second.reference.startswith("RET-"))

    def test_return_records_are_immutable(self):
        sale_return = submit_return(draft=_return_draft(self.sale, (self.b, 1)))

        with self.assertRaises(RuntimeError):
            sale_return.save()
        with self.assertRaises(RuntimeError):
            sale_return.delete()
        with self.assertRaises(RuntimeError):
            SaleReturnItem.objects.first().save()

    def test_return_to_record_shape(self):
        sale_return = submit_return(draft=_return_draft(self.sale, (self.a, 1, True)))

        record = return_to_record(sale_return)

        self.assertEqual(record.original_sale_id, self.sale.transaction_id)
        self.assertEqual(record.returned_items[0].product_id, str(self.a.id))
        self.assertTrue(record.returned_items[0].add_to_stock)
        self.assertEqual(record.refund_method, REFUND_ORIGINAL_METHOD)

    def test_lookup_of_sale_is_case_insensitive(self):
        draft = _return_draft(self.sale, (self.b, 1))
        draft = ReturnRecord(
            id=draft.id,
            original_sale_id=f" {self.sale.transaction_id.lower()} ",
            returned_items=draft.returned_items,
            refund_amount=draft.refund_amount,
            refund_method=draft.refund_method,
        )

        submit_return(draft=draft)

        self.assertEqual(Sale.objects.get(pk=self.sale.pk).refund_status, REFUND_PARTIAL)
