# pos/tests/test_cart.py

"""
CART TESTS

Covers:
- stepwise add with stock ceilings
- clamp law for set_quantity
- weighed goods priced by amount (round trip within one step)
- price snapshot at first add
"""

from decimal import Decimal

from django.test import SimpleTestCase

from pos.services import exceptions, quantity_policy
from pos.services.cart import Cart
from pos.tests.fakes import product


class CartAddTests(SimpleTestCase):
    def test_add_inserts_one_step(self):
        cart = Cart()

        outcome = cart.add(product("p1", stock="5"))

        self.assertTrue(outcome.ok)
        self.assertEqual(cart.get("p1").quantity, Decimal("1"))
        self.assertEqual(cart.get("p1").stock_ceiling, Decimal("5"))

    def test_add_weighed_item_uses_tenth_kg_step(self):
        cart = Cart()
        apples = product("kg1", unit="kg", price="5.00", stock="10")

        cart.add(apples)
        cart.add(apples)

        self.assertEqual(cart.get("kg1").quantity, Decimal("0.2"))

    def test_add_existing_line_grows_until_ceiling_then_declines(self):
        cart = Cart()
        p = product("p1", stock="2")

        self.assertTrue(cart.add(p).ok)
        self.assertTrue(cart.add(p).ok)
        outcome = cart.add(p)

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.code, exceptions.STOCK_EXCEEDED)
        self.assertEqual(cart.get("p1").quantity, Decimal("2"))

    def test_add_out_of_stock_is_declined(self):
        cart = Cart()

        outcome = cart.add(product("p1", stock="0"))

        self.assertFalse(outcome)
        self.assertEqual(outcome.code, exceptions.OUT_OF_STOCK)
        self.assertTrue(cart.is_empty)

    def test_add_weighed_item_below_one_step_is_out_of_stock(self):
        cart = Cart()

        outcome = cart.add(product("kg1", unit="kg", stock="0.05"))

        self.assertEqual(outcome.code, exceptions.OUT_OF_STOCK)
        self.assertEqual(len(cart), 0)

    def test_unit_price_is_snapshotted_at_first_add(self):
        cart = Cart()
        cart.add(product("p1", price="10.00"))

        cart.add(product("p1", price="99.00"))

        line = cart.get("p1")
        self.assertEqual(line.unit_price, Decimal("10.00"))
        self.assertEqual(line.quantity, Decimal("2"))

    def test_lines_keep_insertion_order_and_restart(self):
        cart = Cart()
        for pid in ("b", "a", "c"):
            cart.add(product(pid))

        view = cart.lines()

        self.assertEqual([line.product_id for line in view], ["b", "a", "c"])
        self.assertEqual([line.product_id for line in view], ["b", "a", "c"])

    def test_lines_view_tolerates_mutation_while_iterating(self):
        cart = Cart()
        cart.add(product("a"))
        cart.add(product("b"))

        seen = []
        for line in cart.lines():
            seen.append(line.product_id)
            cart.remove(line.product_id)

        self.assertEqual(seen, ["a", "b"])
        self.assertTrue(cart.is_empty)


class CartSetQuantityTests(SimpleTestCase):
    def setUp(self):
        self.cart = Cart()
        self.cart.add(product("p1", stock="10"))

    def test_clamp_law(self):
        ceiling = Decimal("10")
        for requested in ["-5", "0.0004", "3", "9.9995", "10", "10.0001", "1000"]:
            cart = Cart()
            cart.add(product("p1", stock="10"))

            cart.set_quantity("p1", requested)

            expected = quantity_policy.clamp(requested, ceiling)
            line = cart.get("p1")
            if expected == 0:
                self.assertIsNone(line, requested)
            else:
                self.assertEqual(line.quantity, expected, requested)
                self.assertLessEqual(line.quantity, ceiling)

    def test_over_ceiling_is_adjusted(self):
        outcome = self.cart.set_quantity("p1", "12")

        self.assertTrue(outcome.ok)
        self.assertTrue(outcome.adjusted)
        self.assertIn("available stock", outcome.message)
        self.assertEqual(self.cart.get("p1").quantity, Decimal("10"))

    def test_in_range_is_not_adjusted(self):
        outcome = self.cart.set_quantity("p1", "4")

        self.assertFalse(outcome.adjusted)
        self.assertEqual(self.cart.get("p1").quantity, Decimal("4"))

    def test_zero_removes_line(self):
        outcome = self.cart.set_quantity("p1", 0)

        self.assertTrue(outcome.ok)
        self.assertNotIn("p1", self.cart)

    def test_unknown_product_is_declined_without_change(self):
        outcome = self.cart.set_quantity("missing", 3)

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.code, exceptions.NOT_FOUND)
        self.assertEqual(len(self.cart), 1)

    def test_remove_and_clear(self):
        self.cart.add(product("p2"))

        self.assertTrue(self.cart.remove("p1").ok)
        self.assertFalse(self.cart.remove("p1").ok)

        self.cart.clear()
        self.assertTrue(self.cart.is_empty)


class CartTargetAmountTests(SimpleTestCase):
    def test_weighed_item_from_amount(self):
        cart = Cart()
        cart.add(product("kg1", unit="kg", price="5.00", stock="10"))

        outcome = cart.quantity_from_target_amount("kg1", "12.00")

        self.assertTrue(outcome.ok)
        self.assertEqual(cart.get("kg1").quantity, Decimal("2.4"))

    def test_round_trip_within_one_rounding_step(self):
        samples = [
            ("12.00", "5.00"),
            ("7.33", "3.10"),
            ("1.01", "0.99"),
            ("0.50", "7.77"),
            ("99.99", "12.34"),
        ]
        for amount, price in samples:
            cart = Cart()
            cart.add(product("kg1", unit="kg", price=price, stock="1000"))

            cart.quantity_from_target_amount("kg1", amount)

            line = cart.get("kg1")
            drift = abs(line.quantity * line.unit_price - Decimal(amount))
            self.assertLessEqual(drift, Decimal("0.001") * line.unit_price, (amount, price))

    def test_amount_is_clamped_to_ceiling(self):
        cart = Cart()
        cart.add(product("kg1", unit="kg", price="5.00", stock="2"))

        outcome = cart.quantity_from_target_amount("kg1", "50")

        self.assertTrue(outcome.adjusted)
        self.assertEqual(cart.get("kg1").quantity, Decimal("2"))

    def test_discrete_item_is_invalid_unit(self):
        cart = Cart()
        cart.add(product("p1"))

        outcome = cart.quantity_from_target_amount("p1", "10")

        self.assertEqual(outcome.code, exceptions.INVALID_UNIT)
        self.assertEqual(cart.get("p1").quantity, Decimal("1"))

    def test_non_positive_amount_or_price_is_invalid_amount(self):
        cart = Cart()
        cart.add(product("kg1", unit="kg", price="5.00"))
        cart.add(product("free", unit="kg", price="0"))

        self.assertEqual(cart.quantity_from_target_amount("kg1", "0").code, exceptions.INVALID_AMOUNT)
        self.assertEqual(cart.quantity_from_target_amount("kg1", "-2").code, exceptions.INVALID_AMOUNT)
        self.assertEqual(cart.quantity_from_target_amount("free", "3").code, exceptions.INVALID_AMOUNT)

    def test_tiny_amount_is_result_too_small(self):
        cart = Cart()
        cart.add(product("kg1", unit="kg", price="100.00"))

        outcome = cart.quantity_from_target_amount("kg1", "0.01")

        self.assertEqual(outcome.code, exceptions.RESULT_TOO_SMALL)
        self.assertEqual(cart.get("kg1").quantity, Decimal("0.1"))
