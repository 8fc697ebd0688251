# pos/tests/test_held_sales.py

from django.test import SimpleTestCase

from pos.services.cart import Cart
from pos.services.exceptions import ActiveSaleInProgress, NotFound
from pos.services.held_sales import HeldSaleStack
from pos.tests.fakes import product


def _cart_with(*pids):
    cart = Cart()
    for pid in pids:
        cart.add(product(pid))
    return cart


class HeldSaleStackTests(SimpleTestCase):
    def test_hold_empty_cart_is_noop(self):
        stack = HeldSaleStack()

        self.assertFalse(stack.hold(Cart()))
        self.assertEqual(len(stack), 0)

    def test_hold_snapshots_lines(self):
        stack = HeldSaleStack()
        cart = _cart_with("a", "b")

        stack.hold(cart)
        cart.add(product("c"))

        self.assertEqual([line.product_id for line in stack.peek(0)], ["a", "b"])

    def test_recall_refused_while_cart_active(self):
        stack = HeldSaleStack()
        stack.hold(_cart_with("a"))

        with self.assertRaises(ActiveSaleInProgress):
            stack.recall(0, active_cart=_cart_with("z"))

        self.assertEqual(len(stack), 1)

    def test_recall_out_of_range(self):
        stack = HeldSaleStack()
        stack.hold(_cart_with("a"))

        with self.assertRaises(NotFound):
            stack.recall(3, active_cart=Cart())
        with self.assertRaises(NotFound):
            stack.recall(-1, active_cart=Cart())

    def test_recall_removes_and_preserves_order(self):
        stack = HeldSaleStack()
        for pid in ("a", "b", "c"):
            stack.hold(_cart_with(pid))

        snapshot = stack.recall(1, active_cart=Cart())

        self.assertEqual(snapshot[0].product_id, "b")
        self.assertEqual([held[0].product_id for held in stack], ["a", "c"])
