# pos/tests/test_quantity_policy.py

from decimal import Decimal

from django.test import SimpleTestCase

from pos.services import quantity_policy


class QuantityPolicyTests(SimpleTestCase):
    def test_steps_by_unit_of_measure(self):
        self.assertEqual(quantity_policy.step("unit"), Decimal("1"))
        self.assertEqual(quantity_policy.step("kg"), Decimal("0.1"))

    def test_unknown_unit_falls_back_to_discrete(self):
        self.assertEqual(quantity_policy.step(None), Decimal("1"))
        self.assertEqual(quantity_policy.step("litre"), Decimal("1"))
        self.assertEqual(quantity_policy.normalize_unit(" KG "), "kg")

    def test_round_to_three_places_half_up(self):
        self.assertEqual(quantity_policy.round_quantity("2.4004"), Decimal("2.400"))
        self.assertEqual(quantity_policy.round_quantity("2.4005"), Decimal("2.401"))
        self.assertEqual(quantity_policy.round_quantity(0.1 + 0.2), Decimal("0.300"))

    def test_uncoercible_input_rounds_to_zero(self):
        self.assertEqual(quantity_policy.round_quantity("abc"), Decimal("0"))
        self.assertEqual(quantity_policy.round_quantity(None), Decimal("0"))

    def test_clamp_bounds(self):
        ceiling = Decimal("10")
        self.assertEqual(quantity_policy.clamp("-3", ceiling), Decimal("0"))
        self.assertEqual(quantity_policy.clamp("4.5", ceiling), Decimal("4.5"))
        self.assertEqual(quantity_policy.clamp("10.0001", ceiling), Decimal("10"))
        self.assertEqual(quantity_policy.clamp("25", ceiling), Decimal("10"))

    def test_clamp_with_negative_ceiling_is_zero(self):
        self.assertEqual(quantity_policy.clamp("3", "-1"), Decimal("0"))
