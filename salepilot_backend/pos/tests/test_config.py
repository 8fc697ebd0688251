# pos/tests/test_config.py

from decimal import Decimal

from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from pos.services.config import build_pos_config, load_pos_config


class PosConfigTests(SimpleTestCase):
    def test_defaults(self):
        config = build_pos_config()

        self.assertEqual(config.tax_rate, Decimal("0"))
        self.assertTrue(config.enable_store_credit)
        self.assertEqual([m.name for m in config.payment_methods], ["Cash", "Card", "Mobile Money"])
        self.assertEqual(config.payment_method("mobile-money").name, "Mobile Money")
        self.assertEqual(config.invoice_due_days, 30)

    def test_tax_rate_is_fraction_of_percent(self):
        config = build_pos_config({"TAX_RATE_PERCENT": "7.5"})

        self.assertEqual(config.tax_rate, Decimal("0.075"))

    def test_methods_from_comma_string_are_deduplicated(self):
        config = build_pos_config({"PAYMENT_METHODS": "Cash, Card, cash ,,Voucher"})

        self.assertEqual([m.id for m in config.payment_methods], ["cash", "card", "voucher"])
        self.assertTrue(config.payment_methods[0].is_cash)
        self.assertFalse(config.payment_methods[1].is_cash)

    def test_invalid_values_raise(self):
        with self.assertRaises(ImproperlyConfigured):
            build_pos_config({"TAX_RATE_PERCENT": "-1"})
        with self.assertRaises(ImproperlyConfigured):
            build_pos_config({"TAX_RATE_PERCENT": "abc"})
        with self.assertRaises(ImproperlyConfigured):
            build_pos_config({"CURRENCY_POSITION": "middle"})
        with self.assertRaises(ImproperlyConfigured):
            build_pos_config({"PAYMENT_METHODS": ""})
        with self.assertRaises(ImproperlyConfigured):
            build_pos_config({"INVOICE_DUE_DAYS": "soon"})

    @override_settings(POS={"TAX_RATE_PERCENT": "8", "CURRENCY_SYMBOL": "€", "CURRENCY_POSITION": "after"})
    def test_load_from_settings(self):
        config = load_pos_config()

        self.assertEqual(config.tax_rate, Decimal("0.08"))
        self.assertEqual(config.currency.symbol, "€")
        self.assertEqual(config.currency.position, "after")
