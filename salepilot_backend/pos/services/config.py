# pos/services/config.py

"""
POS CONFIGURATION (READ-ONLY)

Source:
- settings.POS (built from env vars in backend/settings/base.py)

The engine never reads settings directly. Views / sessions receive a
PosConfig and pass the values they need (tax rate, methods) down.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.text import slugify

from pos.services.money import ZERO, to_decimal
from pos.services.tender import is_cash_method

HUNDRED = Decimal("100")

CURRENCY_POSITIONS = ("before", "after")

DEFAULTS = {
    "TAX_RATE_PERCENT": "0",
    "LOW_STOCK_THRESHOLD": 5,
    "ENABLE_STORE_CREDIT": True,
    "PAYMENT_METHODS": ["Cash", "Card", "Mobile Money"],
    "CURRENCY_SYMBOL": "$",
    "CURRENCY_CODE": "USD",
    "CURRENCY_POSITION": "before",
    "INVOICE_DUE_DAYS": 30,
}


@dataclass(frozen=True)
class PaymentMethod:
    id: str
    name: str

    @property
    def is_cash(self) -> bool:
        return is_cash_method(self.name)


@dataclass(frozen=True)
class Currency:
    symbol: str = "$"
    code: str = "USD"
    position: str = "before"


@dataclass(frozen=True)
class PosConfig:
    tax_rate_percent: Decimal
    low_stock_threshold: int
    enable_store_credit: bool
    payment_methods: tuple[PaymentMethod, ...]
    currency: Currency
    invoice_due_days: int = 30

    @property
    def tax_rate(self) -> Decimal:
        """Fraction used by the pricing engine (8 -> 0.08)."""
        return self.tax_rate_percent / HUNDRED

    def payment_method(self, name_or_id) -> PaymentMethod | None:
        key = str(name_or_id or "").strip().lower()
        for method in self.payment_methods:
            if method.id == key or method.name.lower() == key:
                return method
        return None

    @property
    def default_payment_method(self) -> PaymentMethod:
        return self.payment_methods[0]

    def to_dict(self) -> dict:
        return {
            "tax_rate_percent": self.tax_rate_percent,
            "low_stock_threshold": self.low_stock_threshold,
            "enable_store_credit": self.enable_store_credit,
            "payment_methods": [{"id": m.id, "name": m.name} for m in self.payment_methods],
            "currency": {
                "symbol": self.currency.symbol,
                "code": self.currency.code,
                "position": self.currency.position,
            },
            "invoice_due_days": self.invoice_due_days,
        }


def _methods(raw) -> tuple[PaymentMethod, ...]:
    if isinstance(raw, str):
        raw = raw.split(",")

    out: list[PaymentMethod] = []
    seen: set[str] = set()
    for item in raw or []:
        name = str(item or "").strip()
        if not name:
            continue
        method_id = slugify(name) or name.lower()
        if method_id in seen:
            continue
        seen.add(method_id)
        out.append(PaymentMethod(id=method_id, name=name))
    return tuple(out)


def build_pos_config(values: dict | None = None) -> PosConfig:
    """
    Build and validate a PosConfig from a settings-style mapping.
    Missing keys fall back to DEFAULTS.
    """
    data = {**DEFAULTS, **(values or {})}

    tax_rate_percent = to_decimal(data["TAX_RATE_PERCENT"], default=Decimal("-1"))
    if tax_rate_percent < ZERO:
        raise ImproperlyConfigured("POS TAX_RATE_PERCENT must be a number >= 0.")

    try:
        low_stock_threshold = int(data["LOW_STOCK_THRESHOLD"])
        invoice_due_days = int(data["INVOICE_DUE_DAYS"])
    except (TypeError, ValueError) as exc:
        raise ImproperlyConfigured(
            "POS LOW_STOCK_THRESHOLD and INVOICE_DUE_DAYS must be integers."
        ) from exc

    if low_stock_threshold < 0 or invoice_due_days < 0:
        raise ImproperlyConfigured(
            "POS LOW_STOCK_THRESHOLD and INVOICE_DUE_DAYS must be >= 0."
        )

    position = str(data["CURRENCY_POSITION"] or "").strip().lower()
    if position not in CURRENCY_POSITIONS:
        raise ImproperlyConfigured(
            f"POS CURRENCY_POSITION must be one of {CURRENCY_POSITIONS}."
        )

    methods = _methods(data["PAYMENT_METHODS"])
    if not methods:
        raise ImproperlyConfigured("POS PAYMENT_METHODS must name at least one method.")

    return PosConfig(
        tax_rate_percent=tax_rate_percent,
        low_stock_threshold=low_stock_threshold,
        enable_store_credit=bool(data["ENABLE_STORE_CREDIT"]),
        payment_methods=methods,
        currency=Currency(
            symbol=str(data["CURRENCY_SYMBOL"] or ""),
            code=str(data["CURRENCY_CODE"] or "").upper(),
            position=position,
        ),
        invoice_due_days=invoice_due_days,
    )


def load_pos_config() -> PosConfig:
    return build_pos_config(getattr(settings, "POS", None))
