# pos/services/records.py

"""
COLLABORATOR RECORDS (JSON-SHAPED)

Purpose:
- Immutable in-memory shapes for everything the engine exchanges with the
  persistence collaborator: catalog products, customers, sales, returns.
- from_dict() accepts the REST payload shape (snake_case, decimals as strings).
- to_dict() produces the same shape with Decimal / datetime values.

Mutability rule (Sale):
- Only payment_status, amount_paid, payments, refund_status and per-line
  returned_quantity ever change after creation. Changes produce a NEW record
  (dataclasses.replace), never in-place edits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from django.utils.dateparse import parse_datetime

from pos.services import quantity_policy
from pos.services.money import ZERO, to_decimal

# Sale.payment_status
PAYMENT_PAID = "paid"
PAYMENT_UNPAID = "unpaid"
PAYMENT_PARTIALLY_PAID = "partially_paid"

# Sale.refund_status
REFUND_NONE = "none"
REFUND_PARTIAL = "partially_refunded"
REFUND_FULL = "fully_refunded"

# Return.refund_method (besides any configured payment method name)
REFUND_ORIGINAL_METHOD = "original_method"
REFUND_STORE_CREDIT = "store_credit"

DEFAULT_RETURN_REASON = "Other"


def _dt(value) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return parse_datetime(str(value))


def _str_or_none(value) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


# ============================================================
# CATALOG + CUSTOMER SNAPSHOTS (READ-ONLY INPUTS)
# ============================================================


@dataclass(frozen=True)
class ProductSnapshot:
    id: str
    name: str
    price: Decimal
    stock: Decimal
    unit_of_measure: str = quantity_policy.UNIT
    cost_price: Decimal = ZERO
    sku: str = ""
    barcode: str | None = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "ProductSnapshot":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            price=to_decimal(data.get("price")),
            stock=to_decimal(data.get("stock")),
            unit_of_measure=quantity_policy.normalize_unit(data.get("unit_of_measure")),
            cost_price=to_decimal(data.get("cost_price")),
            sku=str(data.get("sku") or ""),
            barcode=_str_or_none(data.get("barcode")),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass(frozen=True)
class CustomerSnapshot:
    id: str
    name: str
    store_credit: Decimal = ZERO
    account_balance: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: dict) -> "CustomerSnapshot":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            store_credit=to_decimal(data.get("store_credit")),
            account_balance=to_decimal(data.get("account_balance")),
        )


# ============================================================
# SALE
# ============================================================


@dataclass(frozen=True)
class SaleLine:
    product_id: str
    name: str
    price: Decimal
    quantity: Decimal
    unit_of_measure: str = quantity_policy.UNIT
    cost_price: Decimal = ZERO
    returned_quantity: Decimal = ZERO

    @property
    def remaining_quantity(self) -> Decimal:
        return max(ZERO, self.quantity - self.returned_quantity)

    @classmethod
    def from_dict(cls, data: dict) -> "SaleLine":
        return cls(
            product_id=str(data["product_id"]),
            name=str(data.get("name") or ""),
            price=to_decimal(data.get("price")),
            quantity=quantity_policy.round_quantity(data.get("quantity")),
            unit_of_measure=quantity_policy.normalize_unit(data.get("unit_of_measure")),
            cost_price=to_decimal(data.get("cost_price")),
            returned_quantity=quantity_policy.round_quantity(data.get("returned_quantity")),
        )

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "unit_of_measure": self.unit_of_measure,
            "cost_price": self.cost_price,
            "returned_quantity": self.returned_quantity,
        }


@dataclass(frozen=True)
class Payment:
    amount: Decimal
    method: str
    id: str | None = None
    date: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        return cls(
            amount=to_decimal(data.get("amount")),
            method=str(data.get("method") or ""),
            id=_str_or_none(data.get("id")),
            date=_dt(data.get("date")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "amount": self.amount,
            "method": self.method,
        }


@dataclass(frozen=True)
class SaleRecord:
    transaction_id: str
    cart: tuple[SaleLine, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    payment_status: str
    amount_paid: Decimal
    timestamp: datetime | None = None
    store_credit_used: Decimal = ZERO
    refund_status: str = REFUND_NONE
    customer_id: str | None = None
    customer_name: str | None = None
    due_date: datetime | None = None
    payments: tuple[Payment, ...] = field(default_factory=tuple)

    def line(self, product_id: str) -> SaleLine | None:
        for line in self.cart:
            if line.product_id == product_id:
                return line
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "SaleRecord":
        customer_id = data.get("customer_id")
        return cls(
            transaction_id=str(data.get("transaction_id") or ""),
            timestamp=_dt(data.get("timestamp")),
            cart=tuple(SaleLine.from_dict(x) for x in data.get("cart") or []),
            subtotal=to_decimal(data.get("subtotal")),
            discount=to_decimal(data.get("discount")),
            tax=to_decimal(data.get("tax")),
            total=to_decimal(data.get("total")),
            store_credit_used=to_decimal(data.get("store_credit_used")),
            refund_status=str(data.get("refund_status") or REFUND_NONE),
            customer_id=str(customer_id) if customer_id not in (None, "") else None,
            customer_name=_str_or_none(data.get("customer_name")),
            payment_status=str(data.get("payment_status") or PAYMENT_UNPAID),
            amount_paid=to_decimal(data.get("amount_paid")),
            due_date=_dt(data.get("due_date")),
            payments=tuple(Payment.from_dict(x) for x in data.get("payments") or []),
        )

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "timestamp": self.timestamp,
            "cart": [line.to_dict() for line in self.cart],
            "subtotal": self.subtotal,
            "discount": self.discount,
            "tax": self.tax,
            "total": self.total,
            "store_credit_used": self.store_credit_used,
            "refund_status": self.refund_status,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "payment_status": self.payment_status,
            "amount_paid": self.amount_paid,
            "due_date": self.due_date,
            "payments": [p.to_dict() for p in self.payments],
        }


# ============================================================
# RETURN
# ============================================================


@dataclass(frozen=True)
class ReturnedItem:
    product_id: str
    product_name: str
    quantity: Decimal
    reason: str = DEFAULT_RETURN_REASON
    add_to_stock: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "ReturnedItem":
        return cls(
            product_id=str(data["product_id"]),
            product_name=str(data.get("product_name") or ""),
            quantity=quantity_policy.round_quantity(data.get("quantity")),
            reason=str(data.get("reason") or DEFAULT_RETURN_REASON),
            add_to_stock=bool(data.get("add_to_stock", False)),
        )

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "reason": self.reason,
            "add_to_stock": self.add_to_stock,
        }


@dataclass(frozen=True)
class ReturnRecord:
    id: str
    original_sale_id: str
    returned_items: tuple[ReturnedItem, ...]
    refund_amount: Decimal
    refund_method: str
    timestamp: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ReturnRecord":
        return cls(
            id=str(data.get("id") or ""),
            original_sale_id=str(data.get("original_sale_id") or ""),
            timestamp=_dt(data.get("timestamp")),
            returned_items=tuple(
                ReturnedItem.from_dict(x) for x in data.get("returned_items") or []
            ),
            refund_amount=to_decimal(data.get("refund_amount")),
            refund_method=str(data.get("refund_method") or REFUND_ORIGINAL_METHOD),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "original_sale_id": self.original_sale_id,
            "timestamp": self.timestamp,
            "returned_items": [item.to_dict() for item in self.returned_items],
            "refund_amount": self.refund_amount,
            "refund_method": self.refund_method,
        }
