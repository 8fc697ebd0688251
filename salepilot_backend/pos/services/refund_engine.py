# pos/services/refund_engine.py

"""
REFUND ENGINE

Partial, proportional refunds against a persisted Sale.

Math (per quote):
1) return qty clamped to [0, quantity - returned_quantity]; 0 drops the line
2) refund_subtotal = sum(unit price * return qty)
3) refund_discount = sale.discount * (refund_subtotal / sale subtotal)
   (sale subtotal == 0 -> proportion 0)
4) taxable = max(0, refund_subtotal - refund_discount)
   refund_tax = taxable * tax_rate
   refund_total = taxable + refund_tax

Rules:
- refund_total must be > 0, otherwise nothing is recorded.
- Restock is a flag carried on each returned item. Stock is never touched here.
- Cumulative returned_quantity never exceeds the sold quantity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Mapping

from django.utils import timezone

from pos.services import quantity_policy
from pos.services.exceptions import (
    CollaboratorError,
    CustomerRequired,
    NotFound,
    OperationInProgress,
)
from pos.services.gateway import SaleGateway
from pos.services.money import ZERO, money, to_decimal
from pos.services.records import (
    DEFAULT_RETURN_REASON,
    REFUND_FULL,
    REFUND_NONE,
    REFUND_ORIGINAL_METHOD,
    REFUND_PARTIAL,
    REFUND_STORE_CREDIT,
    ReturnedItem,
    ReturnRecord,
    SaleLine,
    SaleRecord,
)

logger = logging.getLogger(__name__)


# ============================================================
# VALUES
# ============================================================


@dataclass(frozen=True)
class ReturnSelection:
    product_id: str
    quantity: Decimal
    reason: str = DEFAULT_RETURN_REASON
    restock: bool = False

    @classmethod
    def from_dict(cls, data: dict, *, product_id=None) -> "ReturnSelection":
        return cls(
            product_id=str(product_id if product_id is not None else data["product_id"]),
            quantity=to_decimal(data.get("quantity")),
            reason=str(data.get("reason") or DEFAULT_RETURN_REASON),
            restock=bool(data.get("restock", data.get("add_to_stock", False))),
        )


@dataclass(frozen=True)
class RefundLine:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: Decimal
    reason: str
    restock: bool

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class RefundQuote:
    lines: tuple[RefundLine, ...]
    refund_subtotal: Decimal
    proportion_of_sale: Decimal
    refund_discount: Decimal
    taxable_refund: Decimal
    refund_tax: Decimal
    refund_total: Decimal

    @property
    def is_refundable(self) -> bool:
        return self.refund_total > ZERO


@dataclass(frozen=True)
class RefundResult:
    return_record: ReturnRecord
    sale: SaleRecord
    quote: RefundQuote


# ============================================================
# PURE HELPERS
# ============================================================


def _normalize_selections(selections) -> list[ReturnSelection]:
    """
    Accepts a mapping product_id -> ReturnSelection | dict,
    or any iterable of ReturnSelection / dict.
    """
    if selections is None:
        return []

    out: list[ReturnSelection] = []

    if isinstance(selections, Mapping):
        for product_id, value in selections.items():
            if isinstance(value, ReturnSelection):
                out.append(replace(value, product_id=str(product_id)))
            else:
                out.append(ReturnSelection.from_dict(value or {}, product_id=product_id))
        return out

    for value in selections:
        out.append(value if isinstance(value, ReturnSelection) else ReturnSelection.from_dict(value))
    return out


def original_subtotal(sale: SaleRecord) -> Decimal:
    return sum((line.price * line.quantity for line in sale.cart), ZERO)


def quote_refund(*, sale: SaleRecord, selections, tax_rate) -> RefundQuote:
    by_product = {line.product_id: line for line in sale.cart}

    lines: list[RefundLine] = []
    for sel in _normalize_selections(selections):
        sale_line = by_product.get(sel.product_id)
        if sale_line is None:
            continue

        qty = quantity_policy.clamp(sel.quantity, sale_line.remaining_quantity)
        if qty <= ZERO:
            continue

        lines.append(
            RefundLine(
                product_id=sale_line.product_id,
                name=sale_line.name,
                unit_price=sale_line.price,
                quantity=qty,
                reason=sel.reason or DEFAULT_RETURN_REASON,
                restock=sel.restock,
            )
        )

    refund_subtotal = sum((line.line_total for line in lines), ZERO)

    base = original_subtotal(sale)
    proportion = refund_subtotal / base if base > ZERO else ZERO

    refund_discount = max(ZERO, sale.discount) * proportion
    taxable_refund = max(ZERO, refund_subtotal - refund_discount)
    refund_tax = taxable_refund * max(ZERO, to_decimal(tax_rate))

    return RefundQuote(
        lines=tuple(lines),
        refund_subtotal=refund_subtotal,
        proportion_of_sale=proportion,
        refund_discount=refund_discount,
        taxable_refund=taxable_refund,
        refund_tax=refund_tax,
        refund_total=taxable_refund + refund_tax,
    )


def build_return(
    *,
    sale: SaleRecord,
    quote: RefundQuote,
    refund_method: str = REFUND_ORIGINAL_METHOD,
    now: datetime,
) -> ReturnRecord:
    return ReturnRecord(
        id=f"RET-{int(now.timestamp() * 1000)}",
        original_sale_id=sale.transaction_id,
        timestamp=now,
        returned_items=tuple(
            ReturnedItem(
                product_id=line.product_id,
                product_name=line.name,
                quantity=line.quantity,
                reason=line.reason,
                add_to_stock=line.restock,
            )
            for line in quote.lines
        ),
        refund_amount=money(quote.refund_total),
        refund_method=str(refund_method or REFUND_ORIGINAL_METHOD),
    )


def refund_status_for(lines: Iterable[SaleLine]) -> str:
    lines = list(lines)
    if not any(line.returned_quantity > ZERO for line in lines):
        return REFUND_NONE
    if all(line.returned_quantity >= line.quantity for line in lines):
        return REFUND_FULL
    return REFUND_PARTIAL


def apply_return(sale: SaleRecord, return_record: ReturnRecord) -> SaleRecord:
    returned: dict[str, Decimal] = {}
    for item in return_record.returned_items:
        returned[item.product_id] = returned.get(item.product_id, ZERO) + item.quantity

    cart = tuple(
        replace(
            line,
            returned_quantity=min(
                line.quantity,
                quantity_policy.round_quantity(line.returned_quantity + returned.get(line.product_id, ZERO)),
            ),
        )
        for line in sale.cart
    )
    return replace(sale, cart=cart, refund_status=refund_status_for(cart))


# ============================================================
# ENGINE (ASYNC, TALKS TO THE GATEWAY)
# ============================================================


class RefundEngine:
    def __init__(
        self,
        *,
        gateway: SaleGateway,
        tax_rate=ZERO,
        enable_store_credit: bool = True,
        clock: Callable[[], datetime] | None = None,
    ):
        self._gateway = gateway
        self._tax_rate = to_decimal(tax_rate)
        self._enable_store_credit = enable_store_credit
        self._clock = clock or timezone.now
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def lookup_sale(self, transaction_id) -> SaleRecord:
        key = str(transaction_id or "").strip()
        if not key:
            raise NotFound("Enter a transaction ID to look up.")
        return await self._gateway.fetch_sale_by_transaction_id(key)

    def quote(self, *, sale: SaleRecord, selections) -> RefundQuote:
        return quote_refund(sale=sale, selections=selections, tax_rate=self._tax_rate)

    async def process(
        self,
        *,
        sale: SaleRecord,
        selections,
        refund_method: str = REFUND_ORIGINAL_METHOD,
    ) -> RefundResult | None:
        """
        Returns None when nothing is refundable (no gateway call is made).
        """
        if self._in_flight:
            raise OperationInProgress("A refund for this sale is already being processed.")

        quote = self.quote(sale=sale, selections=selections)
        if not quote.is_refundable:
            logger.info("Refund skipped: nothing refundable", extra={"transaction_id": sale.transaction_id})
            return None

        if refund_method == REFUND_STORE_CREDIT:
            if not self._enable_store_credit:
                raise CustomerRequired("Store credit refunds are disabled.")
            if not sale.customer_id:
                raise CustomerRequired("A store credit refund requires a sale with a customer.")

        draft = build_return(sale=sale, quote=quote, refund_method=refund_method, now=self._clock())

        self._in_flight = True
        try:
            record = await self._gateway.submit_return(draft)
        except CollaboratorError as exc:
            logger.warning(
                "Return submission failed",
                extra={"transaction_id": sale.transaction_id, "code": exc.code, "error": exc.message},
            )
            raise
        finally:
            self._in_flight = False

        logger.info(
            "Return recorded",
            extra={
                "return_id": record.id,
                "transaction_id": sale.transaction_id,
                "refund_amount": str(record.refund_amount),
            },
        )
        return RefundResult(return_record=record, sale=apply_return(sale, record), quote=quote)
