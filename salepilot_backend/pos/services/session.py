# pos/services/session.py

"""
POS SESSION (ONE TERMINAL, ONE CASHIER)

Owns exactly one Cart and one HeldSaleStack plus the register inputs:
discount, selected customer, store-credit toggle, payment method, cash received.

State guard:
- IDLE        -> the cart is empty; recall is allowed
- ACTIVE_SALE -> the cart has lines; recall is refused

Nothing derived is stored. pricing() re-derives from canonical state every call.
"""

from __future__ import annotations

import enum
import logging
from decimal import Decimal

from pos.services import pricing, tender
from pos.services.cart import Cart, CartLines
from pos.services.config import PaymentMethod, PosConfig, build_pos_config
from pos.services.exceptions import ActiveSaleInProgress, Outcome
from pos.services.held_sales import HeldSale, HeldSaleStack
from pos.services.money import ZERO, to_decimal
from pos.services.records import CustomerSnapshot, ProductSnapshot

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    IDLE = "idle"
    ACTIVE_SALE = "active_sale"


class PosSession:
    def __init__(self, *, config: PosConfig | None = None):
        self.config = config or build_pos_config()
        self.cart = Cart()
        self.held = HeldSaleStack()

        self.discount_amount: Decimal = ZERO
        self.customer: CustomerSnapshot | None = None
        self.requested_credit: Decimal = ZERO
        self.payment_method: PaymentMethod = self.config.default_payment_method
        self.cash_received: Decimal = ZERO

    # --------------------------------------------------
    # STATE
    # --------------------------------------------------

    @property
    def state(self) -> SessionState:
        return SessionState.IDLE if self.cart.is_empty else SessionState.ACTIVE_SALE

    def lines(self) -> CartLines:
        return self.cart.lines()

    # --------------------------------------------------
    # CART (delegates; never raises)
    # --------------------------------------------------

    def add_product(self, product: ProductSnapshot, step=None) -> Outcome:
        return self.cart.add(product, step)

    def set_quantity(self, product_id, quantity) -> Outcome:
        return self.cart.set_quantity(product_id, quantity)

    def quantity_from_target_amount(self, product_id, target_amount) -> Outcome:
        return self.cart.quantity_from_target_amount(product_id, target_amount)

    def remove(self, product_id) -> Outcome:
        return self.cart.remove(product_id)

    def clear(self) -> None:
        """Empty the cart and drop discount, customer and applied credit."""
        self.cart.clear()
        self.discount_amount = ZERO
        self.customer = None
        self.requested_credit = ZERO

    # --------------------------------------------------
    # REGISTER INPUTS
    # --------------------------------------------------

    def set_discount(self, amount) -> None:
        self.discount_amount = max(ZERO, to_decimal(amount))

    def select_customer(self, customer: CustomerSnapshot | None) -> None:
        # A different customer means a different credit balance.
        self.customer = customer
        self.requested_credit = ZERO

    def toggle_store_credit(self) -> bool:
        """
        All-or-nothing toggle.
        Returns True when credit is applied after the call.
        """
        if self.requested_credit > ZERO:
            self.requested_credit = ZERO
            return False

        if not self.config.enable_store_credit or self.customer is None:
            return False

        snapshot = self.pricing()
        self.requested_credit = pricing.credit_to_apply(
            snapshot.total_before_credit, self.customer.store_credit
        )
        return self.requested_credit > ZERO

    def select_payment_method(self, name_or_id) -> bool:
        method = self.config.payment_method(name_or_id)
        if method is None:
            return False
        self.payment_method = method
        return True

    def set_cash_received(self, amount) -> None:
        self.cash_received = max(ZERO, to_decimal(amount))

    # --------------------------------------------------
    # DERIVED
    # --------------------------------------------------

    def pricing(self) -> pricing.PricingSnapshot:
        return pricing.derive(
            self.cart.lines(),
            discount_amount=self.discount_amount,
            tax_rate=self.config.tax_rate,
            customer_store_credit=self.customer.store_credit if self.customer else ZERO,
            requested_credit=self.requested_credit,
        )

    @property
    def is_cash_payment(self) -> bool:
        return tender.is_cash_method(self.payment_method.name)

    def change_due(self) -> Decimal:
        return tender.change_due(self.pricing().total, self.cash_received)

    def suggested_tenders(self) -> list[Decimal]:
        return tender.suggested_tenders(self.pricing().total)

    # --------------------------------------------------
    # HOLD / RECALL
    # --------------------------------------------------

    def hold(self) -> bool:
        if not self.held.hold(self.cart):
            return False
        self.clear()
        return True

    def recall(self, index: int) -> HeldSale:
        if self.state is not SessionState.IDLE:
            raise ActiveSaleInProgress(
                "Please hold or complete the current sale before recalling another."
            )
        snapshot = self.held.recall(index, active_cart=self.cart)
        self.cart.restore(snapshot)
        return snapshot

    # --------------------------------------------------
    # NEW SALE
    # --------------------------------------------------

    def start_new_sale(self) -> None:
        """Reset every per-sale input in one step after a sale is persisted."""
        self.clear()
        self.cash_received = ZERO
        logger.debug("POS session reset for a new sale")
