# pos/services/sale_finalizer.py

"""
SALE FINALIZER (STATE MACHINE)

BUILDING -> FINALIZING -> PERSISTED | FAILED

Rules:
- Entry checks run BEFORE anything changes. A failed check raises and
  leaves both the finalizer state and the session untouched.
- Only one finalize may await the gateway at a time (no double submit).
- On success the session is reset as one step (start_new_sale).
- On gateway failure the session keeps its cart so the cashier can retry.
- Gateway errors propagate unchanged. No retries here.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timedelta
from typing import Callable

from django.utils import timezone

from pos.services import tender
from pos.services.exceptions import (
    CollaboratorError,
    CustomerRequired,
    EmptyCart,
    InsufficientTender,
    InvalidAmount,
    OperationInProgress,
)
from pos.services.gateway import SaleGateway
from pos.services.money import ZERO, money
from pos.services.records import (
    PAYMENT_PAID,
    PAYMENT_UNPAID,
    REFUND_NONE,
    Payment,
    SaleLine,
    SaleRecord,
)
from pos.services.session import PosSession

logger = logging.getLogger(__name__)


class FinalizerState(str, enum.Enum):
    BUILDING = "building"
    FINALIZING = "finalizing"
    PERSISTED = "persisted"
    FAILED = "failed"


class FinalizationMode(str, enum.Enum):
    IMMEDIATE = "immediate"
    INVOICE = "invoice"


def _epoch_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


# ============================================================
# DRAFT ASSEMBLY (PURE)
# ============================================================


def build_draft_sale(
    session: PosSession,
    *,
    mode: FinalizationMode = FinalizationMode.IMMEDIATE,
    now: datetime,
) -> SaleRecord:
    """
    Validate the session and assemble the Sale handed to the gateway.
    Raises EmptyCart / InvalidAmount / CustomerRequired / InsufficientTender.
    """
    mode = FinalizationMode(mode)

    lines = list(session.lines())
    if not lines:
        raise EmptyCart("Cannot complete a sale with an empty cart.")

    snapshot = session.pricing()
    total = money(snapshot.total)

    if total < ZERO:
        raise InvalidAmount("Sale total cannot be negative.")

    if mode is FinalizationMode.INVOICE and session.customer is None:
        raise CustomerRequired("Please select a customer to charge this sale to their account.")

    if mode is FinalizationMode.IMMEDIATE and session.is_cash_payment:
        if session.cash_received < total:
            raise InsufficientTender(
                f"Cash received ({money(session.cash_received)}) is less than the total ({total})."
            )

    ms = _epoch_ms(now)
    method_name = session.payment_method.name

    if mode is FinalizationMode.IMMEDIATE:
        payment_status = PAYMENT_PAID
        amount_paid = total
        payments = (Payment(amount=total, method=method_name, id=f"PAY-{ms}", date=now),)
        due_date = None
    else:
        payment_status = PAYMENT_UNPAID
        amount_paid = ZERO
        payments = ()
        due_date = now + timedelta(days=session.config.invoice_due_days)

    customer = session.customer

    return SaleRecord(
        transaction_id=f"temp_{ms}",
        timestamp=now,
        cart=tuple(
            SaleLine(
                product_id=line.product_id,
                name=line.name,
                price=line.unit_price,
                quantity=line.quantity,
                unit_of_measure=line.unit_of_measure,
                cost_price=line.cost_price,
                returned_quantity=ZERO,
            )
            for line in lines
        ),
        subtotal=money(snapshot.subtotal),
        discount=money(snapshot.discount_amount),
        tax=money(snapshot.tax_amount),
        total=total,
        store_credit_used=money(snapshot.applied_store_credit),
        refund_status=REFUND_NONE,
        customer_id=customer.id if customer else None,
        customer_name=customer.name if customer else None,
        payment_status=payment_status,
        amount_paid=amount_paid,
        due_date=due_date,
        payments=payments,
    )


# ============================================================
# FINALIZER
# ============================================================


class SaleFinalizer:
    def __init__(self, *, gateway: SaleGateway, clock: Callable[[], datetime] | None = None):
        self._gateway = gateway
        self._clock = clock or timezone.now
        self._in_flight = False

        self.state = FinalizerState.BUILDING
        self.last_error: CollaboratorError | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def finalize(
        self,
        session: PosSession,
        *,
        mode: FinalizationMode = FinalizationMode.IMMEDIATE,
    ) -> SaleRecord:
        if self._in_flight:
            raise OperationInProgress("This sale is already being completed.")

        draft = build_draft_sale(session, mode=mode, now=self._clock())

        # Set before the first await so a second call fails fast.
        self._in_flight = True
        self.state = FinalizerState.FINALIZING
        logger.info(
            "Finalizing sale",
            extra={"draft_id": draft.transaction_id, "mode": FinalizationMode(mode).value, "total": str(draft.total)},
        )

        try:
            sale = await self._gateway.create_sale(draft)
        except CollaboratorError as exc:
            self.state = FinalizerState.FAILED
            self.last_error = exc
            logger.warning(
                "Sale finalization failed",
                extra={"draft_id": draft.transaction_id, "code": exc.code, "error": exc.message},
            )
            raise
        except BaseException:
            # Cancelled or unexpected error: never stay stuck mid-flight.
            self.state = FinalizerState.FAILED
            raise
        finally:
            self._in_flight = False

        self.state = FinalizerState.PERSISTED
        self.last_error = None
        session.start_new_sale()

        logger.info(
            "Sale persisted",
            extra={"transaction_id": sale.transaction_id, "total": str(sale.total)},
        )
        return sale
