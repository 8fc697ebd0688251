# pos/services/exceptions.py

"""
POS ENGINE ERRORS + OUTCOMES

Purpose:
- One taxonomy for every failure the sale engine can report.
- A small Outcome value for operations that recover locally
  (cart / quantity / pricing / tender never raise past their boundary).

Propagation rules:
- Cart operations return Outcome(ok=False, code=...) instead of raising.
- HeldSaleStack, SaleFinalizer and RefundEngine raise PosError subclasses.
- Collaborator failures (NetworkError / ValidationError) are re-raised verbatim,
  never retried here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# ============================================================
# ERROR CODES
# ============================================================

STOCK_EXCEEDED = "stock_exceeded"
OUT_OF_STOCK = "out_of_stock"
INVALID_UNIT = "invalid_unit"
INVALID_AMOUNT = "invalid_amount"
RESULT_TOO_SMALL = "result_too_small"
CUSTOMER_REQUIRED = "customer_required"
ACTIVE_SALE_IN_PROGRESS = "active_sale_in_progress"
NOT_FOUND = "not_found"
OPERATION_IN_PROGRESS = "operation_in_progress"
EMPTY_CART = "empty_cart"
INSUFFICIENT_TENDER = "insufficient_tender"
NETWORK_ERROR = "network_error"
VALIDATION_ERROR = "validation_error"


# ============================================================
# DOMAIN ERRORS
# ============================================================


class PosError(Exception):
    """Base engine error. `code` is stable and safe to expose to clients."""

    code = "pos_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class StockExceeded(PosError):
    code = STOCK_EXCEEDED


class OutOfStock(PosError):
    code = OUT_OF_STOCK


class InvalidUnit(PosError):
    code = INVALID_UNIT


class InvalidAmount(PosError):
    code = INVALID_AMOUNT


class ResultTooSmall(PosError):
    code = RESULT_TOO_SMALL


class CustomerRequired(PosError):
    code = CUSTOMER_REQUIRED


class ActiveSaleInProgress(PosError):
    code = ACTIVE_SALE_IN_PROGRESS


class NotFound(PosError):
    code = NOT_FOUND


class OperationInProgress(PosError):
    code = OPERATION_IN_PROGRESS


class EmptyCart(PosError):
    code = EMPTY_CART


class InsufficientTender(PosError):
    code = INSUFFICIENT_TENDER


class CollaboratorError(PosError):
    """
    Raised by a SaleGateway implementation.
    The message is passed through to the caller untouched.
    """


class NetworkError(CollaboratorError):
    code = NETWORK_ERROR


class ValidationError(CollaboratorError):
    code = VALIDATION_ERROR


# ============================================================
# OUTCOME (LOCALLY RECOVERED OPERATIONS)
# ============================================================


@dataclass(frozen=True)
class Outcome:
    """
    Result of a cart mutation.

    - ok=False means the request was declined and the cart is unchanged.
    - adjusted=True means the request was accepted but clamped
      (the UI decides whether to warn).
    - line is the resulting line (None when the line was removed / never existed).
    """

    ok: bool
    code: str | None = None
    message: str = ""
    line: Any = None
    adjusted: bool = False

    @classmethod
    def success(cls, *, line=None, adjusted: bool = False, message: str = "") -> "Outcome":
        return cls(ok=True, line=line, adjusted=adjusted, message=message)

    @classmethod
    def declined(cls, code: str, message: str, *, line=None) -> "Outcome":
        return cls(ok=False, code=code, message=message, line=line)

    def __bool__(self) -> bool:
        return self.ok
