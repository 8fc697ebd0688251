from .sale import PaymentInputSerializer, SaleCreateSerializer, SalePaymentSerializer, SaleSerializer
from .sale_item import SaleItemSerializer
from .sale_return import (
    RefundQuoteInputSerializer,
    RefundQuoteSerializer,
    ReturnCreateSerializer,
    SaleReturnSerializer,
)

__all__ = [
    "PaymentInputSerializer",
    "RefundQuoteInputSerializer",
    "RefundQuoteSerializer",
    "ReturnCreateSerializer",
    "SaleCreateSerializer",
    "SaleItemSerializer",
    "SalePaymentSerializer",
    "SaleReturnSerializer",
    "SaleSerializer",
]
