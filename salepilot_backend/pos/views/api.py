# pos/views/api.py

"""
POS API VIEWS

Purpose:
- Expose the register configuration (tax, store credit, payment methods, currency)
- Price a register state server-side with the POS engine

Hard rules:
- Nothing here writes: quoting never reserves stock or spends credit.
- Prices and stock come from the catalog at request time.
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from customers.models import Customer
from customers.services import customer_service
from pos.serializers import QuoteInputSerializer
from pos.services import quantity_policy
from pos.services.config import load_pos_config
from pos.services.money import format_currency, money
from pos.services.session import PosSession
from pos.views.errors import error_response
from products.models import Product
from products.services.inventory import to_snapshot


# =====================================================
# CONFIG
# =====================================================

class PosConfigView(APIView):
    """
    GET /api/pos/config/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OpenApiTypes.OBJECT}, description="Register configuration (read-only)")
    def get(self, request):
        try:
            config = load_pos_config()
        except ImproperlyConfigured as exc:
            return error_response(
                code="POS_MISCONFIGURED",
                message=str(exc),
                http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(config.to_dict(), status=status.HTTP_200_OK)


# =====================================================
# QUOTE
# =====================================================

def _amount(value) -> str:
    return f"{money(value):.2f}"


def _qty(value) -> str:
    return f"{quantity_policy.round_quantity(value):.3f}"


def _warning(outcome, product_id) -> dict:
    return {
        "product_id": str(product_id),
        "code": (outcome.code or "adjusted").upper(),
        "message": outcome.message,
    }


def _apply_line(session: PosSession, product: Product, line: dict, warnings: list) -> None:
    snapshot = to_snapshot(product)

    added = session.add_product(snapshot)
    if not added.ok:
        warnings.append(_warning(added, product.id))
        return

    amount = line.get("amount")
    quantity = line.get("quantity")

    if amount is not None:
        outcome = session.quantity_from_target_amount(product.id, amount)
    elif quantity is not None and quantity_policy.round_quantity(quantity) != added.line.quantity:
        outcome = session.set_quantity(product.id, quantity)
    else:
        return

    if not outcome.ok or outcome.adjusted:
        warnings.append(_warning(outcome, product.id))


class PricingQuoteView(APIView):
    """
    POST /api/pos/quote/

    Returns:
    - lines (after stock clamping)
    - pricing snapshot (subtotal -> discount -> tax -> store credit -> total)
    - change_due + suggested_tenders for the selected payment method
    - warnings for every declined / clamped line
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=QuoteInputSerializer,
        responses={200: OpenApiTypes.OBJECT},
        examples=[
            OpenApiExample(
                "Cash sale",
                value={
                    "lines": [{"product_id": "00000000-0000-0000-0000-000000000001", "quantity": "2"}],
                    "discount_amount": "0.00",
                    "payment_method": "Cash",
                    "cash_received": "20.00",
                },
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = QuoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        session = PosSession(config=load_pos_config())
        warnings: list[dict] = []

        ids = [line["product_id"] for line in data["lines"]]
        products = {p.id: p for p in Product.objects.filter(id__in=ids, is_active=True)}

        for line in data["lines"]:
            product = products.get(line["product_id"])
            if product is None:
                warnings.append(
                    {
                        "product_id": str(line["product_id"]),
                        "code": "NOT_FOUND",
                        "message": "Product is not available for sale.",
                    }
                )
                continue
            _apply_line(session, product, line, warnings)

        customer_id = data.get("customer_id")
        if customer_id:
            customer = Customer.objects.filter(id=customer_id).first()
            if customer is None:
                return error_response(
                    code="NOT_FOUND",
                    message=f"Customer {customer_id} was not found.",
                    http_status=status.HTTP_404_NOT_FOUND,
                )
            session.select_customer(customer_service.to_snapshot(customer))

        session.set_discount(data["discount_amount"])

        if data["use_store_credit"] and not session.toggle_store_credit():
            warnings.append(
                {
                    "product_id": None,
                    "code": "CUSTOMER_REQUIRED",
                    "message": "Store credit needs a customer with available credit.",
                }
            )

        method = (data.get("payment_method") or "").strip()
        if method and not session.select_payment_method(method):
            return error_response(
                code="VALIDATION_ERROR",
                message=f"Unknown payment method: {method}",
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        session.set_cash_received(data["cash_received"])

        snapshot = session.pricing()
        currency = session.config.currency

        return Response(
            {
                "lines": [
                    {
                        "product_id": line.product_id,
                        "name": line.name,
                        "unit_price": _amount(line.unit_price),
                        "quantity": _qty(line.quantity),
                        "unit_of_measure": line.unit_of_measure,
                        "line_total": _amount(line.line_total),
                        "stock_ceiling": _qty(line.stock_ceiling),
                    }
                    for line in session.lines()
                ],
                "pricing": {
                    "subtotal": _amount(snapshot.subtotal),
                    "discount_amount": _amount(snapshot.discount_amount),
                    "taxable_base": _amount(snapshot.taxable_base),
                    "tax_amount": _amount(snapshot.tax_amount),
                    "total_before_credit": _amount(snapshot.total_before_credit),
                    "applied_store_credit": _amount(snapshot.applied_store_credit),
                    "total": _amount(snapshot.total),
                    "total_display": format_currency(snapshot.total, currency),
                },
                "payment_method": session.payment_method.name,
                "is_cash_payment": session.is_cash_payment,
                "cash_received": _amount(session.cash_received),
                "change_due": _amount(session.change_due()),
                "suggested_tenders": (
                    [_amount(t) for t in session.suggested_tenders()] if session.is_cash_payment else []
                ),
                "warnings": warnings,
            },
            status=status.HTTP_200_OK,
        )
