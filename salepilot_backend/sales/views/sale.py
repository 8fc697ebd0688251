# sales/views/sale.py

"""
======================================================
PATH: sales/views/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Sales history (list + retrieve by transaction_id, case-insensitive).
- Persist a finalized POS draft (create).
- Record a payment against a charge-to-account sale.
- Quote a partial return before submitting it.

Security:
- Requires IsAuthenticated
======================================================
"""

from __future__ import annotations

from datetime import datetime

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from django.http import Http404
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from pos.services.config import load_pos_config
from pos.services.refund_engine import RefundEngine
from pos.views.errors import validation_error_response
from sales.models import Sale
from sales.serializers import (
    PaymentInputSerializer,
    RefundQuoteInputSerializer,
    RefundQuoteSerializer,
    SaleCreateSerializer,
    SaleSerializer,
)
from sales.services import payment_service, sale_service
from sales.services.gateway import DjangoSaleGateway


def _parse_date(s: str):
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None


class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]
    lookup_field = "transaction_id"
    lookup_value_regex = r"[^/]+"
    filterset_fields = ["payment_status", "refund_status", "customer"]

    # ======================================================
    # QUERYSET
    # ======================================================

    def get_queryset(self):
        qs = (
            Sale.objects.all()
            .select_related("user", "customer")
            .prefetch_related("items", "payments")
            .order_by("-created_at")
        )

        params = self.request.query_params

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(transaction_id__icontains=q) | Q(customer_name__icontains=q))

        date_from = _parse_date((params.get("date_from") or "").strip())
        if date_from:
            qs = qs.filter(created_at__date__gte=date_from)

        date_to = _parse_date((params.get("date_to") or "").strip())
        if date_to:
            qs = qs.filter(created_at__date__lte=date_to)

        return qs

    def get_object(self) -> Sale:
        try:
            return sale_service.get_sale_by_transaction_id(self.kwargs.get(self.lookup_field))
        except Sale.DoesNotExist as exc:
            raise Http404("Sale not found") from exc

    def get_serializer_class(self):
        if self.action == "create":
            return SaleCreateSerializer
        if self.action == "payments":
            return PaymentInputSerializer
        if self.action == "refund_quote":
            return RefundQuoteInputSerializer
        return SaleSerializer

    # ======================================================
    # CREATE (FINALIZED POS DRAFT)
    # ======================================================

    @extend_schema(request=SaleCreateSerializer, responses={201: SaleSerializer})
    def create(self, request, *args, **kwargs):
        serializer = SaleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            sale = sale_service.create_sale(draft=serializer.to_draft(), user=request.user)
        except DjangoValidationError as exc:
            return validation_error_response(exc)

        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    # ======================================================
    # INVOICE PAYMENT
    # POST /api/sales/<transaction_id>/payments/
    # ======================================================

    @extend_schema(request=PaymentInputSerializer, responses={200: SaleSerializer})
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, transaction_id=None):
        sale = self.get_object()

        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            sale = payment_service.record_payment(
                transaction_id=sale.transaction_id,
                amount=serializer.validated_data["amount"],
                method=serializer.validated_data["method"],
                user=request.user,
            )
        except DjangoValidationError as exc:
            return validation_error_response(exc)

        return Response(SaleSerializer(sale).data, status=status.HTTP_200_OK)

    # ======================================================
    # REFUND QUOTE (NO SIDE EFFECTS)
    # POST /api/sales/<transaction_id>/refund-quote/
    # ======================================================

    @extend_schema(request=RefundQuoteInputSerializer, responses={200: RefundQuoteSerializer})
    @action(detail=True, methods=["post"], url_path="refund-quote")
    def refund_quote(self, request, transaction_id=None):
        sale = self.get_object()

        serializer = RefundQuoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        config = load_pos_config()
        engine = RefundEngine(
            gateway=DjangoSaleGateway(user=request.user),
            tax_rate=config.tax_rate,
            enable_store_credit=config.enable_store_credit,
        )
        quote = engine.quote(sale=sale_service.sale_to_record(sale), selections=serializer.selections())
        return Response(RefundQuoteSerializer(quote).data, status=status.HTTP_200_OK)
