# sales/views/sale_return.py

"""
RETURNS (PARTIAL REFUNDS)

- GET  /api/returns/?transaction_id=<id>
- POST /api/returns/   {transaction_id, items[], refund_method}

Creation runs the POS RefundEngine against the in-process gateway, so the
API and the terminal share one refund computation.
"""

from __future__ import annotations

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from pos.services.config import load_pos_config
from pos.services.exceptions import PosError
from pos.services.records import REFUND_ORIGINAL_METHOD, REFUND_STORE_CREDIT
from pos.services.refund_engine import RefundEngine
from pos.views.errors import engine_error_response, error_response
from sales.models import SaleReturn
from sales.serializers import ReturnCreateSerializer, SaleReturnSerializer, SaleSerializer
from sales.services.gateway import DjangoSaleGateway
from sales.services.sale_service import get_sale_by_transaction_id


class ReturnViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleReturnSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = (
            SaleReturn.objects.all()
            .select_related("sale")
            .prefetch_related("items", "items__sale_item")
            .order_by("-created_at")
        )
        transaction_id = (self.request.query_params.get("transaction_id") or "").strip()
        if transaction_id:
            qs = qs.filter(sale__transaction_id__iexact=transaction_id)
        return qs

    def get_serializer_class(self):
        if self.action == "create":
            return ReturnCreateSerializer
        return SaleReturnSerializer

    @extend_schema(request=ReturnCreateSerializer, responses={201: SaleReturnSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ReturnCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        config = load_pos_config()
        refund_method = serializer.validated_data["refund_method"].strip()
        if refund_method not in (REFUND_ORIGINAL_METHOD, REFUND_STORE_CREDIT):
            method = config.payment_method(refund_method)
            if method is None:
                return error_response(
                    code="VALIDATION_ERROR",
                    message=f"Unknown refund method: {refund_method}",
                    http_status=status.HTTP_400_BAD_REQUEST,
                )
            refund_method = method.name

        engine = RefundEngine(
            gateway=DjangoSaleGateway(user=request.user),
            tax_rate=config.tax_rate,
            enable_store_credit=config.enable_store_credit,
        )

        try:
            sale = async_to_sync(engine.lookup_sale)(serializer.validated_data["transaction_id"])
            result = async_to_sync(engine.process)(
                sale=sale,
                selections=serializer.selections(),
                refund_method=refund_method,
            )
        except PosError as exc:
            return engine_error_response(exc)

        if result is None:
            return error_response(
                code="NOTHING_TO_REFUND",
                message="Select at least one item with a quantity to return.",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        sale_return = SaleReturn.objects.select_related("sale").get(reference=result.return_record.id)
        payload = SaleReturnSerializer(sale_return).data
        payload["sale"] = SaleSerializer(get_sale_by_transaction_id(sale.transaction_id)).data
        return Response(payload, status=status.HTTP_201_CREATED)
