# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Read-only catalog for the POS terminal (the engine snapshots it).
- Scanner lookup by SKU or barcode.
- Low-stock list (reorder_point or POS default threshold).
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import Product
from products.serializers.product import ProductSerializer
from products.services.inventory import default_low_stock_threshold


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Product endpoints.

    - GET /api/products/?q=<search>&is_active=true&unit_of_measure=kg
    - GET /api/products/lookup/?code=<sku-or-barcode>
    - GET /api/products/low-stock/
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_active", "unit_of_measure", "category"]

    def get_queryset(self):
        qs = Product.objects.all().order_by("name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q) | Q(barcode__iexact=q))

        return qs

    @extend_schema(
        parameters=[OpenApiParameter("code", str, required=True, description="SKU or barcode")],
        responses={200: ProductSerializer},
        description="Exact SKU / barcode lookup (scanner input).",
    )
    @action(detail=False, methods=["get"], url_path="lookup")
    def lookup(self, request):
        code = (request.query_params.get("code") or "").strip()
        if not code:
            return Response(
                {"error": {"code": "VALIDATION_ERROR", "message": "code is required"}},
                status=status.HTTP_400_BAD_REQUEST,
            )

        product = (
            Product.objects.filter(is_active=True)
            .filter(Q(sku__iexact=code) | Q(barcode=code))
            .first()
        )
        if product is None:
            return Response(
                {"error": {"code": "NOT_FOUND", "message": f"No product matches '{code}'."}},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(self.get_serializer(product).data)

    @extend_schema(responses={200: ProductSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        threshold = default_low_stock_threshold()
        products = [
            p for p in Product.objects.filter(is_active=True, stock__gt=0).order_by("stock")
            if p.is_low_stock(default_threshold=threshold)
        ]
        return Response(self.get_serializer(products, many=True).data)
