# sales/urls.py

"""
SALES API URLS

Mounted at /api/ by backend/urls.py:
    /api/sales/                                  list / create
    /api/sales/<transaction_id>/                 retrieve (case-insensitive)
    /api/sales/<transaction_id>/payments/        invoice payment
    /api/sales/<transaction_id>/refund-quote/    return quote
    /api/returns/                                list / create
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.views.sale import SaleViewSet
from sales.views.sale_return import ReturnViewSet

router = DefaultRouter()
router.register(r"sales", SaleViewSet, basename="sales")
router.register(r"returns", ReturnViewSet, basename="returns")

urlpatterns = [
    path("", include(router.urls)),
]
