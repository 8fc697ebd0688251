# products/urls.py

"""
PRODUCTS URLS

Mounted at /api/ by backend/urls.py:
    /api/products/
    /api/products/<uuid>/
    /api/products/lookup/?code=
    /api/products/low-stock/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import ProductViewSet

router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
