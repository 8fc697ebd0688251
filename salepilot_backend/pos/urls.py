"""
PATH: pos/urls.py

POS URLS

- GET  /api/pos/config/
- POST /api/pos/quote/
"""

from django.urls import path

from pos.views import PosConfigView, PricingQuoteView

app_name = "pos"

urlpatterns = [
    path("config/", PosConfigView.as_view(), name="config"),
    path("quote/", PricingQuoteView.as_view(), name="quote"),
]
