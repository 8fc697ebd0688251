from .api import PosConfigView, PricingQuoteView

__all__ = [
    "PosConfigView",
    "PricingQuoteView",
]
