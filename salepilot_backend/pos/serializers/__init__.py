from .quote import QuoteInputSerializer, QuoteLineInputSerializer

__all__ = [
    "QuoteInputSerializer",
    "QuoteLineInputSerializer",
]
