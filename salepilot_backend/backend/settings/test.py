# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite
- Fast password hashing
- No throttling, quiet logs
- Register config pinned (tests override POS per class when they need tax)
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK

DEBUG = False
SECRET_KEY = "test-only-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

POS = {
    "TAX_RATE_PERCENT": "0",
    "LOW_STOCK_THRESHOLD": 5,
    "ENABLE_STORE_CREDIT": True,
    "PAYMENT_METHODS": ["Cash", "Card", "Mobile Money"],
    "CURRENCY_SYMBOL": "$",
    "CURRENCY_CODE": "USD",
    "CURRENCY_POSITION": "before",
    "INVOICE_DUE_DAYS": 30,
}

for _logger in LOGGING["loggers"].values():
    _logger["level"] = "CRITICAL"
