# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite regardless of DATABASE_URL
- Fast password hashing
- Throttle rates raised so suites never trip them
- Fixed checkout policy values so totals in tests are stable
"""

from __future__ import annotations

from decimal import Decimal

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_RATES": {
        "anon": "10000/min",
        "user": "10000/min",
        "public_write": "10000/min",
        "public_catalog": "10000/min",
    },
}

SHIPPING_FREE_THRESHOLD = Decimal("150.00")
SHIPPING_FLAT_FEE = Decimal("29.90")
ORDER_DELIVERY_LEAD_DAYS = 3
NEW_USER_WINDOW_DAYS = 7
DEFAULT_PAYMENT_METHOD = "cash_on_delivery"
