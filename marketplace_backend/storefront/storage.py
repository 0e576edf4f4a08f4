# storefront/storage.py

"""
CART PERSISTENCE

The cart is stored as one JSON blob under the key "cart":

    {"schema_version": 1, "cart": {"lines": [...], "applied_coupon": ..., "discount_amount": "0"}}

Decimals travel as strings. A blob that is corrupt, has another schema
version or breaks a cart invariant is discarded and the cart starts empty.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from decimal import InvalidOperation
from pathlib import Path

from storefront.cart.state import EMPTY_CART, CartState

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "cart"
SCHEMA_VERSION = 1


class MemoryStorage:
    """Key/value storage held in a dict."""

    def __init__(self, initial: dict | None = None):
        self._data = dict(initial or {})

    def get(self, key: str):
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """
    Key/value storage backed by one JSON object on disk.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            logger.warning("Unreadable storage file", extra={"path": str(self.path)})
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".cart-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def get(self, key: str):
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def save_cart(storage, state: CartState) -> None:
    blob = {"schema_version": SCHEMA_VERSION, "cart": state.to_dict()}
    storage.set(CART_STORAGE_KEY, json.dumps(blob))


def load_cart(storage) -> CartState:
    raw = storage.get(CART_STORAGE_KEY)
    if not raw:
        return EMPTY_CART

    try:
        blob = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding corrupt cart snapshot")
        storage.remove(CART_STORAGE_KEY)
        return EMPTY_CART

    version = blob.get("schema_version") if isinstance(blob, dict) else None
    if version != SCHEMA_VERSION:
        logger.warning(
            "Discarding cart snapshot with unsupported schema version",
            extra={"schema_version": version},
        )
        storage.remove(CART_STORAGE_KEY)
        return EMPTY_CART

    try:
        return CartState.from_dict(blob.get("cart", {}))
    except (AttributeError, KeyError, TypeError, ValueError, InvalidOperation) as exc:
        logger.warning("Discarding invalid cart snapshot", extra={"error": str(exc)})
        storage.remove(CART_STORAGE_KEY)
        return EMPTY_CART
