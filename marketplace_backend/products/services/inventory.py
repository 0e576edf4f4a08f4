# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY CORE SERVICES

Purpose:
- Lock the product rows an order is about to consume.
- Validate requested quantities against the locked rows.
- Decrement stock with a single conditional UPDATE.

Rules:
- Quantities are integer units.
- count_in_stock is never written with a value computed in Python.
  The decrement is `count_in_stock = count_in_stock - qty WHERE count_in_stock >= qty`,
  so two buyers racing for the last unit cannot both win.
- Callers run these inside transaction.atomic (order creation does).
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F

from backend.exceptions import NotFoundError, StockError
from products.models import Product

logger = logging.getLogger(__name__)


def lock_products(product_ids) -> dict:
    """
    Lock and return products keyed by id (as str).

    Rows are locked in primary-key order to keep lock acquisition
    deterministic across concurrent checkouts.
    """
    ids = sorted({str(pid) for pid in product_ids})
    qs = Product.objects.select_for_update().filter(id__in=ids).order_by("id")
    products = {str(p.id): p for p in qs}

    missing = [pid for pid in ids if pid not in products]
    if missing:
        raise NotFoundError(f"Product not found: {missing[0]}", product_id=missing[0])

    return products


def ensure_available(product: Product, quantity: int, *, name: str = "") -> None:
    """
    Raise StockError when `product` cannot cover `quantity`.
    """
    if not product.is_active or product.count_in_stock < quantity:
        raise StockError(
            product_name=name or product.name,
            requested=quantity,
            available=product.count_in_stock if product.is_active else 0,
        )


def decrement_stock(*, product_id, quantity: int, name: str = "") -> None:
    """
    Atomic conditional decrement.

    Raises StockError when fewer than `quantity` units remain at the moment
    of the UPDATE. Nothing is written in that case.
    """
    if quantity <= 0:
        raise ValueError("quantity must be positive")

    updated = Product.objects.filter(
        id=product_id,
        count_in_stock__gte=quantity,
    ).update(count_in_stock=F("count_in_stock") - quantity)

    if updated:
        return

    available = (
        Product.objects.filter(id=product_id)
        .values_list("count_in_stock", flat=True)
        .first()
    )
    logger.warning(
        "Conditional stock decrement refused",
        extra={
            "product_id": str(product_id),
            "requested": quantity,
            "available": available,
        },
    )
    raise StockError(product_name=name or str(product_id), requested=quantity, available=available)


@transaction.atomic
def restock(*, product_id, quantity: int) -> int:
    """
    Add units back to a product (seller restock, cancelled orders).
    Returns the new count.
    """
    if quantity <= 0:
        raise ValueError("quantity must be positive")

    Product.objects.filter(id=product_id).update(
        count_in_stock=F("count_in_stock") + quantity
    )
    return Product.objects.values_list("count_in_stock", flat=True).get(id=product_id)
