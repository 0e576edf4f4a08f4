"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed status transitions for orders.

    pending    -> processing | cancelled
    processing -> shipped    | cancelled
    shipped    -> delivered
    delivered, cancelled: terminal

Side effects of a transition:
- delivered stamps is_delivered / delivered_at
- cancelled puts the ordered units back on the shelf
  (coupon usage is never given back)
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from backend.exceptions import MarketplaceError
from orders.models import Order
from products.services.inventory import restock

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================


class InvalidOrderTransitionError(MarketplaceError):
    code = "invalid_status_transition"
    http_status = 409


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_PROCESSING,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_PROCESSING: {
        Order.STATUS_SHIPPED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_SHIPPED: {
        Order.STATUS_DELIVERED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidOrderTransitionError(
            f"Order {order.order_no} cannot move from "
            f"'{order.status}' to '{target_status}'",
            order_id=str(order.id),
        )


@transaction.atomic
def transition_order(*, order: Order, target_status: str, actor=None) -> Order:
    order = Order.objects.select_for_update().get(pk=order.pk)
    validate_transition(order=order, target_status=target_status)

    previous = order.status
    order.status = target_status
    update_fields = ["status", "updated_at"]

    if target_status == Order.STATUS_DELIVERED:
        order.is_delivered = True
        order.delivered_at = timezone.now()
        update_fields += ["is_delivered", "delivered_at"]

    if target_status == Order.STATUS_CANCELLED:
        for item in order.items.all():
            if item.product_id:
                restock(product_id=item.product_id, quantity=item.quantity)

    order.save(update_fields=update_fields)

    logger.info(
        "Order status changed",
        extra={
            "order_id": str(order.id),
            "order_no": order.order_no,
            "from_status": previous,
            "to_status": target_status,
            "actor_id": str(getattr(actor, "id", "") or ""),
        },
    )
    return order
