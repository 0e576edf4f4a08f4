# orders/services/stats.py

"""
ORDER STATISTICS

Admin dashboard numbers:
- total orders and revenue (cancelled orders excluded from revenue)
- order count per status (every status present, zero if unused)
- orders in the last 7 days with a per-day breakdown
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from orders.models import Order

WINDOW_DAYS = 7


def _money(x) -> str:
    if x is None:
        return "0.00"
    return f"{Decimal(str(x)):.2f}"


def order_stats(*, now=None) -> dict:
    now = now or timezone.now()
    since = now - timedelta(days=WINDOW_DAYS)

    orders = Order.objects.all()

    revenue = (
        orders.exclude(status=Order.STATUS_CANCELLED)
        .aggregate(total=Sum("grand_total"))
        .get("total")
    )

    status_counts = {status: 0 for status, _label in Order.STATUS_CHOICES}
    for row in orders.values("status").annotate(count=Count("id")):
        status_counts[row["status"]] = row["count"]

    recent = orders.filter(created_at__gte=since)

    daily = (
        recent.annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(count=Count("id"), revenue=Sum("grand_total"))
        .order_by("day")
    )

    return {
        "total_orders": orders.count(),
        "total_revenue": _money(revenue),
        "status_counts": status_counts,
        "last_7_days": recent.count(),
        "daily": [
            {
                "date": row["day"].isoformat(),
                "count": row["count"],
                "revenue": _money(row["revenue"]),
            }
            for row in daily
        ],
    }
