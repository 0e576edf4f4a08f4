from .orders import (
    MyOrdersView,
    OrderDetailView,
    OrderListCreateView,
    OrderStatusView,
    SellerOrdersView,
)
from .stats import OrderStatsView

__all__ = [
    "OrderListCreateView",
    "MyOrdersView",
    "SellerOrdersView",
    "OrderDetailView",
    "OrderStatusView",
    "OrderStatsView",
]
