from .order import Order, generate_order_no
from .order_item import OrderItem

__all__ = [
    "Order",
    "OrderItem",
    "generate_order_no",
]
