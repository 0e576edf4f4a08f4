from .inventory import decrement_stock, ensure_available, lock_products, restock

__all__ = [
    "lock_products",
    "ensure_available",
    "decrement_stock",
    "restock",
]
