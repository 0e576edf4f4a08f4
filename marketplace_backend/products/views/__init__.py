# products/views/__init__.py

"""
Products views package exports.
"""

from .product import ProductViewSet

__all__ = [
    "ProductViewSet",
]
