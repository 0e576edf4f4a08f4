"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .farmer import Farmer
from .product import Product

__all__ = [
    "Farmer",
    "Product",
]
