# products/serializers/__init__.py

from .product import FarmerSerializer, ProductSerializer

__all__ = [
    "FarmerSerializer",
    "ProductSerializer",
]
