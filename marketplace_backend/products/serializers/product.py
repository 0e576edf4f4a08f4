# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Read-only catalog representation for the storefront.
- count_in_stock is what the cart uses as its stock limit.
"""

from rest_framework import serializers

from products.models import Farmer, Product


class FarmerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Farmer
        fields = ["id", "farm_name", "city", "district"]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """
    Canonical catalog serializer.

    `price` mirrors unit_price under the name the storefront reads.
    """

    price = serializers.DecimalField(
        source="unit_price", max_digits=10, decimal_places=2, read_only=True
    )
    farmer = FarmerSerializer(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "category",
            "price",
            "unit",
            "count_in_stock",
            "image",
            "farmer",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields
