# products/views/product.py

"""
PRODUCT CATALOG VIEWSET

Purpose:
- Public product browsing (AllowAny, read-only).
- Returns ONLY active products of approved farmers.

Query params:
- q:        name search (icontains)
- farmer:   farmer id
- category: exact category
- in_stock: "1" to hide sold-out products
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.permissions import AllowAny
from rest_framework.throttling import AnonRateThrottle

from backend.envelope import success_response
from products.models import Product
from products.serializers import ProductSerializer


class PublicCatalogThrottle(AnonRateThrottle):
    scope = "public_catalog"


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicCatalogThrottle]

    def get_queryset(self):
        qs = Product.objects.select_related("farmer").filter(
            is_active=True,
            farmer__is_approved=True,
        )

        params = self.request.query_params

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(name__icontains=q)

        farmer_id = (params.get("farmer") or "").strip()
        if farmer_id:
            qs = qs.filter(farmer_id=farmer_id)

        category = (params.get("category") or "").strip()
        if category:
            qs = qs.filter(category=category)

        if params.get("in_stock") in ("1", "true", "True"):
            qs = qs.filter(count_in_stock__gt=0)

        return qs.order_by("-created_at")

    @extend_schema(
        parameters=[
            OpenApiParameter("q", str, description="Search by product name"),
            OpenApiParameter("farmer", str, description="Farmer id"),
            OpenApiParameter("category", str, description="Category"),
            OpenApiParameter("in_stock", str, description="1 to hide sold-out items"),
        ],
        responses={200: ProductSerializer(many=True)},
    )
    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return success_response(serializer.data)

    @extend_schema(responses={200: ProductSerializer})
    def retrieve(self, request, *args, **kwargs):
        return success_response(self.get_serializer(self.get_object()).data)
