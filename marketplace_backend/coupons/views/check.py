# coupons/views/check.py

"""
COUPON CHECK (PREVIEW)

POST /api/coupons/check/   {code, cartTotal}

Open to anonymous shoppers (throttled). A logged-in caller is evaluated
with their real new-user status; anonymous callers are treated as
eligible. Nothing is reserved: order creation re-evaluates the coupon.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from backend.envelope import success_response
from coupons.serializers import CouponCheckSerializer, PublicCouponSerializer
from coupons.services.coupon_service import check_coupon
from coupons.services.discount import ZERO, quantize_money


class PublicWriteThrottle(AnonRateThrottle):
    scope = "public_write"


class CouponCheckView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        request=CouponCheckSerializer,
        responses={
            200: OpenApiResponse(description="Coupon applies; discount preview"),
            400: OpenApiResponse(description="Coupon rejected"),
            404: OpenApiResponse(description="Unknown coupon code"),
        },
    )
    def post(self, request):
        serializer = CouponCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        code = serializer.validated_data["code"]
        cart_total = serializer.validated_data["cartTotal"]

        coupon, evaluation = check_coupon(code, cart_total, user=request.user)

        discounted_total = max(cart_total - evaluation.discount_amount, ZERO)
        return success_response(
            {
                "coupon": PublicCouponSerializer(coupon).data,
                "discountAmount": str(quantize_money(evaluation.discount_amount)),
                "discountedTotal": str(quantize_money(discounted_total)),
            }
        )
