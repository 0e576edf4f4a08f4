# coupons/views/admin.py

"""
COUPON ADMINISTRATION

/api/coupons/manage/        GET list (filter: is_active, kind), POST create
/api/coupons/manage/<id>/   GET, PUT/PATCH, DELETE

Requires CAP_COUPONS_MANAGE (platform admins).
"""

from __future__ import annotations

import logging

from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated

from backend.envelope import success_response
from coupons.models import Coupon
from coupons.serializers import CouponSerializer
from permissions.capabilities import CAP_COUPONS_MANAGE
from permissions.roles import HasCapability

logger = logging.getLogger(__name__)


class CouponViewSet(viewsets.ModelViewSet):
    serializer_class = CouponSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_COUPONS_MANAGE

    queryset = Coupon.objects.all().order_by("-created_at")
    filterset_fields = ["is_active", "kind", "restricted_to_new_users"]

    def list(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        return success_response(self.get_serializer(qs, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        return success_response(self.get_serializer(self.get_object()).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        coupon = serializer.save()

        logger.info(
            "Coupon created",
            extra={"coupon_code": coupon.code, "user_id": str(request.user.id)},
        )
        return success_response(
            self.get_serializer(coupon).data, http_status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        coupon = serializer.save()
        return success_response(self.get_serializer(coupon).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        coupon_id = str(instance.pk)
        instance.delete()
        return success_response({"id": coupon_id})
