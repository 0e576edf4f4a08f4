# coupons/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from coupons.views import CouponCheckView, CouponViewSet

app_name = "coupons"

router = DefaultRouter()
router.register(r"manage", CouponViewSet, basename="coupons")

urlpatterns = [
    # ---------------- PUBLIC ----------------
    path("check/", CouponCheckView.as_view(), name="check"),
    # ---------------- ADMIN ----------------
    path("", include(router.urls)),
]
