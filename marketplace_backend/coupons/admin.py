# coupons/admin.py

from django.contrib import admin

from coupons.models import Coupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "kind",
        "value",
        "used_count",
        "usage_limit",
        "valid_until",
        "is_active",
    )
    list_filter = ("kind", "is_active", "restricted_to_new_users")
    search_fields = ("code", "description")
    readonly_fields = ("used_count", "created_at", "updated_at")
