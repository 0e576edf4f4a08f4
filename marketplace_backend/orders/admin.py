# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "farmer",
        "name",
        "quantity",
        "unit_price",
        "unit",
        "image",
        "line_total",
    )

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_no",
        "user",
        "farmer",
        "status",
        "grand_total",
        "coupon_code",
        "created_at",
    )
    list_filter = ("status", "payment_method", "is_delivered")
    search_fields = ("order_no", "user__email", "coupon_code")
    inlines = [OrderItemInline]

    # status changes go through the lifecycle service (API), not the admin form
    readonly_fields = (
        "order_no",
        "user",
        "farmer",
        "shipping_address",
        "payment_method",
        "subtotal",
        "shipping_fee",
        "discount_amount",
        "grand_total",
        "coupon",
        "coupon_code",
        "status",
        "estimated_delivery_date",
        "is_delivered",
        "delivered_at",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False
