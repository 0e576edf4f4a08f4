# orders/serializers.py

"""
ORDER SERIALIZERS

Input keys are the storefront's wire names (camelCase):

    {
      "items": [{"product", "name", "quantity", "price", "image", "farmer"}],
      "shippingAddress": {"fullName", "address", "city", "district", "postalCode", "phone"},
      "paymentMethod", "totalPrice", "shippingFee", "totalAmount",
      "coupon", "discountAmount", "notes"
    }

Address completeness is NOT checked here: the order service reports the
full list of missing fields in one error.
"""

from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from orders.models import Order, OrderItem

TWO_DP = {"max_digits": 12, "decimal_places": 2}


# ---------------- INPUT ----------------
class OrderItemInputSerializer(serializers.Serializer):
    product = serializers.UUIDField()
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(min_value=Decimal("0.00"), **TWO_DP)
    image = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    farmer = serializers.UUIDField(required=False, allow_null=True, default=None)


class ShippingAddressInputSerializer(serializers.Serializer):
    fullName = serializers.CharField(required=False, allow_blank=True, default="")
    address = serializers.CharField(required=False, allow_blank=True, default="")
    city = serializers.CharField(required=False, allow_blank=True, default="")
    district = serializers.CharField(required=False, allow_blank=True, default="")
    postalCode = serializers.CharField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")

    def to_internal_value(self, data):
        v = super().to_internal_value(data)
        return {
            "full_name": v["fullName"],
            "address": v["address"],
            "city": v["city"],
            "district": v["district"],
            "postal_code": v["postalCode"],
            "phone": v["phone"],
        }


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=True)
    shippingAddress = ShippingAddressInputSerializer(required=False, allow_null=True, default=None)
    paymentMethod = serializers.ChoiceField(
        choices=[c for c, _label in Order.PAYMENT_METHOD_CHOICES],
        required=False,
    )
    totalPrice = serializers.DecimalField(min_value=Decimal("0.00"), **TWO_DP)
    shippingFee = serializers.DecimalField(required=False, allow_null=True, default=None, **TWO_DP)
    totalAmount = serializers.DecimalField(required=False, allow_null=True, default=None, **TWO_DP)
    coupon = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    discountAmount = serializers.DecimalField(required=False, allow_null=True, default=None, **TWO_DP)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_paymentMethod(self, value):
        return value or settings.DEFAULT_PAYMENT_METHOD

    def to_service_kwargs(self) -> dict:
        v = self.validated_data
        return {
            "items": [dict(item) for item in v["items"]],
            "shipping_address": v.get("shippingAddress"),
            "payment_method": v.get("paymentMethod") or settings.DEFAULT_PAYMENT_METHOD,
            "subtotal": v["totalPrice"],
            "shipping_fee": v.get("shippingFee"),
            "grand_total": v.get("totalAmount"),
            "coupon_code": v.get("coupon") or "",
            "discount_amount": v.get("discountAmount"),
            "notes": v.get("notes") or "",
        }


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _label in Order.STATUS_CHOICES])


# ---------------- OUTPUT ----------------
class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "product",
            "farmer",
            "name",
            "quantity",
            "unit_price",
            "unit",
            "image",
            "line_total",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    orderId = serializers.UUIDField(source="id", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    payment_method_label = serializers.CharField(read_only=True)
    customer_email = serializers.EmailField(source="user.email", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "orderId",
            "id",
            "order_no",
            "user",
            "customer_email",
            "farmer",
            "items",
            "shipping_address",
            "payment_method",
            "payment_method_label",
            "subtotal",
            "shipping_fee",
            "discount_amount",
            "grand_total",
            "coupon_code",
            "status",
            "estimated_delivery_date",
            "is_delivered",
            "delivered_at",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
