# coupons/serializers.py

from decimal import Decimal

from rest_framework import serializers

from coupons.models import Coupon
from coupons.services.coupon_service import normalize_code
from coupons.services.discount import KIND_PERCENTAGE


class CouponSerializer(serializers.ModelSerializer):
    """
    Admin representation (full record).
    """

    remaining_uses = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "description",
            "kind",
            "value",
            "minimum_purchase",
            "maximum_discount_amount",
            "usage_limit",
            "used_count",
            "remaining_uses",
            "valid_from",
            "valid_until",
            "is_active",
            "restricted_to_new_users",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "used_count", "remaining_uses", "created_at", "updated_at"]

    def validate_code(self, value):
        code = normalize_code(value)
        if not code:
            raise serializers.ValidationError("Coupon code is required")

        qs = Coupon.objects.filter(code__iexact=code)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("This coupon code is already in use")
        return code

    def validate_value(self, value):
        if value is None or value <= Decimal("0"):
            raise serializers.ValidationError("Value must be greater than zero")
        return value

    def validate(self, attrs):
        kind = attrs.get("kind", getattr(self.instance, "kind", None))
        value = attrs.get("value", getattr(self.instance, "value", None))
        if kind == KIND_PERCENTAGE and value is not None and value > Decimal("100"):
            raise serializers.ValidationError({"value": "Percentage coupons cannot exceed 100"})

        valid_from = attrs.get("valid_from", getattr(self.instance, "valid_from", None))
        valid_until = attrs.get("valid_until", getattr(self.instance, "valid_until", None))
        if valid_from and valid_until and valid_until <= valid_from:
            raise serializers.ValidationError(
                {"valid_until": "valid_until must be after valid_from"}
            )
        return attrs


class PublicCouponSerializer(serializers.ModelSerializer):
    """
    What a shopper sees after a successful check (no usage counters).
    """

    class Meta:
        model = Coupon
        fields = [
            "code",
            "description",
            "kind",
            "value",
            "minimum_purchase",
            "maximum_discount_amount",
            "valid_until",
            "restricted_to_new_users",
        ]
        read_only_fields = fields


class CouponCheckSerializer(serializers.Serializer):
    code = serializers.CharField(
        allow_blank=True,
        error_messages={"required": "Please enter a coupon code"},
    )
    cartTotal = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.00"),
        required=False,
        default=Decimal("0.00"),
    )

    def validate_code(self, value):
        code = normalize_code(value)
        if not code:
            raise serializers.ValidationError("Please enter a coupon code")
        return code
