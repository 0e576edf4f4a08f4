# coupons/models/coupon.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from coupons.services.discount import KIND_FIXED, KIND_PERCENTAGE


class Coupon(models.Model):
    """
    Discount coupon.

    RULES:
    - code is stored upper-case and looked up case-insensitively
    - used_count only moves up, one step per placed order, through
      coupons.services.coupon_service.increment_usage()
    - usage_limit NULL means unlimited
    """

    KIND_CHOICES = [
        (KIND_PERCENTAGE, "Percentage"),
        (KIND_FIXED, "Fixed amount"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True, db_index=True)
    description = models.CharField(max_length=255, blank=True, default="")

    kind = models.CharField(max_length=16, choices=KIND_CHOICES)
    value = models.DecimalField(max_digits=10, decimal_places=2)

    minimum_purchase = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    maximum_discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Cap for percentage coupons. Empty means no cap.",
    )

    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    used_count = models.PositiveIntegerField(default=0)

    valid_from = models.DateTimeField(default=timezone.now)
    valid_until = models.DateTimeField()

    is_active = models.BooleanField(default=True)
    restricted_to_new_users = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(value__gt=Decimal("0.00")),
                name="coupon_value_positive",
            ),
        ]

    def __str__(self):
        return self.code

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def clean(self):
        if self.value is None or Decimal(self.value) <= 0:
            raise ValidationError("Coupon value must be greater than zero")

        if self.kind == KIND_PERCENTAGE and Decimal(self.value) > Decimal("100"):
            raise ValidationError("Percentage coupons cannot exceed 100")

        if self.valid_from and self.valid_until and self.valid_until <= self.valid_from:
            raise ValidationError("valid_until must be after valid_from")

    @property
    def remaining_uses(self):
        if self.usage_limit is None:
            return None
        return max(self.usage_limit - self.used_count, 0)
