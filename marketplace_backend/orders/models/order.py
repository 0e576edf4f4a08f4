# orders/models/order.py

import logging
import random
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.utils import timezone

User = settings.AUTH_USER_MODEL

logger = logging.getLogger(__name__)

ORDER_NO_ATTEMPTS = 5


def generate_order_no(now=None) -> str:
    """
    MP + yymmdd + 4 random digits, e.g. MP2606011234.
    """
    now = now or timezone.now()
    return f"MP{now:%y%m%d}{random.randint(0, 9999):04d}"


def _default_payment_method() -> str:
    return getattr(settings, "DEFAULT_PAYMENT_METHOD", "cash_on_delivery")


class Order(models.Model):
    """
    A placed marketplace order.

    GUARANTEES:
    - Created only by orders.services.order_service.create_order()
    - Money fields are server-computed (client figures are never stored)
    - Items, address and totals are snapshots; later product/coupon edits
      do not change them
    - Status moves only along orders.services.order_lifecycle
    """

    STATUS_PENDING = "pending"
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_CASH_ON_DELIVERY = "cash_on_delivery"
    PAYMENT_CREDIT_CARD = "credit_card"

    PAYMENT_METHOD_CHOICES = [
        (PAYMENT_CASH_ON_DELIVERY, "Cash on delivery"),
        (PAYMENT_CREDIT_CARD, "Credit card"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_no = models.CharField(
        max_length=32,
        unique=True,
        blank=True,
        help_text="System-generated order number",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="orders",
    )

    farmer = models.ForeignKey(
        "products.Farmer",
        on_delete=models.PROTECT,
        null=True,
        related_name="orders",
        help_text="The single supplier every line of this order belongs to",
    )

    shipping_address = models.JSONField(default=dict)

    payment_method = models.CharField(
        max_length=32,
        choices=PAYMENT_METHOD_CHOICES,
        default=_default_payment_method,
    )

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    shipping_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    coupon = models.ForeignKey(
        "coupons.Coupon",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    coupon_code = models.CharField(max_length=32, blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    estimated_delivery_date = models.DateTimeField(null=True, blank=True)

    is_delivered = models.BooleanField(default=False)
    delivered_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="order_created_at_idx"),
            models.Index(fields=["status"], name="order_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(grand_total__gte=Decimal("0.00")),
                name="order_grand_total_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(discount_amount__gte=Decimal("0.00")),
                name="order_discount_non_negative",
            ),
        ]

    def save(self, *args, **kwargs):
        if self.order_no:
            super().save(*args, **kwargs)
            return

        # the unique index is the arbiter; a concurrent insert may take the number first
        for attempt in range(1, ORDER_NO_ATTEMPTS + 1):
            self.order_no = generate_order_no()
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError:
                if not Order.objects.filter(order_no=self.order_no).exists():
                    raise
                logger.warning(
                    "Order number collision, regenerating",
                    extra={"order_no": self.order_no, "attempt": attempt},
                )

        self.order_no = ""
        raise IntegrityError("Could not allocate a unique order number.")

    def __str__(self):
        return f"{self.order_no} | {self.grand_total}"

    @property
    def payment_method_label(self) -> str:
        return self.get_payment_method_display()
