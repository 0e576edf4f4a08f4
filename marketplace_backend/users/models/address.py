# users/models/address.py

import uuid

from django.conf import settings
from django.db import models

from orders.policy import missing_address_fields


class DeliveryAddress(models.Model):
    """
    Saved shipping address (address book entry).

    Orders never reference this row: checkout copies the fields into the
    order's shipping address snapshot.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="delivery_addresses",
    )

    title = models.CharField(max_length=64, blank=True, default="")
    full_name = models.CharField(max_length=150, blank=True, default="")
    address = models.TextField(blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    district = models.CharField(max_length=100, blank=True, default="")
    postal_code = models.CharField(max_length=16, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")

    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_default", "-created_at"]

    def __str__(self):
        return f"{self.title or self.full_name} ({self.city}/{self.district})"

    def as_shipping_address(self) -> dict:
        return {
            "full_name": self.full_name,
            "address": self.address,
            "city": self.city,
            "district": self.district,
            "postal_code": self.postal_code,
            "phone": self.phone,
        }

    def missing_fields(self) -> list[str]:
        return missing_address_fields(self.as_shipping_address())
