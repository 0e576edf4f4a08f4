# products/models/farmer.py

import uuid

from django.conf import settings
from django.db import models


class Farmer(models.Model):
    """
    A supplier on the marketplace.

    Every product belongs to exactly one farmer; a cart (and therefore an
    order) only ever holds products of a single farmer.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="farmer_profile",
    )

    farm_name = models.CharField(max_length=255, db_index=True)
    city = models.CharField(max_length=100, blank=True, default="")
    district = models.CharField(max_length=100, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")

    is_approved = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["farm_name"]

    def __str__(self):
        return self.farm_name
