# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .farmer import Farmer


class Product(models.Model):
    """
    Represents a sellable product listed by a farmer.

    STOCK MODEL (IMPORTANT):
    - count_in_stock is the single source of truth
    - it is only ever lowered by the conditional decrement in
      products.services.inventory (never read-modify-write)
    - the database refuses negative values (check constraint)
    """

    class Unit(models.TextChoices):
        KG = "kg", "Kilogram"
        PIECE = "piece", "Piece"
        BUNCH = "bunch", "Bunch"
        CRATE = "crate", "Crate"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    farmer = models.ForeignKey(
        Farmer,
        on_delete=models.PROTECT,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=64, blank=True, default="")

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    unit = models.CharField(max_length=16, choices=Unit.choices, default=Unit.KG)

    count_in_stock = models.IntegerField(default=0)

    image = models.CharField(max_length=500, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(count_in_stock__gte=0),
                name="product_count_in_stock_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.farmer_id})"

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) <= 0:
            raise ValidationError("Unit price must be greater than zero")

        if self.count_in_stock is None or self.count_in_stock < 0:
            raise ValidationError("count_in_stock cannot be negative")

    @property
    def is_in_stock(self) -> bool:
        return self.count_in_stock > 0
