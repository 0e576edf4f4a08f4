# orders/models/order_item.py

from decimal import Decimal

from django.db import models

from .order import Order


class OrderItem(models.Model):
    """
    Frozen copy of a cart line at the moment the order was placed.

    Rows are written once; product renames or price changes never
    reach them.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        related_name="order_items",
    )
    farmer = models.ForeignKey(
        "products.Farmer",
        on_delete=models.SET_NULL,
        null=True,
        related_name="order_items",
    )

    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    unit = models.CharField(max_length=16, blank=True, default="kg")
    image = models.CharField(max_length=500, blank=True, default="")

    line_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_item_quantity_positive",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Order items are immutable once created.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} x {self.quantity}"
