# orders/policy.py

"""
CHECKOUT POLICY (PURE, NO ORM)

Shared by the server (order creation) and the storefront client
(checkout orchestrator), so the rules live in exactly one place.

Contents:
- REQUIRED_ADDRESS_FIELDS: the fixed shipping address field set
- missing_address_fields(): enumerates which required fields are absent
- ShippingPolicy: flat fee below a subtotal threshold, free at or above it
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

REQUIRED_ADDRESS_FIELDS = ("full_name", "address", "city", "district", "phone")


def missing_address_fields(address) -> list[str]:
    """
    Return the required fields that are missing or blank, in canonical order.
    """
    if not address:
        return list(REQUIRED_ADDRESS_FIELDS)

    missing = []
    for field in REQUIRED_ADDRESS_FIELDS:
        value = address.get(field) if isinstance(address, dict) else getattr(address, field, None)
        if value is None or not str(value).strip():
            missing.append(field)
    return missing


@dataclass(frozen=True)
class ShippingPolicy:
    free_threshold: Decimal
    flat_fee: Decimal

    def fee_for(self, subtotal) -> Decimal:
        if Decimal(str(subtotal)) >= self.free_threshold:
            return Decimal("0.00")
        return self.flat_fee

    @classmethod
    def from_settings(cls) -> "ShippingPolicy":
        from django.conf import settings

        return cls(
            free_threshold=Decimal(str(settings.SHIPPING_FREE_THRESHOLD)),
            flat_fee=Decimal(str(settings.SHIPPING_FLAT_FEE)),
        )
