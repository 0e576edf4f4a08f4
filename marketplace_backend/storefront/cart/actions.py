# storefront/cart/actions.py

"""
Cart actions. One frozen value per thing a shopper can do to the cart.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .state import AppliedCoupon, ProductSnapshot


@dataclass(frozen=True)
class AddItem:
    product: ProductSnapshot


@dataclass(frozen=True)
class SwitchSupplier:
    """Confirmed answer to a supplier conflict: empty the cart, then add."""

    product: ProductSnapshot


@dataclass(frozen=True)
class RemoveItem:
    product_id: str


@dataclass(frozen=True)
class SetQuantity:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class ApplyCoupon:
    coupon: AppliedCoupon
    discount_amount: Decimal


@dataclass(frozen=True)
class RemoveCoupon:
    pass
