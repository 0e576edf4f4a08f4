# coupons/services/discount.py

"""
======================================================
PATH: coupons/services/discount.py
======================================================
DISCOUNT EVALUATOR (PURE, NO ORM)

One function decides whether a coupon applies to a cart subtotal and how
much it takes off. The storefront calls it for previews and for
re-deriving the discount when cart lines change; the order service calls
it with the authoritative coupon row.

Checks run in a fixed order and the first failure wins:

    NOT_FOUND -> INACTIVE -> NOT_YET_ACTIVE -> EXPIRED
              -> LIMIT_REACHED -> BELOW_MINIMUM -> NOT_ELIGIBLE

Arithmetic:
- Decimal throughout, no intermediate rounding.
- percentage: subtotal * value / 100, capped by maximum_discount_amount
- fixed:      value, capped by the subtotal
- Round to 2 places only when presenting or persisting (quantize_money).

`coupon` is anything exposing the Coupon attributes (the Django model,
or CouponTerms below).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

KIND_PERCENTAGE = "percentage"
KIND_FIXED = "fixed"
COUPON_KINDS = (KIND_PERCENTAGE, KIND_FIXED)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0")


class RejectionReason(Enum):
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    NOT_YET_ACTIVE = "not_yet_active"
    EXPIRED = "expired"
    LIMIT_REACHED = "limit_reached"
    BELOW_MINIMUM = "below_minimum"
    NOT_ELIGIBLE = "not_eligible"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES = {
    RejectionReason.NOT_FOUND: "No coupon exists with this code.",
    RejectionReason.INACTIVE: "This coupon is not active.",
    RejectionReason.NOT_YET_ACTIVE: "This coupon is not active yet.",
    RejectionReason.EXPIRED: "This coupon has expired.",
    RejectionReason.LIMIT_REACHED: "This coupon has reached its usage limit.",
    RejectionReason.BELOW_MINIMUM: "Your cart total is below the minimum purchase for this coupon.",
    RejectionReason.NOT_ELIGIBLE: "This coupon is only valid for new users.",
}


@dataclass(frozen=True)
class CouponTerms:
    """
    Plain coupon record, as the storefront receives it from the API.
    """

    code: str
    kind: str
    value: Decimal
    minimum_purchase: Decimal = ZERO
    maximum_discount_amount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    used_count: int = 0
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True
    restricted_to_new_users: bool = False


@dataclass(frozen=True)
class DiscountEvaluation:
    valid: bool
    discount_amount: Decimal
    reason: Optional[RejectionReason] = None
    message: str = ""

    @classmethod
    def rejected(cls, reason: RejectionReason, message: str = "") -> "DiscountEvaluation":
        return cls(
            valid=False,
            discount_amount=ZERO,
            reason=reason,
            message=message or reason.message,
        )


def to_decimal(value) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def compute_discount(*, kind: str, value, subtotal, maximum_discount_amount=None) -> Decimal:
    """
    Discount for an already-accepted coupon. Never exceeds the subtotal
    and is never negative.
    """
    subtotal = to_decimal(subtotal)
    value = to_decimal(value)

    if subtotal <= ZERO:
        return ZERO

    if kind == KIND_PERCENTAGE:
        amount = subtotal * value / Decimal("100")
        if maximum_discount_amount is not None:
            amount = min(amount, to_decimal(maximum_discount_amount))
    elif kind == KIND_FIXED:
        amount = value
    else:
        raise ValueError(f"Unknown coupon kind: {kind!r}")

    return max(min(amount, subtotal), ZERO)


def evaluate(coupon, cart_subtotal, now: datetime, is_new_user: bool) -> DiscountEvaluation:
    if coupon is None:
        return DiscountEvaluation.rejected(RejectionReason.NOT_FOUND)

    if not coupon.is_active:
        return DiscountEvaluation.rejected(RejectionReason.INACTIVE)

    if coupon.valid_from is not None and now < coupon.valid_from:
        return DiscountEvaluation.rejected(
            RejectionReason.NOT_YET_ACTIVE,
            f"This coupon is not active yet. Start date: {coupon.valid_from:%Y-%m-%d}",
        )

    if coupon.valid_until is not None and now > coupon.valid_until:
        return DiscountEvaluation.rejected(
            RejectionReason.EXPIRED,
            f"This coupon has expired. End date: {coupon.valid_until:%Y-%m-%d}",
        )

    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        return DiscountEvaluation.rejected(RejectionReason.LIMIT_REACHED)

    subtotal = to_decimal(cart_subtotal)
    minimum = to_decimal(coupon.minimum_purchase)
    if subtotal < minimum:
        return DiscountEvaluation.rejected(
            RejectionReason.BELOW_MINIMUM,
            f"Spend at least {quantize_money(minimum)} to use this coupon.",
        )

    if coupon.restricted_to_new_users and not is_new_user:
        return DiscountEvaluation.rejected(RejectionReason.NOT_ELIGIBLE)

    amount = compute_discount(
        kind=coupon.kind,
        value=coupon.value,
        subtotal=subtotal,
        maximum_discount_amount=coupon.maximum_discount_amount,
    )
    return DiscountEvaluation(valid=True, discount_amount=amount)
