# backend/exceptions.py

"""
MARKETPLACE DOMAIN ERRORS

One taxonomy for every service that can reject a shopper action.

Rules:
- Every error carries a stable `code` (machine readable) and a human-readable
  message that is safe to show to the end user as-is.
- Stock and coupon errors identify the offending product / coupon so the
  shopper can act on the message (remove an item, pick another coupon).
- None of these trigger automatic retry.
"""

from __future__ import annotations

from rest_framework import status


class MarketplaceError(Exception):
    """Base exception for all marketplace service rejections."""

    code = "error"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "", **context):
        self.message = message or self.default_message()
        self.context = context
        super().__init__(self.message)

    def default_message(self) -> str:
        return "The request could not be processed."


class ValidationError(MarketplaceError):
    """Missing or malformed input (address fields, non-positive quantities)."""

    code = "validation_error"

    def __init__(self, message: str = "", *, fields=None, **context):
        self.fields = list(fields or [])
        super().__init__(message, **context)


class StockError(MarketplaceError):
    """Insufficient inventory for a named product."""

    code = "insufficient_stock"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, *, product_name: str, requested: int, available: int | None = None):
        self.product_name = product_name
        self.requested = requested
        self.available = available

        if available is None:
            message = f"Insufficient stock for {product_name}. Requested: {requested}"
        else:
            message = (
                f"Insufficient stock for {product_name}. "
                f"Requested: {requested}, Available: {available}"
            )
        super().__init__(message, product_name=product_name)


class CouponError(MarketplaceError):
    """A coupon failed one of the evaluator checks."""

    code = "coupon_rejected"

    def __init__(self, *, reason, coupon_code: str = "", message: str = ""):
        self.reason = reason
        self.coupon_code = coupon_code
        if getattr(reason, "name", "") == "NOT_FOUND":
            self.http_status = status.HTTP_404_NOT_FOUND
        super().__init__(message or reason.message, coupon_code=coupon_code, reason=reason.value)


class AuthorizationError(MarketplaceError):
    """Authenticated, but the role may not perform the action."""

    code = "not_authorized"
    http_status = status.HTTP_403_FORBIDDEN

    def default_message(self) -> str:
        return "You are not allowed to perform this action."


class NotFoundError(MarketplaceError):
    """A coupon / product / order id does not resolve."""

    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND

    def default_message(self) -> str:
        return "The requested resource was not found."
