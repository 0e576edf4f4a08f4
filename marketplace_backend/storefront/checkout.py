# storefront/checkout.py

"""
CHECKOUT ORCHESTRATOR (STOREFRONT SIDE)

Turns the current cart + a shipping address into a placed order.

Flow:
1. Identity gate     signed in, role may place orders (customer / company)
2. Cart + address    cart not empty, required address fields present
3. Submit            one immutable snapshot to POST /api/orders/
4. Outcome           success -> cart cleared, order id returned
                     failure -> cart untouched, server message verbatim
                     network -> fixed "could not reach" message

There is no automatic retry. The shopper decides whether to submit again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Optional

from coupons.services.discount import quantize_money
from orders.policy import ShippingPolicy, missing_address_fields
from permissions.capabilities import CAP_ORDERS_PLACE, role_has_capability
from storefront.api import ApiError, NetworkError
from storefront.cart.reducer import CartSignal
from storefront.cart.state import AppliedCoupon

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "cash_on_delivery"

MSG_SIGN_IN = "Please sign in to place an order."
MSG_ROLE = "Your account type cannot place orders. Please use a customer or company account."
MSG_EMPTY = "Your cart is empty."
MSG_MISSING_ADDRESS = "Please complete your shipping address: {fields}."
MSG_NETWORK = "Could not reach the server. Please check your connection and try again."
MSG_COUPON_EMPTY_CART = "Add items to your cart before applying a coupon."


@dataclass(frozen=True)
class Identity:
    user_id: Optional[str] = None
    role: Optional[str] = None
    is_authenticated: bool = False

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()

    @classmethod
    def from_me(cls, data: dict) -> "Identity":
        return cls(
            user_id=str(data.get("id") or "") or None,
            role=data.get("role"),
            is_authenticated=bool(data.get("is_authenticated", True)),
        )


@dataclass(frozen=True)
class CheckoutResult:
    success: bool
    order_id: Optional[str] = None
    message: str = ""
    code: str = ""
    missing_fields: list = field(default_factory=list)
    order: Optional[dict] = None


def _failure(code: str, message: str, *, missing_fields=None) -> CheckoutResult:
    return CheckoutResult(
        success=False,
        code=code,
        message=message,
        missing_fields=list(missing_fields or []),
    )


class CheckoutOrchestrator:
    def __init__(
        self,
        *,
        store,
        api,
        shipping_policy: ShippingPolicy,
        identity_provider: Callable[[], Optional[Identity]],
    ):
        self.store = store
        self.api = api
        self.shipping_policy = shipping_policy
        self.identity_provider = identity_provider

    # ---------------- helpers ----------------

    def _gate(self) -> Optional[CheckoutResult]:
        identity = self.identity_provider() or Identity.anonymous()
        if not identity.is_authenticated:
            return _failure("not_authenticated", MSG_SIGN_IN)
        if not role_has_capability(identity.role, CAP_ORDERS_PLACE):
            return _failure("not_authorized", MSG_ROLE)
        return None

    def totals(self) -> dict:
        state = self.store.state
        subtotal = state.total_price
        fee = self.shipping_policy.fee_for(subtotal)
        return {
            "subtotal": subtotal,
            "shipping_fee": fee,
            "discount_amount": state.discount_amount,
            "grand_total": subtotal + fee - state.discount_amount,
        }

    def build_payload(self, shipping_address: dict, *, payment_method: str = "", notes: str = "") -> dict:
        state = self.store.state
        totals = self.totals()
        address = shipping_address or {}

        return {
            "items": [
                {
                    "product": line.product_id,
                    "name": line.name,
                    "quantity": line.quantity,
                    "price": str(line.unit_price),
                    "image": line.image,
                    "farmer": line.supplier_id,
                }
                for line in state.lines
            ],
            "shippingAddress": {
                "fullName": address.get("full_name", ""),
                "address": address.get("address", ""),
                "city": address.get("city", ""),
                "district": address.get("district", ""),
                "postalCode": address.get("postal_code", ""),
                "phone": address.get("phone", ""),
            },
            "paymentMethod": payment_method or DEFAULT_PAYMENT_METHOD,
            "totalPrice": str(quantize_money(totals["subtotal"])),
            "shippingFee": str(quantize_money(totals["shipping_fee"])),
            "totalAmount": str(quantize_money(totals["grand_total"])),
            "coupon": state.applied_coupon.code if state.applied_coupon else "",
            "discountAmount": str(quantize_money(totals["discount_amount"])),
            "notes": notes,
        }

    # ---------------- coupon preview ----------------

    def apply_coupon(self, code: str) -> CheckoutResult:
        """
        Ask the server to evaluate `code` against the cart subtotal and, when
        it applies, store the coupon and its discount on the cart.
        """
        if self.store.state.is_empty:
            return _failure("cart_empty", MSG_COUPON_EMPTY_CART)

        try:
            data = self.api.check_coupon(code, quantize_money(self.store.state.total_price))
        except ApiError as e:
            return _failure(e.code, e.message)
        except NetworkError:
            return _failure("network_error", MSG_NETWORK)

        coupon = AppliedCoupon.from_api(data["coupon"])
        signal = self.store.apply_coupon(coupon, Decimal(str(data["discountAmount"])))
        if signal is CartSignal.CART_EMPTY:
            return _failure("cart_empty", MSG_COUPON_EMPTY_CART)
        return CheckoutResult(success=True, message=f"Coupon {coupon.code} applied.")

    # ---------------- checkout ----------------

    def checkout(self, shipping_address: dict, *, payment_method: str = "", notes: str = "") -> CheckoutResult:
        rejected = self._gate()
        if rejected is not None:
            return rejected

        if self.store.state.is_empty:
            return _failure("cart_empty", MSG_EMPTY)

        missing = missing_address_fields(shipping_address)
        if missing:
            return _failure(
                "validation_error",
                MSG_MISSING_ADDRESS.format(fields=", ".join(missing)),
                missing_fields=missing,
            )

        payload = self.build_payload(shipping_address, payment_method=payment_method, notes=notes)

        try:
            order = self.api.place_order(payload)
        except ApiError as e:
            logger.info("Checkout rejected", extra={"code": e.code, "status": e.status})
            errors = e.errors if isinstance(e.errors, dict) else {}
            return _failure(e.code, e.message, missing_fields=errors.get("missing_fields"))
        except NetworkError:
            logger.warning("Checkout failed: server unreachable")
            return _failure("network_error", MSG_NETWORK)

        order_id = str(order.get("orderId") or order.get("id"))
        self.store.clear()
        logger.info("Checkout succeeded", extra={"order_id": order_id})
        return CheckoutResult(success=True, order_id=order_id, order=order)
