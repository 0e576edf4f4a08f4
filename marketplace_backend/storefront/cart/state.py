# storefront/cart/state.py

"""
CART STATE (IMMUTABLE VALUES)

CartState holds only the lines, the applied coupon and its discount.
Everything else (item count, subtotal, active supplier) is derived from
the lines on every read, so it cannot drift from them.

Invariants every reachable state satisfies:
- all lines share one supplier_id (the active supplier)
- 1 <= quantity <= stock_limit on every line
- no coupon and zero discount when there are no lines
- 0 <= discount_amount <= total_price
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from coupons.services.discount import COUPON_KINDS, to_decimal

ZERO = Decimal("0")


@dataclass(frozen=True)
class ProductSnapshot:
    """
    What the catalog says about a product when the shopper clicks "add".
    """

    product_id: str
    name: str
    unit_price: Decimal
    stock_limit: int
    supplier_id: str
    image: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "ProductSnapshot":
        farmer = data.get("farmer") or {}
        supplier_id = farmer.get("id") if isinstance(farmer, dict) else farmer
        return cls(
            product_id=str(data["id"]),
            name=str(data.get("name") or ""),
            unit_price=to_decimal(data.get("price")),
            stock_limit=int(data.get("count_in_stock") or 0),
            supplier_id=str(supplier_id),
            image=str(data.get("image") or ""),
        )


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    stock_limit: int
    supplier_id: str
    image: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "stock_limit": self.stock_limit,
            "supplier_id": self.supplier_id,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        if not isinstance(data, dict):
            raise ValueError("cart line must be an object")
        return cls(
            product_id=str(data["product_id"]),
            name=str(data["name"]),
            unit_price=Decimal(data["unit_price"]),
            quantity=int(data["quantity"]),
            stock_limit=int(data["stock_limit"]),
            supplier_id=str(data["supplier_id"]),
            image=str(data.get("image") or ""),
        )


@dataclass(frozen=True)
class AppliedCoupon:
    """
    The parts of a coupon the cart needs to re-derive its discount.
    """

    code: str
    kind: str
    value: Decimal
    maximum_discount_amount: Optional[Decimal] = None

    @classmethod
    def from_api(cls, data: dict) -> "AppliedCoupon":
        cap = data.get("maximum_discount_amount")
        return cls(
            code=str(data["code"]).upper(),
            kind=str(data["kind"]),
            value=to_decimal(data["value"]),
            maximum_discount_amount=None if cap in (None, "") else to_decimal(cap),
        )

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "kind": self.kind,
            "value": str(self.value),
            "maximum_discount_amount": (
                None if self.maximum_discount_amount is None else str(self.maximum_discount_amount)
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppliedCoupon":
        if not isinstance(data, dict):
            raise ValueError("applied coupon must be an object")
        if data.get("kind") not in COUPON_KINDS:
            raise ValueError(f"unknown coupon kind: {data.get('kind')!r}")
        cap = data.get("maximum_discount_amount")
        return cls(
            code=str(data["code"]),
            kind=str(data["kind"]),
            value=Decimal(data["value"]),
            maximum_discount_amount=None if cap is None else Decimal(cap),
        )


@dataclass(frozen=True)
class CartState:
    lines: tuple = field(default_factory=tuple)
    applied_coupon: Optional[AppliedCoupon] = None
    discount_amount: Decimal = ZERO

    # ---------------- derived ----------------

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def active_supplier_id(self) -> Optional[str]:
        return self.lines[0].supplier_id if self.lines else None

    @property
    def total_item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self.lines), ZERO)

    @property
    def payable_before_shipping(self) -> Decimal:
        return self.total_price - self.discount_amount

    def find_line(self, product_id) -> Optional[CartLine]:
        product_id = str(product_id)
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    # ---------------- snapshot ----------------

    def to_dict(self) -> dict:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "applied_coupon": self.applied_coupon.to_dict() if self.applied_coupon else None,
            "discount_amount": str(self.discount_amount),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartState":
        """
        Rebuild a state from a snapshot. Raises ValueError when the snapshot
        violates a cart invariant.
        """
        if not isinstance(data, dict):
            raise ValueError("cart snapshot must be an object")
        raw_lines = data.get("lines") or []
        if not isinstance(raw_lines, list):
            raise ValueError("cart lines must be a list")
        lines = tuple(CartLine.from_dict(item) for item in raw_lines)
        coupon_data = data.get("applied_coupon")
        coupon = AppliedCoupon.from_dict(coupon_data) if coupon_data else None
        discount = Decimal(data.get("discount_amount") or "0")

        state = cls(lines=lines, applied_coupon=coupon, discount_amount=discount)
        state.check_invariants()
        return state

    def check_invariants(self) -> None:
        suppliers = {line.supplier_id for line in self.lines}
        if len(suppliers) > 1:
            raise ValueError("cart holds lines from more than one supplier")

        product_ids = [line.product_id for line in self.lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("cart holds duplicate lines")

        for line in self.lines:
            if not 1 <= line.quantity <= line.stock_limit:
                raise ValueError(f"line {line.product_id} quantity out of range")

        if not self.lines and (self.applied_coupon is not None or self.discount_amount):
            raise ValueError("empty cart carries a coupon")

        if not ZERO <= self.discount_amount <= self.total_price:
            raise ValueError("discount outside [0, subtotal]")


EMPTY_CART = CartState()
