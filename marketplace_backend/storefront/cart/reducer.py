# storefront/cart/reducer.py

"""
CART REDUCER (PURE)

reduce(state, action) -> (new_state, signal)

Rules:
- No I/O, no clock, no exceptions for ordinary shopper mistakes.
  Stock limits and supplier conflicts come back as signals.
- All-or-nothing: a refused action returns the very same state object.
- Every action that changes the lines re-derives the coupon discount
  against the new subtotal:
    percentage  recomputed (and capped)
    fixed       re-clamped to the subtotal
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from enum import Enum

from coupons.services.discount import compute_discount

from .actions import (
    AddItem,
    ApplyCoupon,
    Clear,
    RemoveCoupon,
    RemoveItem,
    SetQuantity,
    SwitchSupplier,
)
from .state import EMPTY_CART, CartLine, CartState

ZERO = Decimal("0")


class CartSignal(Enum):
    OK = "ok"
    STOCK_LIMIT_REACHED = "stock_limit_reached"
    OUT_OF_STOCK = "out_of_stock"
    SUPPLIER_CONFLICT = "supplier_conflict"
    NOT_IN_CART = "not_in_cart"
    CART_EMPTY = "cart_empty"


def _with_lines(state: CartState, lines: tuple) -> CartState:
    if not lines:
        return EMPTY_CART

    coupon = state.applied_coupon
    if coupon is None:
        return replace(state, lines=lines, discount_amount=ZERO)

    subtotal = sum((line.line_total for line in lines), ZERO)
    discount = compute_discount(
        kind=coupon.kind,
        value=coupon.value,
        subtotal=subtotal,
        maximum_discount_amount=coupon.maximum_discount_amount,
    )
    return replace(state, lines=lines, discount_amount=discount)


def _replace_line(state: CartState, updated: CartLine) -> tuple:
    return tuple(updated if line.product_id == updated.product_id else line for line in state.lines)


# ---------------- actions ----------------


def add_item(state: CartState, product):
    if state.active_supplier_id is not None and state.active_supplier_id != product.supplier_id:
        return state, CartSignal.SUPPLIER_CONFLICT

    existing = state.find_line(product.product_id)
    if existing is not None:
        if existing.quantity >= existing.stock_limit:
            return state, CartSignal.STOCK_LIMIT_REACHED
        updated = replace(existing, quantity=existing.quantity + 1)
        return _with_lines(state, _replace_line(state, updated)), CartSignal.OK

    if product.stock_limit <= 0:
        return state, CartSignal.OUT_OF_STOCK

    line = CartLine(
        product_id=product.product_id,
        name=product.name,
        unit_price=product.unit_price,
        quantity=1,
        stock_limit=product.stock_limit,
        supplier_id=product.supplier_id,
        image=product.image,
    )
    return _with_lines(state, state.lines + (line,)), CartSignal.OK


def switch_supplier(state: CartState, product):
    if product.stock_limit <= 0:
        return state, CartSignal.OUT_OF_STOCK
    return add_item(EMPTY_CART, product)


def remove_item(state: CartState, product_id):
    if state.find_line(product_id) is None:
        return state, CartSignal.NOT_IN_CART

    product_id = str(product_id)
    lines = tuple(line for line in state.lines if line.product_id != product_id)
    return _with_lines(state, lines), CartSignal.OK


def set_quantity(state: CartState, product_id, quantity: int):
    existing = state.find_line(product_id)
    if existing is None:
        return state, CartSignal.NOT_IN_CART

    quantity = int(quantity)
    signal = CartSignal.OK
    if quantity > existing.stock_limit:
        signal = CartSignal.STOCK_LIMIT_REACHED
    clamped = max(1, min(quantity, existing.stock_limit))

    if clamped == existing.quantity:
        return state, signal

    updated = replace(existing, quantity=clamped)
    return _with_lines(state, _replace_line(state, updated)), signal


def clear(state: CartState):
    if state.is_empty:
        return state, CartSignal.OK
    return EMPTY_CART, CartSignal.OK


def apply_coupon(state: CartState, coupon, discount_amount):
    if state.is_empty:
        return state, CartSignal.CART_EMPTY

    discount = Decimal(str(discount_amount))
    discount = max(ZERO, min(discount, state.total_price))
    return replace(state, applied_coupon=coupon, discount_amount=discount), CartSignal.OK


def remove_coupon(state: CartState):
    if state.applied_coupon is None and not state.discount_amount:
        return state, CartSignal.OK
    return replace(state, applied_coupon=None, discount_amount=ZERO), CartSignal.OK


# ---------------- dispatch ----------------


def reduce(state: CartState, action):
    if isinstance(action, AddItem):
        return add_item(state, action.product)
    if isinstance(action, SwitchSupplier):
        return switch_supplier(state, action.product)
    if isinstance(action, RemoveItem):
        return remove_item(state, action.product_id)
    if isinstance(action, SetQuantity):
        return set_quantity(state, action.product_id, action.quantity)
    if isinstance(action, Clear):
        return clear(state)
    if isinstance(action, ApplyCoupon):
        return apply_coupon(state, action.coupon, action.discount_amount)
    if isinstance(action, RemoveCoupon):
        return remove_coupon(state)
    raise TypeError(f"Unknown cart action: {action!r}")
