# storefront/cart/store.py

"""
CART STORE (STATEFUL SHELL AROUND THE REDUCER)

Lifecycle:
    store = CartStore(storage)
    store.init()                 # hydrate once from the persisted snapshot
    unsubscribe = store.subscribe(listener)
    store.add_item(product)      # -> CartSignal
    ...
    store.teardown()             # drop listeners, stop persisting

After every action that changes the state the snapshot is rewritten and
listeners are called with the new state. Refused actions change nothing and
notify nobody.
"""

from __future__ import annotations

import logging
from typing import Callable

from storefront import storage as cart_storage

from .actions import (
    AddItem,
    ApplyCoupon,
    Clear,
    RemoveCoupon,
    RemoveItem,
    SetQuantity,
    SwitchSupplier,
)
from .reducer import CartSignal, reduce
from .state import EMPTY_CART, CartState

logger = logging.getLogger(__name__)

Listener = Callable[[CartState], None]


class CartStore:
    def __init__(self, storage):
        self._storage = storage
        self._state: CartState = EMPTY_CART
        self._listeners: list[Listener] = []
        self._initialized = False
        self._torn_down = False

    # ---------------- lifecycle ----------------

    def init(self) -> CartState:
        if self._torn_down:
            raise RuntimeError("Cart store has been torn down.")
        if not self._initialized:
            self._state = cart_storage.load_cart(self._storage)
            self._initialized = True
            logger.debug(
                "Cart hydrated",
                extra={"line_count": len(self._state.lines)},
            )
        return self._state

    def teardown(self) -> None:
        self._listeners.clear()
        self._torn_down = True

    @property
    def state(self) -> CartState:
        return self._state

    # ---------------- observers ----------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---------------- dispatch ----------------

    def dispatch(self, action) -> CartSignal:
        if not self._initialized or self._torn_down:
            raise RuntimeError("Cart store is not active; call init() first.")

        new_state, signal = reduce(self._state, action)
        if new_state is self._state:
            return signal

        # a failed write leaves both the snapshot and the live state untouched
        cart_storage.save_cart(self._storage, new_state)
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        return signal

    def add_item(self, product) -> CartSignal:
        return self.dispatch(AddItem(product))

    def switch_supplier(self, product) -> CartSignal:
        return self.dispatch(SwitchSupplier(product))

    def remove_item(self, product_id) -> CartSignal:
        return self.dispatch(RemoveItem(str(product_id)))

    def set_quantity(self, product_id, quantity: int) -> CartSignal:
        return self.dispatch(SetQuantity(str(product_id), quantity))

    def clear(self) -> CartSignal:
        return self.dispatch(Clear())

    def apply_coupon(self, coupon, discount_amount) -> CartSignal:
        return self.dispatch(ApplyCoupon(coupon, discount_amount))

    def remove_coupon(self) -> CartSignal:
        return self.dispatch(RemoveCoupon())
