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
from .state import EMPTY_CART, AppliedCoupon, CartLine, CartState, ProductSnapshot
from .store import CartStore

__all__ = [
    "AddItem",
    "AppliedCoupon",
    "ApplyCoupon",
    "CartLine",
    "CartSignal",
    "CartState",
    "CartStore",
    "Clear",
    "EMPTY_CART",
    "ProductSnapshot",
    "RemoveCoupon",
    "RemoveItem",
    "SetQuantity",
    "SwitchSupplier",
    "reduce",
]
