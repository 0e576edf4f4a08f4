from .addresses import DeliveryAddressListView
from .auth import RegisterView
from .me import MeView

__all__ = [
    "RegisterView",
    "MeView",
    "DeliveryAddressListView",
]
