from .admin import CouponViewSet
from .check import CouponCheckView

__all__ = [
    "CouponCheckView",
    "CouponViewSet",
]
