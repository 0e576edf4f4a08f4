"""
USERS MODELS PACKAGE EXPORTS
"""

from .address import DeliveryAddress
from .user import (
    ROLE_ADMIN,
    ROLE_COMPANY,
    ROLE_CUSTOMER,
    ROLE_FARMER,
    User,
    UserManager,
)

__all__ = [
    "User",
    "UserManager",
    "DeliveryAddress",
    "ROLE_ADMIN",
    "ROLE_COMPANY",
    "ROLE_CUSTOMER",
    "ROLE_FARMER",
]
