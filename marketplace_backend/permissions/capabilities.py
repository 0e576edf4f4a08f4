# permissions/capabilities.py

"""
ROLES + CAPABILITIES (PURE, NO DJANGO)

Imported by the DRF permission classes (permissions/roles.py) and by the
storefront client, which applies the same role gate before submitting a
checkout.
"""

from __future__ import annotations

from typing import Optional

# =========================================================
# ROLE CONSTANTS (MARKETPLACE ACTORS)
# =========================================================
ROLE_CUSTOMER = "customer"
ROLE_COMPANY = "company"
ROLE_FARMER = "farmer"
ROLE_ADMIN = "admin"

ALL_ROLES = {ROLE_CUSTOMER, ROLE_COMPANY, ROLE_FARMER, ROLE_ADMIN}

# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_ORDERS_PLACE = "orders.place"
CAP_ORDERS_VIEW_ALL = "orders.view_all"
CAP_ORDERS_FULFIL = "orders.fulfil"       # move orders through their status lifecycle
CAP_REPORTS_VIEW_ORDERS = "reports.view_orders"
CAP_COUPONS_MANAGE = "coupons.manage"

ALL_CAPABILITIES = {
    CAP_ORDERS_PLACE,
    CAP_ORDERS_VIEW_ALL,
    CAP_ORDERS_FULFIL,
    CAP_REPORTS_VIEW_ORDERS,
    CAP_COUPONS_MANAGE,
}

# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_CUSTOMER: {
        CAP_ORDERS_PLACE,
    },
    ROLE_COMPANY: {
        CAP_ORDERS_PLACE,
    },
    ROLE_FARMER: {
        CAP_ORDERS_FULFIL,
        },
    ROLE_ADMIN: {
        # platform operators manage everything but never shop
        *(ALL_CAPABILITIES - {CAP_ORDERS_PLACE}),
    },
}


def capabilities_for_role(role: Optional[str]) -> set[str]:
    return set(ROLE_CAPABILITIES.get(role or "", set()))


def role_has_capability(role: Optional[str], capability: str) -> bool:
    return capability in capabilities_for_role(role)
