# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission

from permissions.capabilities import capabilities_for_role


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(user) -> set[str]:
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    return capabilities_for_role(get_user_role(user))


# =========================================================
# Capability Permissions (RECOMMENDED FOR NEW CODE)
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_ORDERS_PLACE
    """

    message = "Your account type is not allowed to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default: an unset capability must not open the endpoint
            return False

        return required in effective_capabilities_for(user)

