from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIRequestFactory

from permissions.capabilities import (
    ALL_CAPABILITIES,
    CAP_COUPONS_MANAGE,
    CAP_ORDERS_FULFIL,
    CAP_ORDERS_PLACE,
    CAP_ORDERS_VIEW_ALL,
    capabilities_for_role,
    role_has_capability,
)
from permissions.roles import HasCapability

User = get_user_model()


class CapabilityMatrixTests(SimpleTestCase):
    def test_buyers_may_place_orders(self):
        self.assertTrue(role_has_capability("customer", CAP_ORDERS_PLACE))
        self.assertTrue(role_has_capability("company", CAP_ORDERS_PLACE))

    def test_farmer_and_admin_may_not_place_orders(self):
        self.assertFalse(role_has_capability("farmer", CAP_ORDERS_PLACE))
        self.assertFalse(role_has_capability("admin", CAP_ORDERS_PLACE))

    def test_farmer_only_fulfils(self):
        self.assertEqual(capabilities_for_role("farmer"), {CAP_ORDERS_FULFIL})
        self.assertFalse(role_has_capability("farmer", CAP_COUPONS_MANAGE))

    def test_admin_has_everything_but_ordering(self):
        caps = capabilities_for_role("admin")
        self.assertEqual(caps, set(ALL_CAPABILITIES) - {CAP_ORDERS_PLACE})

    def test_unknown_role_has_nothing(self):
        self.assertEqual(capabilities_for_role("ghost"), set())
        self.assertEqual(capabilities_for_role(None), set())


class PermissionClassTests(TestCase):
    """
    GUARANTEES:
    - capability checks follow the role matrix
    - an endpoint without a declared capability is closed
    - anonymous users denied everywhere
    """

    def setUp(self):
        self.factory = APIRequestFactory()

        self.customer = User.objects.create_user(
            email="customer@example.com", password="pass", role="customer"
        )
        self.farmer = User.objects.create_user(
            email="farmer@example.com", password="pass", role="farmer"
        )
        self.admin = User.objects.create_user(
            email="admin@example.com", password="pass", role="admin"
        )

    def _request_for(self, user=None):
        request = self.factory.get("/")
        request.user = user
        return request

    def test_has_capability_uses_view_declaration(self):
        view = SimpleNamespace(required_capability=CAP_ORDERS_PLACE)

        self.assertTrue(
            HasCapability().has_permission(self._request_for(self.customer), view)
        )
        self.assertFalse(
            HasCapability().has_permission(self._request_for(self.farmer), view)
        )
        self.assertFalse(
            HasCapability().has_permission(self._request_for(self.admin), view)
        )

    def test_missing_capability_declaration_denies(self):
        view = SimpleNamespace()
        self.assertFalse(
            HasCapability().has_permission(self._request_for(self.admin), view)
        )

    def test_fulfilment_open_to_farmers_and_admins(self):
        view = SimpleNamespace(required_capability=CAP_ORDERS_FULFIL)

        self.assertTrue(
            HasCapability().has_permission(self._request_for(self.farmer), view)
        )
        self.assertTrue(
            HasCapability().has_permission(self._request_for(self.admin), view)
        )
        self.assertFalse(
            HasCapability().has_permission(self._request_for(self.customer), view)
        )

    def test_order_overview_is_admin_only(self):
        view = SimpleNamespace(required_capability=CAP_ORDERS_VIEW_ALL)

        self.assertTrue(
            HasCapability().has_permission(self._request_for(self.admin), view)
        )
        self.assertFalse(
            HasCapability().has_permission(self._request_for(self.farmer), view)
        )

    def test_anonymous_denied(self):
        request = self._request_for(None)
        view = SimpleNamespace(required_capability=CAP_ORDERS_PLACE)

        self.assertFalse(HasCapability().has_permission(request, view))
