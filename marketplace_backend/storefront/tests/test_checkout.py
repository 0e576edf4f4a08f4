# storefront/tests/test_checkout.py

from decimal import Decimal

from django.test import SimpleTestCase

from orders.policy import ShippingPolicy
from storefront.api import ApiError, NetworkError
from storefront.cart import CartStore, ProductSnapshot
from storefront.checkout import MSG_NETWORK, CheckoutOrchestrator, Identity
from storefront.storage import MemoryStorage

ADDRESS = {
    "full_name": "Ayse Demir",
    "address": "Market St 5",
    "city": "Izmir",
    "district": "Konak",
    "phone": "5550000000",
}

POLICY = ShippingPolicy(free_threshold=Decimal("150.00"), flat_fee=Decimal("29.90"))


class FakeApi:
    def __init__(self, *, response=None, error=None, coupon=None):
        self.response = response or {"orderId": "order-1", "order_no": "MP2606011234"}
        self.error = error
        self.coupon = coupon
        self.payloads = []

    def place_order(self, payload):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return self.response

    def check_coupon(self, code, cart_total):
        if self.error is not None:
            raise self.error
        return self.coupon


def tomato(stock=5):
    return ProductSnapshot(
        product_id="p1",
        name="Tomato",
        unit_price=Decimal("20.00"),
        stock_limit=stock,
        supplier_id="f1",
        image="tomato.jpg",
    )


class CheckoutTests(SimpleTestCase):
    def setUp(self):
        self.store = CartStore(MemoryStorage())
        self.store.init()
        self.identity = Identity(user_id="u1", role="customer", is_authenticated=True)
        self.api = FakeApi()

    def orchestrator(self):
        return CheckoutOrchestrator(
            store=self.store,
            api=self.api,
            shipping_policy=POLICY,
            identity_provider=lambda: self.identity,
        )

    def fill_cart(self, quantity=2):
        self.store.add_item(tomato())
        self.store.set_quantity("p1", quantity)

    # --------------------------------------------------
    # Gates
    # --------------------------------------------------

    def test_anonymous_rejected(self):
        self.identity = None
        self.fill_cart()

        result = self.orchestrator().checkout(ADDRESS)

        self.assertFalse(result.success)
        self.assertEqual(result.code, "not_authenticated")
        self.assertEqual(self.api.payloads, [])

    def test_farmer_and_admin_rejected(self):
        self.fill_cart()
        for role in ("farmer", "admin"):
            self.identity = Identity(user_id="u2", role=role, is_authenticated=True)

            result = self.orchestrator().checkout(ADDRESS)

            self.assertFalse(result.success)
            self.assertEqual(result.code, "not_authorized")
        self.assertEqual(self.api.payloads, [])

    def test_company_may_order(self):
        self.identity = Identity(user_id="u3", role="company", is_authenticated=True)
        self.fill_cart()

        self.assertTrue(self.orchestrator().checkout(ADDRESS).success)

    def test_empty_cart(self):
        result = self.orchestrator().checkout(ADDRESS)

        self.assertEqual(result.code, "cart_empty")

    def test_missing_address_fields_enumerated(self):
        self.fill_cart()

        result = self.orchestrator().checkout({**ADDRESS, "city": "", "phone": "  "})

        self.assertFalse(result.success)
        self.assertEqual(result.missing_fields, ["city", "phone"])
        self.assertIn("city, phone", result.message)
        self.assertEqual(self.api.payloads, [])

    # --------------------------------------------------
    # Submission
    # --------------------------------------------------

    def test_payload_shape(self):
        self.fill_cart(quantity=2)

        self.orchestrator().checkout(ADDRESS, notes="Ring twice")

        payload = self.api.payloads[0]
        self.assertEqual(
            payload["items"],
            [
                {
                    "product": "p1",
                    "name": "Tomato",
                    "quantity": 2,
                    "price": "20.00",
                    "image": "tomato.jpg",
                    "farmer": "f1",
                }
            ],
        )
        self.assertEqual(payload["shippingAddress"]["fullName"], "Ayse Demir")
        self.assertEqual(payload["paymentMethod"], "cash_on_delivery")
        self.assertEqual(payload["totalPrice"], "40.00")
        self.assertEqual(payload["shippingFee"], "29.90")
        self.assertEqual(payload["totalAmount"], "69.90")
        self.assertEqual(payload["coupon"], "")
        self.assertEqual(payload["discountAmount"], "0.00")
        self.assertEqual(payload["notes"], "Ring twice")

    def test_free_shipping_at_threshold(self):
        self.store.add_item(
            ProductSnapshot(
                product_id="p9",
                name="Crate",
                unit_price=Decimal("150.00"),
                stock_limit=1,
                supplier_id="f1",
            )
        )

        self.orchestrator().checkout(ADDRESS)

        self.assertEqual(self.api.payloads[0]["shippingFee"], "0.00")
        self.assertEqual(self.api.payloads[0]["totalAmount"], "150.00")

    def test_success_clears_cart(self):
        self.fill_cart()

        result = self.orchestrator().checkout(ADDRESS)

        self.assertTrue(result.success)
        self.assertEqual(result.order_id, "order-1")
        self.assertTrue(self.store.state.is_empty)

    def test_server_rejection_keeps_cart_and_message(self):
        self.fill_cart()
        self.api.error = ApiError(
            code="insufficient_stock",
            message="Insufficient stock for Tomato. Requested: 2, Available: 1",
            status=409,
        )

        result = self.orchestrator().checkout(ADDRESS)

        self.assertFalse(result.success)
        self.assertEqual(result.code, "insufficient_stock")
        self.assertEqual(result.message, "Insufficient stock for Tomato. Requested: 2, Available: 1")
        self.assertEqual(self.store.state.total_item_count, 2)

    def test_server_missing_fields_passed_through(self):
        self.fill_cart()
        self.api.error = ApiError(
            code="validation_error",
            message="Shipping address is missing required fields: district",
            status=400,
            errors={"missing_fields": ["district"]},
        )

        result = self.orchestrator().checkout(ADDRESS)

        self.assertEqual(result.missing_fields, ["district"])

    def test_network_failure_has_fixed_message(self):
        self.fill_cart()
        self.api.error = NetworkError("connection refused")

        result = self.orchestrator().checkout(ADDRESS)

        self.assertFalse(result.success)
        self.assertEqual(result.code, "network_error")
        self.assertEqual(result.message, MSG_NETWORK)
        self.assertEqual(len(self.api.payloads), 1)
        self.assertFalse(self.store.state.is_empty)

    # --------------------------------------------------
    # Coupons
    # --------------------------------------------------

    def test_apply_coupon_then_checkout(self):
        self.fill_cart(quantity=5)
        self.api.coupon = {
            "coupon": {
                "code": "TEN",
                "kind": "percentage",
                "value": "10.00",
                "maximum_discount_amount": None,
            },
            "discountAmount": "10.00",
            "discountedTotal": "90.00",
        }
        orchestrator = self.orchestrator()

        self.assertTrue(orchestrator.apply_coupon("ten").success)
        self.assertEqual(self.store.state.discount_amount, Decimal("10.00"))

        orchestrator.checkout(ADDRESS)

        payload = self.api.payloads[0]
        self.assertEqual(payload["coupon"], "TEN")
        self.assertEqual(payload["discountAmount"], "10.00")
        self.assertEqual(payload["totalAmount"], "119.90")

    def test_apply_coupon_rejected_message_verbatim(self):
        self.fill_cart()
        self.api.error = ApiError(code="coupon_rejected", message="This coupon has expired.", status=400)

        result = self.orchestrator().apply_coupon("OLD")

        self.assertFalse(result.success)
        self.assertEqual(result.message, "This coupon has expired.")
        self.assertIsNone(self.store.state.applied_coupon)

    def test_apply_coupon_on_empty_cart(self):
        result = self.orchestrator().apply_coupon("TEN")

        self.assertEqual(result.code, "cart_empty")
