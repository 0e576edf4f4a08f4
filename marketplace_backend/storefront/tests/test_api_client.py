# storefront/tests/test_api_client.py

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import LiveServerTestCase
from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken

from coupons.models import Coupon
from orders.models import Order
from orders.policy import ShippingPolicy
from products.models import Farmer, Product
from storefront.api import ApiError, MarketplaceApiClient, NetworkError
from storefront.cart import CartStore, ProductSnapshot
from storefront.checkout import CheckoutOrchestrator, Identity
from storefront.storage import MemoryStorage

User = get_user_model()

ADDRESS = {
    "full_name": "Ayse Yilmaz",
    "address": "Ataturk Cd. 12",
    "city": "Izmir",
    "district": "Bornova",
    "phone": "+905551112233",
}


class MarketplaceApiClientTests(LiveServerTestCase):
    """
    Storefront client against a running server: real HTTP, real envelope.
    """

    def setUp(self):
        self.customer = User.objects.create_user(
            email="customer@example.com", password="pass", role="customer"
        )
        farmer = Farmer.objects.create(farm_name="Yesil Vadi", is_approved=True)
        self.tomato = Product.objects.create(
            farmer=farmer,
            name="Domates",
            unit_price=Decimal("20.00"),
            count_in_stock=3,
        )
        now = timezone.now()
        Coupon.objects.create(
            code="HASAT10",
            kind="percentage",
            value=Decimal("10"),
            valid_from=now - timedelta(days=1),
            valid_until=now + timedelta(days=30),
        )

        token = str(RefreshToken.for_user(self.customer).access_token)
        self.anon = MarketplaceApiClient(self.live_server_url)
        self.client_api = MarketplaceApiClient(self.live_server_url, token=token)

    def test_catalog_is_unwrapped(self):
        products = self.anon.list_products()

        self.assertEqual([p["name"] for p in products], ["Domates"])

    def test_failure_envelope_raises_api_error(self):
        with self.assertRaises(ApiError) as ctx:
            self.anon.check_coupon("NOPE", Decimal("100"))

        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.code, "coupon_rejected")

    def test_me_requires_token(self):
        with self.assertRaises(ApiError) as ctx:
            self.anon.me()
        self.assertEqual(ctx.exception.status, 401)

        me = self.client_api.me()
        self.assertEqual(me["role"], "customer")

    def test_unreachable_server(self):
        client = MarketplaceApiClient("http://127.0.0.1:9", timeout=2)

        with self.assertRaises(NetworkError):
            client.list_products()

    def test_full_checkout(self):
        store = CartStore(MemoryStorage())
        store.init()
        snapshot = ProductSnapshot.from_api(self.anon.list_products()[0])
        store.add_item(snapshot)
        store.set_quantity(snapshot.product_id, 2)

        orchestrator = CheckoutOrchestrator(
            store=store,
            api=self.client_api,
            shipping_policy=ShippingPolicy(
                free_threshold=Decimal("150.00"), flat_fee=Decimal("29.90")
            ),
            identity_provider=lambda: Identity.from_me(self.client_api.me()),
        )

        self.assertTrue(orchestrator.apply_coupon("hasat10").success)
        result = orchestrator.checkout(ADDRESS)

        self.assertTrue(result.success, result.message)
        self.assertTrue(store.state.is_empty)

        order = Order.objects.get(pk=result.order_id)
        self.assertEqual(order.discount_amount, Decimal("4.00"))
        self.assertEqual(order.grand_total, Decimal("65.90"))
        self.tomato.refresh_from_db()
        self.assertEqual(self.tomato.count_in_stock, 1)

    def test_checkout_rejection_keeps_cart(self):
        store = CartStore(MemoryStorage())
        store.init()
        store.add_item(ProductSnapshot.from_api(self.anon.list_products()[0]))
        store.set_quantity(str(self.tomato.id), 3)
        Product.objects.filter(pk=self.tomato.pk).update(count_in_stock=1)

        orchestrator = CheckoutOrchestrator(
            store=store,
            api=self.client_api,
            shipping_policy=ShippingPolicy(
                free_threshold=Decimal("150.00"), flat_fee=Decimal("29.90")
            ),
            identity_provider=lambda: Identity(
                user_id=str(self.customer.id), role="customer", is_authenticated=True
            ),
        )
        result = orchestrator.checkout(ADDRESS)

        self.assertFalse(result.success)
        self.assertEqual(result.code, "insufficient_stock")
        self.assertIn("Domates", result.message)
        self.assertEqual(store.state.total_item_count, 3)
        self.assertFalse(Order.objects.exists())
