# orders/tests/test_order_creation.py

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from backend.exceptions import CouponError, StockError, ValidationError
from coupons.models import Coupon
from orders.models import Order, OrderItem
from orders.services.order_service import create_order
from products.models import Farmer, Product

User = get_user_model()

ADDRESS = {
    "full_name": "Ayse Yilmaz",
    "address": "Ataturk Cd. 12",
    "city": "Izmir",
    "district": "Bornova",
    "phone": "+905551112233",
}


class OrderFixtures:
    def make_world(self):
        self.customer = User.objects.create_user(
            email="customer@example.com", password="pass", role="customer"
        )
        self.farmer = Farmer.objects.create(farm_name="Yesil Vadi", is_approved=True)
        self.other_farmer = Farmer.objects.create(farm_name="Toros", is_approved=True)

        self.tomato = Product.objects.create(
            farmer=self.farmer,
            name="Domates",
            unit_price=Decimal("20.00"),
            count_in_stock=3,
        )
        self.cucumber = Product.objects.create(
            farmer=self.farmer,
            name="Salatalik",
            unit_price=Decimal("10.00"),
            count_in_stock=10,
        )
        self.orange = Product.objects.create(
            farmer=self.other_farmer,
            name="Portakal",
            unit_price=Decimal("30.00"),
            count_in_stock=10,
        )

    def line(self, product, quantity):
        return {
            "product": product.id,
            "name": product.name,
            "quantity": quantity,
            "price": product.unit_price,
            "image": "",
            "farmer": product.farmer_id,
        }

    def make_coupon(self, **overrides):
        now = timezone.now()
        fields = {
            "code": "HASAT10",
            "kind": "percentage",
            "value": Decimal("10"),
            "valid_from": now - timedelta(days=1),
            "valid_until": now + timedelta(days=30),
        }
        fields.update(overrides)
        return Coupon.objects.create(**fields)


class OrderServiceTests(OrderFixtures, TestCase):
    """
    GUARANTEES:
    - a rejected order persists nothing and leaves stock alone
    - totals are computed server-side
    - stock is decremented and coupon usage incremented exactly once
    """

    def setUp(self):
        self.make_world()

    def _place(self, lines, **kwargs):
        subtotal = sum(Decimal(str(l["price"])) * l["quantity"] for l in lines)
        params = {
            "user": self.customer,
            "items": lines,
            "shipping_address": ADDRESS,
            "subtotal": subtotal,
        }
        params.update(kwargs)
        return create_order(**params)

    def test_successful_order(self):
        order = self._place([self.line(self.tomato, 2), self.line(self.cucumber, 1)])

        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.subtotal, Decimal("50.00"))
        self.assertEqual(order.shipping_fee, Decimal("29.90"))
        self.assertEqual(order.grand_total, Decimal("79.90"))
        self.assertEqual(order.farmer_id, self.farmer.id)
        self.assertTrue(order.order_no.startswith("MP"))
        self.assertEqual(len(order.order_no), 12)
        self.assertEqual(order.payment_method, "cash_on_delivery")
        self.assertEqual(order.items.count(), 2)

        self.tomato.refresh_from_db()
        self.cucumber.refresh_from_db()
        self.assertEqual(self.tomato.count_in_stock, 1)
        self.assertEqual(self.cucumber.count_in_stock, 9)

    def test_estimated_delivery_is_three_days_out(self):
        before = timezone.now()
        order = self._place([self.line(self.cucumber, 1)])

        delta = order.estimated_delivery_date - before
        self.assertGreaterEqual(delta, timedelta(days=3))
        self.assertLess(delta, timedelta(days=3, minutes=1))

    def test_free_shipping_at_threshold(self):
        order = self._place([self.line(self.cucumber, 10), self.line(self.tomato, 3)])

        self.assertEqual(order.subtotal, Decimal("160.00"))
        self.assertEqual(order.shipping_fee, Decimal("0.00"))
        self.assertEqual(order.grand_total, Decimal("160.00"))

    def test_colliding_order_number_is_regenerated(self):
        state = random.getstate()
        try:
            random.seed(2024)
            first = self._place([self.line(self.cucumber, 1)])
            random.seed(2024)
            second = self._place([self.line(self.cucumber, 1)])
        finally:
            random.setstate(state)

        self.assertNotEqual(first.order_no, second.order_no)
        self.assertEqual(Order.objects.count(), 2)
        self.cucumber.refresh_from_db()
        self.assertEqual(self.cucumber.count_in_stock, 8)

    def test_changed_price_is_rejected(self):
        line = {**self.line(self.tomato, 2), "price": Decimal("0.00")}

        with self.assertRaises(ValidationError) as ctx:
            self._place([line])

        self.assertIn("Domates", ctx.exception.message)
        self.assertEqual(Order.objects.count(), 0)
        self.tomato.refresh_from_db()
        self.assertEqual(self.tomato.count_in_stock, 3)

    def test_insufficient_stock_names_product_and_persists_nothing(self):
        with self.assertRaises(StockError) as ctx:
            self._place([self.line(self.cucumber, 1), self.line(self.tomato, 5)])

        self.assertIn("Domates", ctx.exception.message)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

        self.tomato.refresh_from_db()
        self.cucumber.refresh_from_db()
        self.assertEqual(self.tomato.count_in_stock, 3)
        self.assertEqual(self.cucumber.count_in_stock, 10)

    def test_last_unit_goes_to_exactly_one_buyer(self):
        self.tomato.count_in_stock = 1
        self.tomato.save(update_fields=["count_in_stock"])
        other = User.objects.create_user(email="other@example.com", password="pass")

        self._place([self.line(self.tomato, 1)])

        with self.assertRaises(StockError):
            self._place([self.line(self.tomato, 1)], user=other)

        self.tomato.refresh_from_db()
        self.assertEqual(self.tomato.count_in_stock, 0)
        self.assertEqual(Order.objects.count(), 1)

    def test_empty_order_rejected(self):
        with self.assertRaises(ValidationError):
            create_order(user=self.customer, items=[], shipping_address=ADDRESS)

    def test_missing_address_fields_enumerated(self):
        with self.assertRaises(ValidationError) as ctx:
            self._place(
                [self.line(self.tomato, 1)],
                shipping_address={"full_name": "Ayse", "address": "x", "city": ""},
            )

        self.assertEqual(ctx.exception.fields, ["city", "district", "phone"])
        self.assertEqual(Order.objects.count(), 0)

    def test_mixed_suppliers_rejected(self):
        with self.assertRaises(ValidationError):
            self._place([self.line(self.tomato, 1), self.line(self.orange, 1)])

        self.assertEqual(Order.objects.count(), 0)

    def test_mixed_suppliers_rejected_even_without_farmer_refs(self):
        lines = [self.line(self.tomato, 1), self.line(self.orange, 1)]
        for line in lines:
            line["farmer"] = None

        with self.assertRaises(ValidationError):
            self._place(lines)

        self.orange.refresh_from_db()
        self.assertEqual(self.orange.count_in_stock, 10)

    def test_subtotal_mismatch_rejected(self):
        with self.assertRaises(ValidationError):
            self._place([self.line(self.tomato, 1)], subtotal=Decimal("1.00"))

    def test_coupon_is_reevaluated_and_redeemed(self):
        coupon = self.make_coupon(usage_limit=5)

        order = self._place(
            [self.line(self.cucumber, 5)],
            coupon_code="hasat10",
            discount_amount=Decimal("40.00"),
        )

        # 10% of 50.00, not the client's 40.00
        self.assertEqual(order.discount_amount, Decimal("5.00"))
        self.assertEqual(order.grand_total, Decimal("74.90"))
        self.assertEqual(order.coupon_code, "HASAT10")

        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)

    def test_rejected_coupon_aborts_order(self):
        self.make_coupon(minimum_purchase=Decimal("500"))

        with self.assertRaises(CouponError):
            self._place([self.line(self.cucumber, 1)], coupon_code="HASAT10")

        self.assertEqual(Order.objects.count(), 0)
        self.cucumber.refresh_from_db()
        self.assertEqual(self.cucumber.count_in_stock, 10)

    def test_exhausted_coupon_aborts_order(self):
        coupon = self.make_coupon(usage_limit=1, used_count=1)

        with self.assertRaises(CouponError):
            self._place([self.line(self.cucumber, 1)], coupon_code="HASAT10")

        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)

    def test_fixed_coupon_never_makes_total_negative(self):
        self.make_coupon(code="BUYUK", kind="fixed", value=Decimal("500"))

        order = self._place([self.line(self.cucumber, 1)], coupon_code="BUYUK")

        self.assertEqual(order.discount_amount, Decimal("10.00"))
        self.assertEqual(order.grand_total, Decimal("29.90"))

    def test_items_are_immutable(self):
        order = self._place([self.line(self.cucumber, 1)])
        item = order.items.get()

        item.quantity = 99
        with self.assertRaises(ValueError):
            item.save()


class OrderCreateApiTests(OrderFixtures, TestCase):
    def setUp(self):
        self.make_world()
        self.client = APIClient()

    def _payload(self, lines, **overrides):
        subtotal = sum(Decimal(str(l["price"])) * l["quantity"] for l in lines)
        payload = {
            "items": [
                {**l, "product": str(l["product"]), "farmer": str(l["farmer"]), "price": str(l["price"])}
                for l in lines
            ],
            "shippingAddress": {
                "fullName": ADDRESS["full_name"],
                "address": ADDRESS["address"],
                "city": ADDRESS["city"],
                "district": ADDRESS["district"],
                "phone": ADDRESS["phone"],
            },
            "paymentMethod": "cash_on_delivery",
            "totalPrice": str(subtotal),
            "shippingFee": "29.90",
            "totalAmount": str(subtotal + Decimal("29.90")),
            "coupon": "",
            "discountAmount": "0",
        }
        payload.update(overrides)
        return payload

    def test_customer_places_order(self):
        self.client.force_authenticate(user=self.customer)

        res = self.client.post(
            "/api/orders/", self._payload([self.line(self.tomato, 2)]), format="json"
        )

        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["version"], 1)
        self.assertTrue(res.data["success"])
        data = res.data["data"]
        self.assertTrue(Order.objects.filter(pk=data["orderId"]).exists())
        self.assertEqual(data["grand_total"], "69.90")
        self.assertEqual(data["shipping_address"]["full_name"], "Ayse Yilmaz")
        self.assertEqual(len(data["items"]), 1)

    def test_company_places_order(self):
        company = User.objects.create_user(
            email="co@example.com", password="pass", role="company"
        )
        self.client.force_authenticate(user=company)

        res = self.client.post(
            "/api/orders/", self._payload([self.line(self.cucumber, 1)]), format="json"
        )
        self.assertEqual(res.status_code, 201)

    def test_farmer_and_admin_cannot_place_orders(self):
        for role in ("farmer", "admin"):
            user = User.objects.create_user(email=f"{role}@example.com", password="pass", role=role)
            self.client.force_authenticate(user=user)

            res = self.client.post(
                "/api/orders/", self._payload([self.line(self.cucumber, 1)]), format="json"
            )

            self.assertEqual(res.status_code, 403)
            self.assertFalse(res.data["success"])

        self.assertEqual(Order.objects.count(), 0)

    def test_anonymous_rejected(self):
        res = self.client.post(
            "/api/orders/", self._payload([self.line(self.cucumber, 1)]), format="json"
        )
        self.assertEqual(res.status_code, 401)

    def test_stock_error_envelope(self):
        self.client.force_authenticate(user=self.customer)

        res = self.client.post(
            "/api/orders/", self._payload([self.line(self.tomato, 5)]), format="json"
        )

        self.assertEqual(res.status_code, 409)
        self.assertFalse(res.data["success"])
        self.assertEqual(res.data["code"], "insufficient_stock")
        self.assertEqual(
            res.data["message"],
            "Insufficient stock for Domates. Requested: 5, Available: 3",
        )
        self.tomato.refresh_from_db()
        self.assertEqual(self.tomato.count_in_stock, 3)

    def test_missing_address_envelope(self):
        self.client.force_authenticate(user=self.customer)
        payload = self._payload([self.line(self.tomato, 1)])
        payload["shippingAddress"]["phone"] = ""

        res = self.client.post("/api/orders/", payload, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "validation_error")
        self.assertEqual(res.data["errors"], {"missing_fields": ["phone"]})

    def test_zero_quantity_rejected(self):
        self.client.force_authenticate(user=self.customer)
        payload = self._payload([self.line(self.tomato, 1)])
        payload["items"][0]["quantity"] = 0

        res = self.client.post("/api/orders/", payload, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "validation_error")

    def test_unknown_coupon_envelope(self):
        self.client.force_authenticate(user=self.customer)

        res = self.client.post(
            "/api/orders/",
            self._payload([self.line(self.tomato, 1)], coupon="NOPE"),
            format="json",
        )

        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["code"], "coupon_rejected")
        self.assertEqual(Order.objects.count(), 0)
