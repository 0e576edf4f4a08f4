# products/tests/test_inventory.py

from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase

from backend.exceptions import NotFoundError, StockError
from products.models import Farmer, Product
from products.services.inventory import (
    decrement_stock,
    ensure_available,
    lock_products,
    restock,
)


class InventoryServiceTests(TestCase):
    """
    GUARANTEES:
    - stock never goes negative
    - a refused decrement writes nothing
    - errors name the product
    """

    def setUp(self):
        self.farmer = Farmer.objects.create(farm_name="Yesil Vadi", is_approved=True)
        self.product = Product.objects.create(
            farmer=self.farmer,
            name="Domates",
            unit_price=Decimal("24.90"),
            count_in_stock=5,
        )

    def test_decrement_lowers_stock(self):
        decrement_stock(product_id=self.product.id, quantity=3)

        self.product.refresh_from_db()
        self.assertEqual(self.product.count_in_stock, 2)

    def test_decrement_to_zero_is_allowed(self):
        decrement_stock(product_id=self.product.id, quantity=5)

        self.product.refresh_from_db()
        self.assertEqual(self.product.count_in_stock, 0)

    def test_decrement_beyond_stock_is_refused(self):
        with self.assertRaises(StockError) as ctx:
            decrement_stock(product_id=self.product.id, quantity=6, name="Domates")

        self.assertIn("Domates", ctx.exception.message)
        self.assertEqual(ctx.exception.available, 5)

        self.product.refresh_from_db()
        self.assertEqual(self.product.count_in_stock, 5)

    def test_stale_read_cannot_oversell(self):
        # both buyers validated against the same snapshot of 1 unit
        self.product.count_in_stock = 1
        self.product.save(update_fields=["count_in_stock"])

        decrement_stock(product_id=self.product.id, quantity=1)

        with self.assertRaises(StockError):
            decrement_stock(product_id=self.product.id, quantity=1)

        self.product.refresh_from_db()
        self.assertEqual(self.product.count_in_stock, 0)

    def test_non_positive_quantity_rejected(self):
        with self.assertRaises(ValueError):
            decrement_stock(product_id=self.product.id, quantity=0)

    def test_database_refuses_negative_stock(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Product.objects.filter(id=self.product.id).update(count_in_stock=-1)

    def test_ensure_available(self):
        ensure_available(self.product, 5)

        with self.assertRaises(StockError) as ctx:
            ensure_available(self.product, 6)
        self.assertEqual(
            ctx.exception.message,
            "Insufficient stock for Domates. Requested: 6, Available: 5",
        )

    def test_inactive_product_is_unavailable(self):
        self.product.is_active = False
        self.product.save(update_fields=["is_active"])

        with self.assertRaises(StockError):
            ensure_available(self.product, 1)

    def test_lock_products_reports_missing(self):
        with transaction.atomic():
            locked = lock_products([self.product.id])
            self.assertIn(str(self.product.id), locked)

            with self.assertRaises(NotFoundError):
                lock_products([self.product.id, "00000000-0000-0000-0000-000000000000"])

    def test_restock(self):
        self.assertEqual(restock(product_id=self.product.id, quantity=4), 9)
