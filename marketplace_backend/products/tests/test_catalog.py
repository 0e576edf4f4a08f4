# products/tests/test_catalog.py

from decimal import Decimal

from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Farmer, Product


class CatalogApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

        self.farmer = Farmer.objects.create(farm_name="Toros Bahceleri", is_approved=True)
        self.pending_farmer = Farmer.objects.create(farm_name="Onaysiz", is_approved=False)

        self.orange = Product.objects.create(
            farmer=self.farmer,
            name="Portakal",
            unit_price=Decimal("29.90"),
            count_in_stock=10,
        )
        self.lemon = Product.objects.create(
            farmer=self.farmer,
            name="Limon",
            unit_price=Decimal("34.00"),
            count_in_stock=0,
        )
        Product.objects.create(
            farmer=self.pending_farmer,
            name="Gizli",
            unit_price=Decimal("1.00"),
            count_in_stock=3,
        )

    def test_list_is_public_and_enveloped(self):
        res = self.client.get("/api/products/")

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["success"])
        names = {p["name"] for p in res.data["data"]}
        self.assertEqual(names, {"Portakal", "Limon"})

    def test_in_stock_filter(self):
        res = self.client.get("/api/products/", {"in_stock": "1"})

        names = [p["name"] for p in res.data["data"]]
        self.assertEqual(names, ["Portakal"])

    def test_retrieve_exposes_stock_and_farmer(self):
        res = self.client.get(f"/api/products/{self.orange.id}/")

        self.assertEqual(res.status_code, 200)
        data = res.data["data"]
        self.assertEqual(data["price"], "29.90")
        self.assertEqual(data["count_in_stock"], 10)
        self.assertEqual(data["farmer"]["id"], str(self.farmer.id))

    def test_unknown_product_is_enveloped_404(self):
        res = self.client.get("/api/products/00000000-0000-0000-0000-000000000000/")

        self.assertEqual(res.status_code, 404)
        self.assertFalse(res.data["success"])
        self.assertEqual(res.data["code"], "not_found")


class SeedProductsCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_products", verbosity=0)
        first = Product.objects.count()

        call_command("seed_products", verbosity=0)

        self.assertGreater(first, 0)
        self.assertEqual(Product.objects.count(), first)
        self.assertTrue(Farmer.objects.filter(is_approved=True).exists())
