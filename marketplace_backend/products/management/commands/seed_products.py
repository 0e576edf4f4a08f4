from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Farmer, Product


FARMERS = [
    ("Yesil Vadi Ciftligi", "Izmir", "Bornova"),
    ("Toros Bahceleri", "Mersin", "Tarsus"),
]

PRODUCTS = [
    # farm, name, category, unit price, unit, stock
    ("Yesil Vadi Ciftligi", "Domates", "vegetables", "24.90", Product.Unit.KG, 120),
    ("Yesil Vadi Ciftligi", "Salatalik", "vegetables", "19.50", Product.Unit.KG, 80),
    ("Yesil Vadi Ciftligi", "Maydanoz", "greens", "7.00", Product.Unit.BUNCH, 40),
    ("Toros Bahceleri", "Portakal", "fruits", "29.90", Product.Unit.KG, 200),
    ("Toros Bahceleri", "Limon", "fruits", "34.00", Product.Unit.KG, 60),
]


class Command(BaseCommand):
    help = "Seed approved demo farmers and their products (idempotent)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding farmers and products..."))

        farmers = {}
        for farm_name, city, district in FARMERS:
            farmer, _ = Farmer.objects.get_or_create(
                farm_name=farm_name,
                defaults={"city": city, "district": district, "is_approved": True},
            )
            farmers[farm_name] = farmer

        created_count = 0
        for farm_name, name, category, price, unit, stock in PRODUCTS:
            _, created = Product.objects.get_or_create(
                farmer=farmers[farm_name],
                name=name,
                defaults={
                    "category": category,
                    "unit_price": Decimal(price),
                    "unit": unit,
                    "count_in_stock": stock,
                },
            )
            created_count += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {len(farmers)} farmers and {created_count} new products."
            )
        )
