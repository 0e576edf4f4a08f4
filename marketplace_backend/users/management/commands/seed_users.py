# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.capabilities import ROLE_ADMIN, ROLE_COMPANY, ROLE_CUSTOMER, ROLE_FARMER
from products.models import Farmer


@dataclass(frozen=True)
class SeedUser:
    label: str
    role: str
    email: str
    first_name: str = ""
    last_name: str = ""
    farm_name: str = ""


SEED_USERS = [
    SeedUser("Admin", ROLE_ADMIN, "admin@example.com", "Platform", "Admin"),
    SeedUser("Customer", ROLE_CUSTOMER, "customer@example.com", "Ayse", "Yilmaz"),
    SeedUser("Company", ROLE_COMPANY, "company@example.com", "Lokanta", "Ltd"),
    SeedUser(
        "Farmer",
        ROLE_FARMER,
        "farmer@example.com",
        "Mehmet",
        "Kaya",
        farm_name="Yesil Vadi Ciftligi",
    ),
]


class Command(BaseCommand):
    help = "Seed one demo account per marketplace role (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()
        self.stdout.write("Seeding marketplace users ...")

        created_count = 0
        updated_count = 0

        for seed in SEED_USERS:
            is_admin = seed.role == ROLE_ADMIN
            user, created = User.objects.get_or_create(
                email=seed.email,
                defaults={
                    "role": seed.role,
                    "first_name": seed.first_name,
                    "last_name": seed.last_name,
                    "is_staff": is_admin,
                    "is_superuser": is_admin,
                },
            )

            dirty = False
            if user.role != seed.role:
                user.role = seed.role
                dirty = True
            if not user.is_active:
                user.is_active = True
                dirty = True
            if created or force_password:
                user.set_password(password)
                dirty = True
            if dirty:
                user.save()

            if seed.farm_name:
                farmer, _ = Farmer.objects.get_or_create(
                    farm_name=seed.farm_name,
                    defaults={"is_approved": True},
                )
                if farmer.user_id != user.id:
                    farmer.user = user
                    farmer.save(update_fields=["user", "updated_at"])

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"  + {seed.label}: {seed.email}"))
            elif dirty:
                updated_count += 1
                self.stdout.write(f"  ~ {seed.label}: {seed.email}")

        self.stdout.write(
            self.style.SUCCESS(
                f"Done. created={created_count} updated={updated_count}"
            )
        )
