"""
PATH: users/models/user.py

CUSTOM USER MODEL

Marketplace actors:
- customer: shops and places orders
- company:  business buyer, places orders like a customer
- farmer:   supplier; owns product listings, manages incoming orders
- admin:    platform operator (coupons, order oversight)

Email is the canonical login identity.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone

from permissions.capabilities import ROLE_ADMIN, ROLE_COMPANY, ROLE_CUSTOMER, ROLE_FARMER


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email=None, password=None, **extra_fields):
        email = (email or "").strip()
        if not email:
            raise ValueError("An email address is required")

        email = self.normalize_email(email)
        extra_fields.setdefault("is_active", True)

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", ROLE_ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_CHOICES = [
        (ROLE_CUSTOMER, "Customer"),
        (ROLE_COMPANY, "Company"),
        (ROLE_FARMER, "Farmer"),
        (ROLE_ADMIN, "Admin"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=32, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.email} ({self.role})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_new_user(self, *, now=None, window_days: int | None = None) -> bool:
        """
        New-user coupons are honoured for accounts registered within the window
        (settings.NEW_USER_WINDOW_DAYS unless overridden).
        """
        if window_days is None:
            window_days = int(getattr(settings, "NEW_USER_WINDOW_DAYS", 7))
        now = now or timezone.now()
        return self.created_at >= now - timedelta(days=window_days)
