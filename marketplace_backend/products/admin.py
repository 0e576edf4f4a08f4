# products/admin.py

"""
PRODUCTS ADMIN

Stock is edited here directly by operators; checkout never goes
through admin and only lowers stock via the conditional decrement.
"""

from django.contrib import admin

from products.models import Farmer, Product


@admin.register(Farmer)
class FarmerAdmin(admin.ModelAdmin):
    list_display = ("farm_name", "user", "city", "is_approved", "created_at")
    list_filter = ("is_approved", "city")
    search_fields = ("farm_name", "user__email")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "farmer",
        "unit_price",
        "unit",
        "count_in_stock",
        "is_active",
    )
    list_filter = ("is_active", "unit", "category")
    search_fields = ("name", "farmer__farm_name")
    autocomplete_fields = ("farmer",)
