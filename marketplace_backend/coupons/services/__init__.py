"""
Coupon services.

discount.py is import-safe without Django (the storefront previews
discounts with it); coupon_service.py is the ORM side.
"""
