# orders/services/order_service.py

"""
ORDER CREATION SERVICE (APPLICATION SERVICE)

Purpose:
- Turn a submitted cart snapshot into a persisted Order.
- Decrement stock and redeem the coupon in the same unit of work.

Stages (first failure aborts, nothing is persisted):
1. Structural validation  items present, positive quantities, address
                          complete, one supplier, subtotal adds up
2. Stock validation       product rows locked, every line covered, line
                          prices match the current product prices
3. Coupon validation      authoritative coupon re-evaluated against the
                          server subtotal; the client discount is ignored
4. Persist                Order + OrderItem snapshots, estimated delivery
5. Decrement stock        conditional UPDATE per line
6. Redeem coupon          guarded used_count + 1

Hard rules:
- Stages 2-6 run in one transaction.atomic block. A refused decrement or
  coupon increment rolls the order back.
- Money values are computed server-side and quantized only when stored.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from backend.exceptions import ValidationError
from coupons.services.coupon_service import check_coupon, increment_usage, normalize_code
from orders.models import Order, OrderItem
from orders.policy import ShippingPolicy, missing_address_fields
from products.services.inventory import decrement_stock, ensure_available, lock_products

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

ADDRESS_SNAPSHOT_FIELDS = ("full_name", "address", "city", "district", "postal_code", "phone")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _to_int_qty(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("Quantity must be a whole number.")

    if isinstance(value, int):
        return value

    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())

    raise ValidationError("Quantity must be a whole number.")


def _normalize_lines(items) -> list[dict]:
    if not items:
        raise ValidationError("Your order has no items.")

    lines = []
    seen = set()
    for item in items:
        name = str(item.get("name") or "").strip()
        qty = _to_int_qty(item.get("quantity"))
        if qty <= 0:
            raise ValidationError(f"Invalid quantity for {name or 'product'}. Quantity must be at least 1.")

        product_id = str(item.get("product") or "").strip()
        if not product_id:
            raise ValidationError("Every item must reference a product.")
        if product_id in seen:
            raise ValidationError(f"{name or 'A product'} appears more than once in the order.")
        seen.add(product_id)

        price = Decimal(str(item.get("price") if item.get("price") is not None else "0"))
        if price < 0:
            raise ValidationError(f"Invalid price for {name or 'product'}.")

        farmer = item.get("farmer")
        lines.append(
            {
                "product_id": product_id,
                "name": name,
                "quantity": qty,
                "unit_price": price,
                "image": str(item.get("image") or ""),
                "farmer_id": str(farmer) if farmer else None,
            }
        )
    return lines


def _address_snapshot(shipping_address) -> dict:
    address = shipping_address or {}
    missing = missing_address_fields(address)
    if missing:
        raise ValidationError(
            "Shipping address is missing required fields: " + ", ".join(missing),
            fields=missing,
        )
    return {
        field: str(address.get(field) or "").strip()
        for field in ADDRESS_SNAPSHOT_FIELDS
    }


def _single_supplier(supplier_ids) -> None:
    suppliers = {s for s in supplier_ids if s}
    if len(suppliers) > 1:
        raise ValidationError("All items in an order must come from the same farmer.")


def create_order(
    *,
    user,
    items,
    shipping_address,
    payment_method: str | None = None,
    subtotal=None,
    shipping_fee=None,
    grand_total=None,
    coupon_code: str | None = None,
    discount_amount=None,
    notes: str = "",
) -> Order:
    """
    Create an order from a submitted cart snapshot.

    `subtotal`, `shipping_fee`, `grand_total` and `discount_amount` are the
    client's figures. The subtotal must agree with the line snapshot; the
    others are recomputed and only compared for logging.
    """
    # ------------------------------------------------
    # 1. STRUCTURAL VALIDATION
    # ------------------------------------------------
    lines = _normalize_lines(items)
    address = _address_snapshot(shipping_address)
    _single_supplier(line["farmer_id"] for line in lines)

    line_sum = sum((line["unit_price"] * line["quantity"] for line in lines), Decimal("0"))
    if subtotal is not None and _money(subtotal) != _money(line_sum):
        raise ValidationError(
            "Order subtotal does not match its items. Please refresh your cart and try again."
        )

    payment_method = (payment_method or settings.DEFAULT_PAYMENT_METHOD).strip()
    code = normalize_code(coupon_code)

    logger.info(
        "Order creation started",
        extra={
            "user_id": str(getattr(user, "id", "") or ""),
            "line_count": len(lines),
            "coupon_code": code or None,
        },
    )

    with transaction.atomic():
        # ------------------------------------------------
        # 2. STOCK VALIDATION (rows locked until commit)
        # ------------------------------------------------
        products = lock_products(line["product_id"] for line in lines)

        for line in lines:
            product = products[line["product_id"]]
            ensure_available(product, line["quantity"], name=line["name"] or product.name)

            if line["farmer_id"] and line["farmer_id"] != str(product.farmer_id):
                raise ValidationError(
                    f"{product.name} is not sold by the farmer this order was placed with."
                )
            if _money(line["unit_price"]) != _money(product.unit_price):
                logger.warning(
                    "Order rejected: cart price differs from current product price",
                    extra={
                        "product_id": line["product_id"],
                        "cart_price": str(line["unit_price"]),
                        "current_price": str(product.unit_price),
                    },
                )
                raise ValidationError(
                    f"The price of {product.name} has changed. "
                    "Please refresh your cart and try again."
                )

        _single_supplier(str(p.farmer_id) for p in products.values())
        farmer_id = next(iter(products.values())).farmer_id

        # ------------------------------------------------
        # 3. COUPON VALIDATION (authoritative record)
        # ------------------------------------------------
        coupon = None
        discount = Decimal("0.00")
        if code:
            coupon, evaluation = check_coupon(code, line_sum, user=user, lock=True)
            discount = _money(evaluation.discount_amount)

            if discount_amount is not None and _money(discount_amount) != discount:
                logger.warning(
                    "Client discount differs from server evaluation",
                    extra={
                        "coupon_code": code,
                        "client_discount": str(discount_amount),
                        "server_discount": str(discount),
                    },
                )

        order_subtotal = _money(line_sum)
        fee = _money(ShippingPolicy.from_settings().fee_for(order_subtotal))
        total = _money(order_subtotal + fee - discount)

        if shipping_fee is not None and _money(shipping_fee) != fee:
            logger.warning(
                "Client shipping fee differs from policy",
                extra={"client_fee": str(shipping_fee), "server_fee": str(fee)},
            )
        if grand_total is not None and _money(grand_total) != total:
            logger.warning(
                "Client total differs from server total",
                extra={"client_total": str(grand_total), "server_total": str(total)},
            )

        # ------------------------------------------------
        # 4. PERSIST
        # ------------------------------------------------
        now = timezone.now()
        order = Order.objects.create(
            user=user,
            farmer_id=farmer_id,
            shipping_address=address,
            payment_method=payment_method,
            subtotal=order_subtotal,
            shipping_fee=fee,
            discount_amount=discount,
            grand_total=total,
            coupon=coupon,
            coupon_code=coupon.code if coupon else "",
            status=Order.STATUS_PENDING,
            estimated_delivery_date=now + timedelta(days=settings.ORDER_DELIVERY_LEAD_DAYS),
            notes=(notes or "").strip(),
        )

        for line in lines:
            product = products[line["product_id"]]
            OrderItem.objects.create(
                order=order,
                product=product,
                farmer_id=product.farmer_id,
                name=line["name"] or product.name,
                quantity=line["quantity"],
                unit_price=_money(line["unit_price"]),
                unit=product.unit,
                image=line["image"] or product.image,
                line_total=_money(line["unit_price"] * line["quantity"]),
            )

        # ------------------------------------------------
        # 5. DECREMENT STOCK
        # ------------------------------------------------
        for line in lines:
            decrement_stock(
                product_id=line["product_id"],
                quantity=line["quantity"],
                name=line["name"] or products[line["product_id"]].name,
            )

        # ------------------------------------------------
        # 6. REDEEM COUPON
        # ------------------------------------------------
        if coupon is not None:
            increment_usage(coupon)

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "order_no": order.order_no,
            "grand_total": str(order.grand_total),
            "coupon_code": order.coupon_code or None,
        },
    )
    return order
