# coupons/services/coupon_service.py

"""
COUPON STORE SERVICES

- find_by_code(): case-insensitive lookup, optionally row-locked
- check_coupon(): evaluate a code against a subtotal for a given user
- increment_usage(): atomic, limit-guarded `used_count + 1`

increment_usage never reads used_count into Python; concurrent
redemptions of the same code cannot lose an update or overshoot
usage_limit.
"""

from __future__ import annotations

import logging

from django.db.models import F, Q
from django.utils import timezone

from backend.exceptions import CouponError
from coupons.models import Coupon
from coupons.services.discount import DiscountEvaluation, RejectionReason, evaluate

logger = logging.getLogger(__name__)


def normalize_code(code) -> str:
    return (code or "").strip().upper()


def find_by_code(code, *, lock: bool = False):
    code = normalize_code(code)
    if not code:
        return None

    qs = Coupon.objects.all()
    if lock:
        qs = qs.select_for_update()
    return qs.filter(code__iexact=code).first()


def is_new_user(user, *, now=None) -> bool:
    """
    Anonymous previews are treated as eligible; the order service
    re-checks with the real account.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return True
    return user.is_new_user(now=now)


def check_coupon(code, subtotal, *, user=None, now=None, lock: bool = False):
    """
    Returns (coupon, evaluation). Raises CouponError on rejection.
    """
    now = now or timezone.now()
    coupon = find_by_code(code, lock=lock)

    evaluation: DiscountEvaluation = evaluate(
        coupon,
        subtotal,
        now,
        is_new_user(user, now=now),
    )

    if not evaluation.valid:
        logger.info(
            "Coupon rejected",
            extra={
                "coupon_code": normalize_code(code),
                "reason": evaluation.reason.value,
                "user_id": str(getattr(user, "id", "") or ""),
            },
        )
        raise CouponError(
            reason=evaluation.reason,
            coupon_code=normalize_code(code),
            message=evaluation.message,
        )

    return coupon, evaluation


def increment_usage(coupon: Coupon) -> None:
    updated = (
        Coupon.objects.filter(pk=coupon.pk)
        .filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F("usage_limit")))
        .update(used_count=F("used_count") + 1)
    )

    if not updated:
        logger.warning(
            "Coupon usage increment refused (limit reached)",
            extra={"coupon_id": str(coupon.pk), "coupon_code": coupon.code},
        )
        raise CouponError(reason=RejectionReason.LIMIT_REACHED, coupon_code=coupon.code)
