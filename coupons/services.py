"""Coupon evaluation.

``evaluate`` is the single rule set; the preview endpoint reports why a code
is rejected, while checkout (``discount_for_checkout``) treats any rejection
as "no discount" and carries on with the order.
"""

import logging
from decimal import Decimal

from common.exceptions import ConflictError, NotFound
from common.money import ZERO, to_money
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from .models import Coupon, CouponRedemption

logger = logging.getLogger("storefront.coupons")


class CouponRejected(Exception):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def normalize_code(code) -> str:
    return (code or "").strip().upper()


def compute_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
    subtotal = to_money(subtotal)
    if coupon.discount_type == Coupon.TYPE_PERCENT:
        discount = subtotal * coupon.value / Decimal("100")
        if coupon.max_discount is not None:
            discount = min(discount, coupon.max_discount)
    else:
        discount = coupon.value
    return to_money(min(discount, subtotal))


def evaluate(coupon: Coupon, subtotal: Decimal, *, now=None) -> Decimal:
    """Return the discount ``coupon`` grants on ``subtotal`` or raise ``CouponRejected``."""

    now = now or timezone.now()
    if not coupon.is_active:
        raise CouponRejected("This coupon is disabled.")
    if coupon.start_at and now < coupon.start_at:
        raise CouponRejected("This coupon is not active yet.")
    if coupon.end_at and now > coupon.end_at:
        raise CouponRejected("This coupon has expired.")
    if coupon.usage_limit is not None and coupon.redemptions.count() >= coupon.usage_limit:
        raise CouponRejected("This coupon has been fully redeemed.")
    if to_money(subtotal) < coupon.min_subtotal:
        raise CouponRejected(f"Minimum order subtotal for this coupon is {coupon.min_subtotal}.")
    return compute_discount(coupon, subtotal)


def preview(code: str, subtotal: Decimal) -> dict:
    try:
        coupon = Coupon.objects.get(code=normalize_code(code))
    except Coupon.DoesNotExist:
        raise NotFound("Coupon not found.")
    try:
        discount = evaluate(coupon, subtotal)
    except CouponRejected as exc:
        raise ValidationError({"code": [exc.reason]})
    return {
        "code": coupon.code,
        "discount_type": coupon.discount_type,
        "value": coupon.value,
        "discount_amount": discount,
    }


def discount_for_checkout(code, subtotal: Decimal, *, now=None) -> tuple[Coupon | None, Decimal]:
    """Re-check a coupon at order creation.

    Must run inside the checkout transaction: the coupon row is locked so
    concurrent orders cannot exceed ``usage_limit``. An unknown or ineligible
    code yields ``(None, 0)``.
    """

    code = normalize_code(code)
    if not code:
        return None, ZERO
    coupon = Coupon.objects.select_for_update().filter(code=code).first()
    if coupon is None:
        logger.info("coupon.unknown", extra={"event": "coupon.unknown", "coupon_code": code})
        return None, ZERO
    try:
        discount = evaluate(coupon, subtotal, now=now)
    except CouponRejected as exc:
        logger.info(
            "coupon.rejected",
            extra={"event": "coupon.rejected", "coupon_code": code, "reason": exc.reason},
        )
        return None, ZERO
    return coupon, discount


def redeem(*, coupon: Coupon, order, discount_amount: Decimal) -> CouponRedemption:
    return CouponRedemption.objects.create(
        coupon=coupon,
        user_id=order.user_id,
        order=order,
        discount_amount=discount_amount,
    )


@transaction.atomic
def delete_coupon(coupon: Coupon) -> None:
    used = coupon.redemptions.count()
    if used:
        raise ConflictError(f"Coupon has been used in {used} order(s) and cannot be deleted.")
    coupon.delete()
