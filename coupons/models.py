"""Coupon codes and their redemptions."""

from decimal import Decimal

from common.choices import DiscountType
from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class Coupon(TimeStampedModel):
    TYPE_PERCENT = DiscountType.PERCENT
    TYPE_FIXED = DiscountType.FIXED
    TYPE_CHOICES = DiscountType.choices

    code = models.CharField(max_length=32, unique=True)
    discount_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_FIXED)
    value = models.DecimalField(max_digits=14, decimal_places=2)
    min_subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    max_discount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Cap for percent coupons",
    )
    start_at = models.DateTimeField(null=True, blank=True)
    end_at = models.DateTimeField(null=True, blank=True)
    usage_limit = models.PositiveIntegerField(null=True, blank=True, help_text="Empty means unlimited")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(name="coupon_value_positive", condition=models.Q(value__gt=0)),
            models.CheckConstraint(
                name="coupon_percent_le_100",
                condition=~models.Q(discount_type="percent") | models.Q(value__lte=100),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.code

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)


class CouponRedemption(models.Model):
    coupon = models.ForeignKey(Coupon, related_name="redemptions", on_delete=models.PROTECT)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="coupon_redemptions",
        on_delete=models.SET_NULL,
    )
    order = models.OneToOneField("orders.Order", related_name="coupon_redemption", on_delete=models.CASCADE)
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.coupon_id} on order {self.order_id}"
