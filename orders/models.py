"""Orders app models.

An order is a snapshot taken at checkout: customer and shipping details are
copied in, monetary totals are computed once, and line items keep the SKU,
name and price the customer actually paid.
"""

from decimal import Decimal

from common.choices import OrderStatus, PaymentMethod
from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class Order(TimeStampedModel):
    STATUS_PENDING = OrderStatus.PENDING
    STATUS_CONFIRMED = OrderStatus.CONFIRMED
    STATUS_PAID = OrderStatus.PAID
    STATUS_PROCESSING = OrderStatus.PROCESSING
    STATUS_SHIPPED = OrderStatus.SHIPPED
    STATUS_COMPLETED = OrderStatus.COMPLETED
    STATUS_CANCELLED = OrderStatus.CANCELLED
    STATUS_REFUNDED = OrderStatus.REFUNDED
    STATUS_CHOICES = OrderStatus.choices

    # Assigned right after insert, once the id is known.
    order_code = models.CharField(max_length=32, unique=True, null=True, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="orders",
        on_delete=models.SET_NULL,
    )
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    customer_name = models.CharField(max_length=120)
    customer_phone = models.CharField(max_length=20)
    email = models.EmailField(blank=True)
    ship_address_line1 = models.CharField(max_length=255)
    ship_address_line2 = models.CharField(max_length=255, blank=True)
    ship_city = models.CharField(max_length=120)
    ship_province = models.CharField(max_length=120, blank=True)
    ship_postal_code = models.CharField(max_length=20, blank=True)
    ship_country = models.CharField(max_length=2, default="VN")
    note = models.TextField(blank=True)

    payment_method = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.COD)
    shipping_method = models.CharField(max_length=40, blank=True)
    coupon_code = models.CharField(max_length=32, blank=True)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    shipping_fee = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    grand_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="order_subtotal_non_negative", condition=models.Q(subtotal__gte=0)),
            models.CheckConstraint(name="order_discount_non_negative", condition=models.Q(discount_total__gte=0)),
            models.CheckConstraint(name="order_shipping_non_negative", condition=models.Q(shipping_fee__gte=0)),
            models.CheckConstraint(name="order_grand_total_non_negative", condition=models.Q(grand_total__gte=0)),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="orders_orde_status_6b1e2a_idx"),
            models.Index(fields=["user", "created_at"], name="orders_orde_user_id_0f5c9d_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.order_code or f"Order#{self.id}"


class OrderItem(models.Model):
    """Immutable line snapshot; removed only together with its order."""

    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey(
        "catalog.Product", null=True, blank=True, related_name="order_items", on_delete=models.SET_NULL
    )
    variant = models.ForeignKey(
        "catalog.ProductVariant", null=True, blank=True, related_name="order_items", on_delete=models.SET_NULL
    )
    sku = models.CharField(max_length=64)
    name = models.CharField(max_length=200)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    quantity = models.PositiveIntegerField()
    line_total = models.DecimalField(max_digits=14, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(name="orderitem_quantity_positive", condition=models.Q(quantity__gt=0)),
            models.CheckConstraint(name="orderitem_price_non_negative", condition=models.Q(unit_price__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.sku} x{self.quantity} ({self.order_id})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise TypeError("Order items are snapshots and cannot be modified.")
        super().save(*args, **kwargs)
