"""Cart app models.

A cart belongs either to a registered user or to a guest session id; both are
unique when present, so each owner has at most one cart. ``updated_at`` moves
on every item mutation and drives the abandoned-cart reminder.
"""

from decimal import Decimal

from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class Cart(TimeStampedModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="cart",
        on_delete=models.CASCADE,
    )
    session_id = models.CharField(max_length=64, null=True, blank=True, unique=True)
    reminded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.CheckConstraint(
                name="cart_has_owner",
                condition=models.Q(user__isnull=False) | models.Q(session_id__isnull=False),
            ),
        ]
        indexes = [
            models.Index(fields=["updated_at"], name="cart_cart_updated_1f0c3b_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        owner = self.user_id or f"guest:{self.session_id}"
        return f"Cart#{self.id} ({owner})"

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


class CartItem(TimeStampedModel):
    """Line item in a shopping cart for a product variant."""

    cart = models.ForeignKey(Cart, related_name="items", on_delete=models.CASCADE)
    variant = models.ForeignKey("catalog.ProductVariant", related_name="cart_items", on_delete=models.CASCADE)
    quantity = models.PositiveIntegerField(default=1)
    # Display only; checkout always re-prices from the variant.
    unit_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["cart", "variant"], name="unique_variant_per_cart"),
            models.CheckConstraint(name="quantity_positive", condition=models.Q(quantity__gte=1)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"CartItem#{self.id} cart={self.cart_id} variant={self.variant_id} qty={self.quantity}"

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price or Decimal("0.00")) * Decimal(int(self.quantity))
