"""Inventory ledger models.

Stock itself lives on ``catalog.ProductVariant.stock_qty``; this app keeps the
append-only history of every change to it.
"""

from common.choices import MovementType
from django.db import models


class InventoryMovementQuerySet(models.QuerySet):
    def delete(self):
        raise TypeError("Inventory movements are append-only and cannot be deleted.")


class InventoryMovement(models.Model):
    TYPE_IN = MovementType.INBOUND
    TYPE_OUT = MovementType.OUTBOUND
    TYPE_CHOICES = MovementType.choices

    variant = models.ForeignKey("catalog.ProductVariant", related_name="movements", on_delete=models.PROTECT)
    movement_type = models.CharField(max_length=8, choices=TYPE_CHOICES)
    quantity = models.PositiveIntegerField()
    note = models.CharField(max_length=255, blank=True)
    reference = models.CharField(max_length=120, blank=True, db_index=True)
    order = models.ForeignKey(
        "orders.Order",
        null=True,
        blank=True,
        related_name="movements",
        on_delete=models.SET_NULL,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = InventoryMovementQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="movement_quantity_positive", condition=models.Q(quantity__gt=0)),
        ]
        indexes = [
            models.Index(fields=["variant", "created_at"], name="inventory_i_variant_5e0b9d_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.movement_type} {self.quantity} of variant {self.variant_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise TypeError("Inventory movements are append-only and cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise TypeError("Inventory movements are append-only and cannot be deleted.")

    @property
    def signed_quantity(self) -> int:
        return int(self.quantity) if self.movement_type == self.TYPE_IN else -int(self.quantity)
