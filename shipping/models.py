from decimal import Decimal

from common.models import TimeStampedModel
from django.db import models


class ShippingMethod(TimeStampedModel):
    """Carrier option priced as ``base_fee + weight_kg * fee_per_kg``."""

    code = models.SlugField(max_length=40, unique=True)
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    base_fee = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    fee_per_kg = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    min_days = models.PositiveSmallIntegerField(default=1)
    max_days = models.PositiveSmallIntegerField(default=3)
    provinces = models.JSONField(default=list, blank=True, help_text="Supported provinces; empty means all")
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().lower()
        super().save(*args, **kwargs)

    def serves(self, province: str | None) -> bool:
        if not self.provinces:
            return True
        return bool(province) and province in self.provinces
