"""Catalog app models.

Categories, products and their purchasable variants. A variant's
``stock_qty`` is the single source of truth for sellable inventory and is
only changed through ``inventory.services``.
"""

from common.choices import DraftPublished
from common.models import TimeStampedModel
from django.db import models


class Category(TimeStampedModel):
    """Hierarchical product categorization."""

    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True)
    description = models.TextField(blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        related_name="children",
        on_delete=models.SET_NULL,
    )
    is_active = models.BooleanField(default=True, db_index=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class Product(TimeStampedModel):
    STATUS_DRAFT = DraftPublished.DRAFT
    STATUS_PUBLISHED = DraftPublished.PUBLISHED
    STATUS_CHOICES = DraftPublished.choices

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    categories = models.ManyToManyField(Category, related_name="products", blank=True)

    class Meta:
        ordering = ["title"]

    def __str__(self) -> str:  # pragma: no cover
        return self.title


class ProductVariant(TimeStampedModel):
    """Purchasable SKU under a product (e.g., size/color)."""

    product = models.ForeignKey(Product, related_name="variants", on_delete=models.CASCADE)
    sku = models.CharField(max_length=64, unique=True)
    price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    stock_qty = models.IntegerField(default=0)
    weight = models.PositiveIntegerField(default=0, help_text="Shipping weight in grams")
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["sku"]
        constraints = [
            models.CheckConstraint(
                name="variant_price_non_negative",
                condition=models.Q(price__gte=0) | models.Q(price__isnull=True),
            ),
            models.CheckConstraint(name="variant_stock_non_negative", condition=models.Q(stock_qty__gte=0)),
        ]
        indexes = [
            models.Index(fields=["product", "is_active"], name="catalog_pro_product_2b1f4e_idx"),
            models.Index(fields=["stock_qty"], name="catalog_pro_stock_q_8c3d1a_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.product.title} [{self.sku}]"

    @property
    def is_purchasable(self) -> bool:
        return bool(self.is_active and self.price is not None)
