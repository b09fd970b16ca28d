"""Read-only catalog queries shared by views and services."""

from typing import Optional

from django.db.models import Prefetch, Q, QuerySet

from .models import Product, ProductVariant


def list_published_products(*, category_slug: Optional[str] = None, search: Optional[str] = None) -> QuerySet[Product]:
    """Published products with their active variants prefetched."""

    qs = Product.objects.filter(status=Product.STATUS_PUBLISHED).prefetch_related(
        Prefetch("variants", queryset=ProductVariant.objects.filter(is_active=True).order_by("sku")),
        "categories",
    )
    if category_slug:
        qs = qs.filter(categories__slug=category_slug)
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search) | Q(variants__sku__iexact=search))
    return qs.order_by("title").distinct()


def get_published_product(slug: str) -> Optional[Product]:
    try:
        return list_published_products().get(slug=slug)
    except Product.DoesNotExist:
        return None


def variants_by_id(variant_ids) -> dict[int, ProductVariant]:
    """Map of id -> variant (with product) for the given ids; missing ids are absent."""

    qs = ProductVariant.objects.select_related("product").filter(id__in=list(variant_ids))
    return {v.id: v for v in qs}
