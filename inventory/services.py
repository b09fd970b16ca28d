"""Inventory ledger services.

Every change to ``ProductVariant.stock_qty`` goes through this module and is
paired with an ``InventoryMovement`` row. Decrements are a single conditional
UPDATE (``stock_qty >= qty`` in the WHERE clause) so concurrent buyers can
never drive stock negative; callers run them inside their own transaction.
"""

import logging

from catalog.models import ProductVariant
from common.exceptions import DomainError, InsufficientStock, NotFound
from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from notifications.services import notify
from rest_framework.exceptions import ValidationError

from .models import InventoryMovement

logger = logging.getLogger("storefront.inventory")


def shortage_line(variant: ProductVariant, requested: int) -> dict:
    return {
        "variant_id": variant.id,
        "sku": variant.sku,
        "requested": int(requested),
        "available": int(variant.stock_qty),
    }


def _positive(qty) -> int:
    qty = int(qty)
    if qty <= 0:
        raise DomainError("Quantity must be positive.")
    return qty


def _get_variant(variant_id: int) -> ProductVariant:
    try:
        return ProductVariant.objects.get(pk=variant_id)
    except ProductVariant.DoesNotExist:
        raise NotFound(f"Variant {variant_id} not found.")


def reserve(variant_id: int, qty: int) -> ProductVariant:
    """Check that ``qty`` units are in stock without taking them."""

    qty = _positive(qty)
    variant = _get_variant(variant_id)
    if qty > variant.stock_qty:
        raise InsufficientStock([shortage_line(variant, qty)])
    return variant


def check_lines(lines) -> None:
    """Validate ``(variant, qty)`` pairs against current stock.

    Raises ``InsufficientStock`` naming every short line at once.
    """

    shortages = [shortage_line(variant, qty) for variant, qty in lines if int(qty) > variant.stock_qty]
    if shortages:
        raise InsufficientStock(shortages)


@transaction.atomic
def deduct(variant_id: int, qty: int, *, note: str = "", reference: str = "", order=None) -> InventoryMovement:
    qty = _positive(qty)
    updated = ProductVariant.objects.filter(pk=variant_id, stock_qty__gte=qty).update(
        stock_qty=F("stock_qty") - qty,
        updated_at=timezone.now(),
    )
    if not updated:
        variant = _get_variant(variant_id)
        raise InsufficientStock([shortage_line(variant, qty)])
    movement = InventoryMovement.objects.create(
        variant_id=variant_id,
        movement_type=InventoryMovement.TYPE_OUT,
        quantity=qty,
        note=note,
        reference=reference,
        order=order,
    )
    logger.info(
        "inventory.deducted",
        extra={"event": "inventory.deducted", "variant_id": variant_id, "quantity": qty, "reference": reference},
    )
    return movement


@transaction.atomic
def restore(variant_id: int, qty: int, *, reason: str = "", reference: str = "", order=None) -> InventoryMovement:
    qty = _positive(qty)
    updated = ProductVariant.objects.filter(pk=variant_id).update(
        stock_qty=F("stock_qty") + qty,
        updated_at=timezone.now(),
    )
    if not updated:
        raise NotFound(f"Variant {variant_id} not found.")
    movement = InventoryMovement.objects.create(
        variant_id=variant_id,
        movement_type=InventoryMovement.TYPE_IN,
        quantity=qty,
        note=reason,
        reference=reference,
        order=order,
    )
    logger.info(
        "inventory.restored",
        extra={"event": "inventory.restored", "variant_id": variant_id, "quantity": qty, "reference": reference},
    )
    return movement


@transaction.atomic
def adjust(variant_id: int, delta: int, *, note: str = "", reference: str = "") -> InventoryMovement:
    """Manual stock correction by an administrator."""

    delta = int(delta)
    if delta == 0:
        raise ValidationError({"delta": ["Adjustment must be non-zero."]})
    _get_variant(variant_id)
    note = note or "Manual adjustment"
    if delta > 0:
        return restore(variant_id, delta, reason=note, reference=reference)
    return deduct(variant_id, -delta, note=note, reference=reference)


def audit_low_stock(threshold: int | None = None) -> dict:
    """Broadcast a notification for each variant at or below ``threshold``."""

    if threshold is None:
        threshold = getattr(settings, "INVENTORY_LOW_STOCK_THRESHOLD", 10)
    threshold = int(threshold)
    counts = {"low": 0, "out": 0}
    variants = ProductVariant.objects.filter(stock_qty__lte=threshold).select_related("product").order_by("sku")
    for variant in variants.iterator():
        title = variant.product.title
        if variant.stock_qty <= 0:
            counts["out"] += 1
            notify(
                user_id=None,
                type="product_out_of_stock",
                title="Out of stock",
                message=f'"{title}" (SKU: {variant.sku}) is out of stock.',
                link="/admin/products",
            )
        else:
            counts["low"] += 1
            notify(
                user_id=None,
                type="product_low_stock",
                title="Low stock",
                message=f'"{title}" (SKU: {variant.sku}) has only {variant.stock_qty} left.',
                link="/admin/products",
            )
    logger.info(
        "inventory.low_stock_audit",
        extra={"event": "inventory.low_stock_audit", "threshold": threshold, **counts},
    )
    return counts
