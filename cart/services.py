"""Cart services.

Mutations apply a soft stock check through ``inventory.services.reserve``: a
line can never ask for more than the variant holds at mutation time. Nothing
is decremented here; checkout re-validates and takes stock atomically.
"""

import logging
from datetime import timedelta

from catalog.models import Product, ProductVariant
from common.exceptions import NotFound
from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone
from inventory.services import reserve
from notifications.services import notify
from rest_framework.exceptions import ValidationError

from .models import Cart, CartItem
from .selectors import get_cart_for_session, get_cart_for_user

logger = logging.getLogger("storefront.cart")


def _owner_extra(cart: Cart) -> dict:
    return {"cart_id": cart.id, "user_id": cart.user_id, "guest": cart.is_guest}


def _touch(cart: Cart) -> None:
    cart.save(update_fields=["updated_at"])


def _sellable_variant(variant_id: int) -> ProductVariant:
    try:
        variant = ProductVariant.objects.select_related("product").get(pk=variant_id)
    except ProductVariant.DoesNotExist:
        raise NotFound(f"Variant {variant_id} not found.")
    if not variant.is_purchasable or variant.product.status != Product.STATUS_PUBLISHED:
        raise ValidationError({"variant_id": ["This product is not available for sale."]})
    return variant


@transaction.atomic
def add_item(*, cart: Cart, variant_id: int, quantity: int) -> CartItem:
    """Add ``quantity`` of a variant, stacking onto an existing line."""

    if quantity <= 0:
        raise ValidationError({"quantity": ["Quantity must be positive."]})
    variant = _sellable_variant(variant_id)
    item = CartItem.objects.select_for_update().filter(cart=cart, variant=variant).first()
    new_qty = quantity + (item.quantity if item else 0)
    reserve(variant.id, new_qty)

    if item:
        item.quantity = new_qty
        item.unit_price = variant.price
        item.save(update_fields=["quantity", "unit_price", "updated_at"])
        event = "cart.item_updated"
    else:
        item = CartItem.objects.create(cart=cart, variant=variant, quantity=new_qty, unit_price=variant.price)
        event = "cart.item_added"
    _touch(cart)
    logger.info(event, extra={"event": event, "variant_id": variant.id, "quantity": new_qty, **_owner_extra(cart)})
    return item


@transaction.atomic
def update_item_quantity(*, cart: Cart, item_id: int, quantity: int) -> CartItem:
    """Set a line's quantity outright."""

    if quantity <= 0:
        raise ValidationError({"quantity": ["Quantity must be positive."]})
    try:
        item = CartItem.objects.select_for_update().select_related("variant").get(id=item_id, cart=cart)
    except CartItem.DoesNotExist:
        raise NotFound("Cart item not found.")
    reserve(item.variant_id, quantity)
    item.quantity = quantity
    item.unit_price = item.variant.price or item.unit_price
    item.save(update_fields=["quantity", "unit_price", "updated_at"])
    _touch(cart)
    logger.info(
        "cart.item_updated",
        extra={"event": "cart.item_updated", "variant_id": item.variant_id, "quantity": quantity, **_owner_extra(cart)},
    )
    return item


@transaction.atomic
def remove_item(*, cart: Cart, item_id: int) -> None:
    deleted, _ = CartItem.objects.filter(id=item_id, cart=cart).delete()
    if not deleted:
        raise NotFound("Cart item not found.")
    _touch(cart)
    logger.info("cart.item_removed", extra={"event": "cart.item_removed", "item_id": item_id, **_owner_extra(cart)})


@transaction.atomic
def clear_cart(*, cart: Cart) -> None:
    CartItem.objects.filter(cart=cart).delete()
    _touch(cart)
    logger.info("cart.cleared", extra={"event": "cart.cleared", **_owner_extra(cart)})


@transaction.atomic
def merge_guest_cart(*, session_id: str, user) -> Cart:
    """Fold a guest session cart into the user's cart after sign-in.

    Quantities for the same variant are added together and capped at the
    variant's current stock; the guest cart is deleted afterwards.
    """

    dest = get_cart_for_user(user=user)
    src = Cart.objects.filter(session_id=session_id, user=None).first()
    if src is None or src.id == dest.id:
        return dest

    moved = 0
    for s_item in src.items.select_related("variant"):
        d_item = CartItem.objects.select_for_update().filter(cart=dest, variant_id=s_item.variant_id).first()
        qty = s_item.quantity + (d_item.quantity if d_item else 0)
        qty = min(qty, max(int(s_item.variant.stock_qty), 0))
        if qty <= 0:
            continue
        if d_item:
            d_item.quantity = qty
            d_item.save(update_fields=["quantity", "updated_at"])
        else:
            CartItem.objects.create(
                cart=dest,
                variant_id=s_item.variant_id,
                quantity=qty,
                unit_price=s_item.variant.price or s_item.unit_price,
            )
        moved += 1
    src_id = src.id
    src.delete()
    _touch(dest)
    logger.info(
        "cart.merged",
        extra={
            "event": "cart.merged",
            "src_cart_id": src_id,
            "dest_cart_id": dest.id,
            "user_id": getattr(user, "id", None),
            "lines": moved,
        },
    )
    return dest


def notify_abandoned_carts(now=None, min_hours: int | None = None, max_hours: int | None = None) -> int:
    """Remind registered users about carts left untouched for a day or two.

    Picks carts with items whose ``updated_at`` is strictly between
    ``now - max_hours`` and ``now - min_hours``. A cart is reminded once per
    period of inactivity.
    """

    now = now or timezone.now()
    if min_hours is None:
        min_hours = getattr(settings, "CART_ABANDON_MIN_HOURS", 24)
    if max_hours is None:
        max_hours = getattr(settings, "CART_ABANDON_MAX_HOURS", 48)
    newest = now - timedelta(hours=int(min_hours))
    oldest = now - timedelta(hours=int(max_hours))

    carts = (
        Cart.objects.filter(user__isnull=False, items__isnull=False, updated_at__lt=newest, updated_at__gt=oldest)
        .filter(Q(reminded_at__isnull=True) | Q(reminded_at__lt=F("updated_at")))
        .distinct()
    )
    sent = 0
    for cart in carts.iterator():
        notification = notify(
            user_id=cart.user_id,
            type="system",
            title="You left something in your cart",
            message="The items in your cart are waiting for you. Complete your order before they sell out!",
            link="/cart",
        )
        if notification is None:
            continue
        # queryset update keeps updated_at untouched
        Cart.objects.filter(pk=cart.pk).update(reminded_at=now)
        sent += 1
    logger.info(
        "cart.abandoned_reminders_sent",
        extra={"event": "cart.abandoned_reminders_sent", "count": sent, "min_hours": min_hours, "max_hours": max_hours},
    )
    return sent


def resolve_cart(*, user=None, session_id: str | None = None) -> Cart:
    """Cart for the caller: the user's when signed in, else the guest session's."""

    if user is not None and getattr(user, "is_authenticated", False):
        return get_cart_for_user(user=user)
    if not session_id:
        raise ValidationError({"session_id": ["Sign in or send an X-Session-Id header."]})
    return get_cart_for_session(session_id=session_id)
