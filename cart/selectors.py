"""Selectors for read-only cart queries."""

from decimal import Decimal

from django.db.models import F, Sum

from .models import Cart


def get_cart_for_user(*, user) -> Cart:
    """Return the user's cart, creating it if missing."""

    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def get_cart_for_session(*, session_id: str) -> Cart:
    """Return the guest session's cart, creating it if missing."""

    cart, _ = Cart.objects.get_or_create(session_id=session_id, user=None)
    return cart


def find_cart(*, user=None, session_id: str | None = None) -> Cart | None:
    """Look up an existing cart without creating one."""

    if user is not None and getattr(user, "is_authenticated", False):
        return Cart.objects.filter(user=user).first()
    if session_id:
        return Cart.objects.filter(session_id=session_id, user=None).first()
    return None


def cart_totals(*, cart: Cart):
    """Display totals from cached line prices; checkout re-prices."""

    agg = cart.items.aggregate(subtotal=Sum(F("unit_price") * F("quantity")))
    subtotal = agg.get("subtotal") or Decimal("0.00")
    return {
        "subtotal": subtotal,
        "item_count": sum(int(q) for q in cart.items.values_list("quantity", flat=True)),
    }
