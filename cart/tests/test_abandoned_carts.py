from datetime import timedelta

import pytest
from cart.models import Cart
from cart.services import notify_abandoned_carts
from cart.tests.factories import CartFactory, CartItemFactory, GuestCartFactory
from django.core.management import call_command
from django.utils import timezone
from notifications.models import Notification


def _age(cart, hours, now):
    Cart.objects.filter(pk=cart.pk).update(updated_at=now - timedelta(hours=hours))


@pytest.mark.django_db
def test_only_registered_carts_with_items_inside_window_are_reminded():
    now = timezone.now()
    inside = CartItemFactory().cart
    too_recent = CartItemFactory().cart
    too_old = CartItemFactory().cart
    empty = CartFactory()
    guest = GuestCartFactory()
    CartItemFactory(cart=guest)
    _age(inside, 30, now)
    _age(too_recent, 23, now)
    _age(too_old, 49, now)
    _age(empty, 30, now)
    _age(guest, 30, now)

    sent = notify_abandoned_carts(now=now)

    assert sent == 1
    notification = Notification.objects.get()
    assert notification.user_id == inside.user_id
    assert notification.type == "system"
    assert notification.link == "/cart"


@pytest.mark.django_db
def test_window_bounds_are_strict():
    now = timezone.now()
    on_min = CartItemFactory().cart
    on_max = CartItemFactory().cart
    _age(on_min, 24, now)
    _age(on_max, 48, now)

    assert notify_abandoned_carts(now=now) == 0


@pytest.mark.django_db
def test_cart_is_reminded_once_per_inactivity_period():
    now = timezone.now()
    cart = CartItemFactory().cart
    _age(cart, 30, now)

    assert notify_abandoned_carts(now=now) == 1
    assert notify_abandoned_carts(now=now + timedelta(hours=2)) == 0
    cart.refresh_from_db()
    assert cart.reminded_at == now
    assert Notification.objects.count() == 1


@pytest.mark.django_db
def test_command_accepts_window_overrides():
    cart = CartItemFactory().cart
    _age(cart, 5, timezone.now())

    call_command("notify_abandoned_carts", "--min-hours", "2", "--max-hours", "10")

    assert Notification.objects.filter(user_id=cart.user_id).count() == 1
