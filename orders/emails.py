"""Email utilities for the orders app.

Uses Django's email backend, with links composed from FRONTEND_URL.
"""

from django.conf import settings
from django.core.mail import send_mail


def _recipient(order) -> str | None:
    return order.email or getattr(order.user, "email", None) or None


def _order_url(order) -> str:
    frontend = getattr(settings, "FRONTEND_URL", "")
    if not frontend:
        return ""
    return f"{frontend.rstrip('/')}/orders/{order.order_code}"


def _send(order, subject: str, intro: str) -> None:
    to_email = _recipient(order)
    if not to_email:
        return

    lines = [
        intro,
        "",
        f"Order: {order.order_code}",
        f"Status: {order.get_status_display()}",
        f"Total: {order.grand_total}",
    ]
    url = _order_url(order)
    if url:
        lines += ["", f"You can view your order here: {url}"]

    send_mail(
        subject,
        "\n".join(lines) + "\n",
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [to_email],
        fail_silently=True,
    )


def send_order_confirmation_email(order) -> None:
    """Sent for cash-on-delivery orders once they are placed."""
    _send(order, f"We received your order {order.order_code}", "Thank you for your order! Pay on delivery.")


def send_order_paid_email(order) -> None:
    """Sent when a bank transfer for the order has been matched."""
    _send(order, f"Payment received for order {order.order_code}", "Thank you for your purchase!")
