"""Order lifecycle services.

Checkout turns a cart (or a list of direct lines) into an order in one
transaction: items are snapshotted, stock is taken through the inventory
ledger, a pending payment is recorded and the coupon is redeemed. Status
changes go through ``change_status`` which locks the order row, enforces the
transition table and keeps stock consistent: entering ``cancelled`` or
``refunded`` gives the items back exactly once.
"""

import logging
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal
from functools import partial

from cart.selectors import find_cart
from catalog.models import Product
from catalog.selectors import variants_by_id
from common.choices import NotificationType, OrderStatus, PaymentMethod
from common.exceptions import Forbidden, InsufficientStock, NotFound
from common.money import ZERO, to_money
from coupons.services import discount_for_checkout, redeem
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from inventory.services import check_lines, deduct, restore
from notifications.services import notify, notify_on_commit
from payments.models import Payment
from rest_framework.exceptions import ValidationError
from shipping.services import quote

from .emails import send_order_confirmation_email
from .models import Order, OrderItem
from .transitions import CUSTOMER_CANCELLABLE, RESTOCK_STATES, assert_transition

logger = logging.getLogger("storefront.orders")

CUSTOMER_FIELDS = (
    "customer_name",
    "customer_phone",
    "email",
    "ship_address_line1",
    "ship_address_line2",
    "ship_city",
    "ship_province",
    "ship_postal_code",
    "ship_country",
    "note",
)


def generate_order_code(order: Order) -> str:
    """``ORD`` + local creation date + zero-padded id, e.g. ``ORD20240115000042``."""

    prefix = getattr(settings, "ORDER_CODE_PREFIX", "ORD")
    created = timezone.localtime(order.created_at) if order.created_at else timezone.localtime()
    return f"{prefix}{created:%Y%m%d}{order.id:06d}"


def _is_customer(user) -> bool:
    return user is not None and getattr(user, "is_authenticated", False)


def _collect_lines(*, user, session_id, lines):
    """Return ``(cart, [(variant_id, qty), ...])`` with duplicate variants summed."""

    cart = None
    if lines is None:
        cart = find_cart(user=user, session_id=session_id)
        pairs = [(item.variant_id, item.quantity) for item in cart.items.all()] if cart else []
    else:
        pairs = [(int(line["variant_id"]), int(line["quantity"])) for line in lines]

    merged = OrderedDict()
    for variant_id, qty in pairs:
        if qty <= 0:
            raise ValidationError({"items": ["Quantity must be positive."]})
        merged[variant_id] = merged.get(variant_id, 0) + qty
    if not merged:
        raise ValidationError({"items": ["Cart is empty."]})
    return cart, list(merged.items())


def _load_variants(pairs):
    ids = [variant_id for variant_id, _ in pairs]
    variants = variants_by_id(ids)
    missing = [variant_id for variant_id in ids if variant_id not in variants]
    if missing:
        raise NotFound(f"Variant {missing[0]} not found.")
    resolved = []
    for variant_id, qty in pairs:
        variant = variants[variant_id]
        if not variant.is_purchasable or variant.product.status != Product.STATUS_PUBLISHED:
            raise ValidationError({"items": [f"{variant.sku} is not available for sale."]})
        resolved.append((variant, qty))
    return resolved


def _shipping_fee(shipping_method: str, lines, province: str) -> Decimal:
    if not shipping_method:
        return to_money(getattr(settings, "ORDER_DEFAULT_SHIPPING_FEE", "30000"))
    weight = sum(variant.weight * qty for variant, qty in lines)
    return quote(shipping_method, weight, province or None)["fee"]


def _customer_snapshot(customer: dict, user) -> dict:
    """Checkout details, falling back to the account's email and phone."""

    snapshot = {field: (customer.get(field) or "") for field in CUSTOMER_FIELDS}
    snapshot["ship_country"] = snapshot["ship_country"] or "VN"
    if user is not None:
        snapshot["email"] = snapshot["email"] or user.email
        snapshot["customer_phone"] = snapshot["customer_phone"] or getattr(user, "phone", "")
    if not snapshot["customer_phone"]:
        raise ValidationError({"customer_phone": ["A contact phone number is required."]})
    return snapshot


def place_order(
    *,
    customer: dict,
    payment_method: str,
    user=None,
    session_id: str | None = None,
    lines=None,
    shipping_method: str = "",
    coupon_code: str = "",
    now=None,
) -> Order:
    """Create an order from the caller's cart, or from ``lines`` when given.

    ``lines`` is a list of ``{"variant_id", "quantity"}`` mappings. Raises
    ``InsufficientStock`` naming every short line; nothing is written then.
    """

    if _is_customer(user) and user.is_staff:
        raise Forbidden("Administrators cannot place orders.")
    if payment_method not in PaymentMethod.values:
        raise ValidationError({"payment_method": ["Unknown payment method."]})
    user = user if _is_customer(user) else None
    details = _customer_snapshot(customer, user)

    cart, pairs = _collect_lines(user=user, session_id=session_id, lines=lines)
    resolved = _load_variants(pairs)
    check_lines(resolved)

    subtotal = to_money(sum((to_money(variant.price) * qty for variant, qty in resolved), ZERO))
    shipping_fee = _shipping_fee(shipping_method, resolved, details["ship_province"])

    with transaction.atomic():
        coupon, discount = discount_for_checkout(coupon_code, subtotal, now=now)
        grand_total = to_money(subtotal - discount + shipping_fee)

        order = Order.objects.create(
            user=user,
            status=Order.STATUS_PENDING,
            payment_method=payment_method,
            shipping_method=(shipping_method or "").strip().lower(),
            coupon_code=coupon.code if coupon else "",
            subtotal=subtotal,
            discount_total=discount,
            shipping_fee=shipping_fee,
            grand_total=grand_total,
            **details,
        )
        order.order_code = generate_order_code(order)
        order.save(update_fields=["order_code"])

        shortages = []
        for variant, qty in resolved:
            price = to_money(variant.price)
            OrderItem.objects.create(
                order=order,
                product=variant.product,
                variant=variant,
                sku=variant.sku,
                name=variant.product.title,
                unit_price=price,
                quantity=qty,
                line_total=to_money(price * qty),
            )
            try:
                deduct(variant.id, qty, note=f"Order {order.order_code}", reference=order.order_code, order=order)
            except InsufficientStock as exc:
                shortages.extend(exc.lines)
        if shortages:
            raise InsufficientStock(shortages)

        Payment.objects.create(order=order, method=payment_method, amount=grand_total)
        if coupon is not None and discount > 0:
            redeem(coupon=coupon, order=order, discount_amount=discount)
        if cart is not None:
            cart.items.all().delete()
            cart.save(update_fields=["updated_at"])
        transaction.on_commit(partial(_announce_new_order, order.pk))

    logger.info(
        "order.placed",
        extra={
            "event": "order.placed",
            "order_code": order.order_code,
            "user_id": order.user_id,
            "grand_total": str(order.grand_total),
            "payment_method": payment_method,
        },
    )
    return order


def _announce_new_order(order_id: int) -> None:
    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        return
    if order.user_id:
        notify(
            user_id=order.user_id,
            type=NotificationType.ORDER_NEW,
            title="Order placed",
            message=f"Your order {order.order_code} has been placed.",
            link=f"/orders/{order.order_code}",
        )
    notify(
        user_id=None,
        type=NotificationType.ORDER_NEW,
        title="New order",
        message=f"Order {order.order_code} from {order.customer_name}: {order.grand_total}",
        link=f"/admin/orders/{order.id}",
    )
    if order.payment_method == PaymentMethod.COD:
        send_order_confirmation_email(order)


def _restock(order: Order, *, reason: str) -> None:
    for item in order.items.all():
        if item.variant_id is None:
            continue
        restore(item.variant_id, item.quantity, reason=reason, reference=order.order_code or "", order=order)


def _recommit(order: Order) -> None:
    shortages = []
    for item in order.items.all():
        if item.variant_id is None:
            continue
        try:
            deduct(
                item.variant_id,
                item.quantity,
                note=f"Order {order.order_code} reopened",
                reference=order.order_code or "",
                order=order,
            )
        except InsufficientStock as exc:
            shortages.extend(exc.lines)
    if shortages:
        raise InsufficientStock(shortages)


def _apply_status(order: Order, new_status: str, *, reason: str = "", actor=None) -> Order:
    """Move a locked order to ``new_status`` and reconcile stock and payments."""

    previous = order.status
    if new_status in RESTOCK_STATES and previous not in RESTOCK_STATES:
        _restock(order, reason=reason or f"Order {order.order_code} {new_status}")
    elif previous in RESTOCK_STATES and new_status not in RESTOCK_STATES:
        _recommit(order)

    order.status = new_status
    order.save(update_fields=["status", "updated_at"])
    if new_status == Order.STATUS_PAID:
        order.payments.mark_paid(transaction_ref="ADMIN")
    elif new_status == Order.STATUS_REFUNDED:
        order.payments.mark_refunded()
        order.payments.mark_failed()

    logger.info(
        "order_status_changed",
        extra={
            "event": "order_status_changed",
            "order_code": order.order_code,
            "from": previous,
            "to": new_status,
            "actor_id": getattr(actor, "id", None),
        },
    )
    return order


def _lock(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except Order.DoesNotExist:
        raise NotFound("Order not found.")


@transaction.atomic
def change_status(order_id, new_status: str, *, actor=None, enforce: bool | None = None) -> Order:
    """Administrative status update.

    With ``ORDER_ENFORCE_STATUS_TRANSITIONS`` off any known status is
    accepted; stock is still kept consistent in both directions.
    """

    if new_status not in OrderStatus.values:
        raise ValidationError({"status": [f"'{new_status}' is not a valid status."]})
    order = _lock(order_id)
    if order.status == new_status:
        return order
    if enforce is None:
        enforce = getattr(settings, "ORDER_ENFORCE_STATUS_TRANSITIONS", True)
    if enforce:
        assert_transition(order.status, new_status)

    _apply_status(order, new_status, actor=actor)
    if order.user_id:
        notify_on_commit(
            user_id=order.user_id,
            type=NotificationType.ORDER_STATUS,
            title="Order status updated",
            message=f"Your order {order.order_code} is now {order.get_status_display().lower()}.",
            link=f"/orders/{order.order_code}",
        )
    return order


@transaction.atomic
def cancel_order(*, user, order_id) -> Order:
    """Customer-initiated cancellation of their own, not yet paid order."""

    order = _lock(order_id)
    if not _is_customer(user) or order.user_id != user.id:
        raise NotFound("Order not found.")
    if order.status not in CUSTOMER_CANCELLABLE:
        raise ValidationError({"status": [f"Orders in status '{order.status}' cannot be cancelled."]})
    _apply_status(order, Order.STATUS_CANCELLED, reason=f"Order {order.order_code} cancelled by customer", actor=user)
    order.payments.mark_failed()
    notify_on_commit(
        user_id=None,
        type=NotificationType.ORDER_STATUS,
        title="Order cancelled",
        message=f"Customer cancelled order {order.order_code}.",
        link=f"/admin/orders/{order.id}",
    )
    return order


def cancel_expired_orders(now=None, timeout_minutes: int | None = None) -> list[str]:
    """Cancel prepaid orders still pending after the payment timeout.

    Cash-on-delivery orders are never expired. Each order is handled in its
    own transaction so one failure does not block the rest of the sweep.
    """

    now = now or timezone.now()
    if timeout_minutes is None:
        timeout_minutes = getattr(settings, "ORDER_PAYMENT_TIMEOUT_MINUTES", 5)
    methods = list(getattr(settings, "ORDER_PREPAID_PAYMENT_METHODS", ["bank_transfer", "momo"]))
    cutoff = now - timedelta(minutes=int(timeout_minutes))

    candidate_ids = list(
        Order.objects.filter(
            status=Order.STATUS_PENDING,
            created_at__lt=cutoff,
            payments__method__in=methods,
        )
        .values_list("pk", flat=True)
        .distinct()
    )

    cancelled = []
    for order_id in candidate_ids:
        try:
            with transaction.atomic():
                order = Order.objects.select_for_update().filter(pk=order_id, status=Order.STATUS_PENDING).first()
                if order is None:
                    continue
                _apply_status(order, Order.STATUS_CANCELLED, reason=f"Payment timeout for {order.order_code}")
                order.payments.mark_failed()
                if order.user_id:
                    notify_on_commit(
                        user_id=order.user_id,
                        type=NotificationType.ORDER,
                        title="Order cancelled",
                        message=f"Order {order.order_code} was cancelled because payment was not received in time.",
                        link="/orders",
                    )
        except Exception:
            logger.exception("order.expire_failed", extra={"event": "order.expire_failed", "order_id": order_id})
            continue
        cancelled.append(order.order_code)
        logger.info("order.expired", extra={"event": "order.expired", "order_code": order.order_code})
    return cancelled
