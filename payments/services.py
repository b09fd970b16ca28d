"""Bank transfer reconciliation.

The bank (or an aggregator in front of it) posts the transfers it received.
Each transfer's free-text description is scanned for order codes; the first
code naming an open order whose total is covered marks that order paid.
"""

import logging
from decimal import Decimal, InvalidOperation
from functools import partial

from common.choices import NotificationType
from common.money import to_money
from django.db import transaction
from django.utils import timezone
from notifications.services import notify_on_commit
from orders.emails import send_order_paid_email
from orders.models import Order

from .matchers import get_matcher
from .models import Payment

logger = logging.getLogger("storefront.payments")

PAYABLE_STATES = (Order.STATUS_PENDING, Order.STATUS_PROCESSING)


def extract_transactions(payload) -> list[dict]:
    """Accept ``{"data": [...]}``, a bare list or a single transaction object."""

    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        items = payload["data"]
    elif isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        items = [payload]
    else:
        items = []
    return [item for item in items if isinstance(item, dict)]


def _amount(tx: dict) -> Decimal | None:
    raw = tx.get("amount", tx.get("transferAmount"))
    if raw in (None, ""):
        return None
    try:
        return to_money(raw)
    except (InvalidOperation, ValueError):
        return None


def _reference(tx: dict) -> str:
    ref = tx.get("tid", tx.get("id"))
    return "" if ref is None else str(ref)[:120]


@transaction.atomic
def apply_transfer(code: str, amount: Decimal, *, transaction_ref: str = "", now=None) -> Order | None:
    """Mark the order ``code`` paid if it is open and ``amount`` covers it.

    Returns the order when it was updated, ``None`` when the transfer does not
    apply (unknown code, closed order, underpayment, already paid).
    """

    order = Order.objects.select_for_update().filter(order_code=code).first()
    if order is None or order.status not in PAYABLE_STATES:
        return None
    if amount < order.grand_total:
        logger.info(
            "payment.underpaid",
            extra={
                "event": "payment.underpaid",
                "order_code": code,
                "amount": str(amount),
                "grand_total": str(order.grand_total),
            },
        )
        return None

    payments = Payment.objects.filter(order=order)
    if payments.exists() and not payments.pending().exists():
        logger.info("payment.duplicate", extra={"event": "payment.duplicate", "order_code": code})
        return None

    now = now or timezone.now()
    if payments.pending().exists():
        payments.mark_paid(transaction_ref=transaction_ref, paid_at=now)
    else:
        Payment.objects.create(
            order=order,
            method=Payment.METHOD_BANK_TRANSFER,
            status=Payment.STATUS_PAID,
            amount=amount,
            transaction_ref=transaction_ref,
            paid_at=now,
        )

    previous = order.status
    if order.status == Order.STATUS_PENDING:
        order.status = Order.STATUS_PROCESSING
        order.save(update_fields=["status", "updated_at"])

    notify_on_commit(
        user_id=None,
        type=NotificationType.ORDER_STATUS,
        title="Payment received",
        message=f"Bank transfer of {amount} received for order {order.order_code}.",
        link=f"/admin/orders/{order.id}",
    )
    if order.user_id:
        notify_on_commit(
            user_id=order.user_id,
            type=NotificationType.ORDER_STATUS,
            title="Payment received",
            message=f"We received your payment for order {order.order_code}.",
            link=f"/orders/{order.order_code}",
        )
    transaction.on_commit(partial(send_order_paid_email, order))

    logger.info(
        "payment.received",
        extra={
            "event": "payment.received",
            "order_code": order.order_code,
            "amount": str(amount),
            "transaction_ref": transaction_ref,
            "from": previous,
            "to": order.status,
        },
    )
    return order


def process_bank_transactions(payload, *, now=None) -> list[str]:
    """Reconcile every transfer in ``payload``; returns the codes marked paid."""

    matcher = get_matcher()
    processed = []
    for tx in extract_transactions(payload):
        text = str(tx.get("description") or tx.get("content") or "")
        amount = _amount(tx)
        if not text or amount is None:
            logger.info("payment.skipped", extra={"event": "payment.skipped", "reason": "incomplete"})
            continue
        for code in matcher.match(text):
            order = apply_transfer(code, amount, transaction_ref=_reference(tx), now=now)
            if order is not None:
                processed.append(order.order_code)
                break
    return processed
