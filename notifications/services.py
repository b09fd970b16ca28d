"""Notification dispatch.

``create_notification`` stores a row and emits ``notification_created``.
``notify`` is the best-effort wrapper used by the other apps: a failure to
notify is logged and never propagates into the business operation.
``notify_on_commit`` defers ``notify`` until the surrounding transaction
commits, so nothing is announced for work that rolls back.
"""

import logging
from functools import partial

from django.db import transaction
from django.db.models import Q

from .models import Notification
from .signals import notification_created

logger = logging.getLogger("storefront.notifications")


def create_notification(*, user_id, type: str, title: str, message: str = "", link: str = "") -> Notification:
    notification = Notification.objects.create(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        link=link or "",
    )
    notification_created.send(sender=Notification, notification=notification)
    logger.info(
        "notification.created",
        extra={
            "event": "notification.created",
            "notification_id": notification.id,
            "user_id": user_id,
            "type": type,
        },
    )
    return notification


def notify(*, user_id, type: str, title: str, message: str = "", link: str = "") -> Notification | None:
    try:
        return create_notification(user_id=user_id, type=type, title=title, message=message, link=link)
    except Exception:
        logger.exception(
            "notification.failed",
            extra={"event": "notification.failed", "user_id": user_id, "type": type},
        )
        return None


def notify_on_commit(*, user_id, type: str, title: str, message: str = "", link: str = "") -> None:
    transaction.on_commit(partial(notify, user_id=user_id, type=type, title=title, message=message, link=link))


def visible_to(user):
    """Notifications a user may read: their own, plus broadcasts for staff."""

    if getattr(user, "is_staff", False):
        return Notification.objects.filter(Q(user=user) | Q(user__isnull=True))
    return Notification.objects.filter(user=user)


def mark_read(*, user, notification_ids=None) -> int:
    """Mark the given (or all) visible unread notifications as read."""

    qs = visible_to(user).filter(is_read=False)
    if notification_ids:
        qs = qs.filter(id__in=notification_ids)
    return qs.update(is_read=True)
