"""Persisted in-app notifications.

A notification with no ``user`` is a broadcast addressed to administrators
(low stock, new orders); everything else belongs to a single customer.
"""

from common.choices import NotificationType
from django.conf import settings
from django.db import models


class Notification(models.Model):
    TYPE_CHOICES = NotificationType.choices

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="notifications",
        on_delete=models.CASCADE,
    )
    type = models.CharField(max_length=32, choices=TYPE_CHOICES, db_index=True)
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True)
    link = models.CharField(max_length=255, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notificatio_user_id_4a7c2e_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.type} -> {self.user_id or 'admins'}: {self.title}"

    @property
    def is_broadcast(self) -> bool:
        return self.user_id is None
