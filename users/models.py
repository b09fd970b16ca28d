"""Custom user model.

Accounts are managed by the auth service; this model only carries what the
storefront needs: a unique, normalised email for order mail and a contact phone
used as the default on checkout. Administrators are users with ``is_staff``.
"""

from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class User(AbstractUser):
    email = models.EmailField(unique=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[0-9]{8,15}$", message="Enter a valid phone number")],
        help_text="Default contact number used on checkout",
    )

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone:
            self.phone = self.phone.strip()
        super().save(*args, **kwargs)

    @property
    def is_administrator(self) -> bool:
        return bool(self.is_staff or self.is_superuser)
