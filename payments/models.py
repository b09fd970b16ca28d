"""Payments app models.

A payment records how an order is (to be) paid. It belongs to an order but
does not own it; an order may carry several payments.
"""

from decimal import Decimal

from common.choices import PaymentMethod, PaymentStatus
from common.models import TimeStampedModel
from django.db import models
from django.utils import timezone


class PaymentQuerySet(models.QuerySet):
    def pending(self):
        return self.filter(status=PaymentStatus.PENDING)

    def mark_paid(self, *, transaction_ref: str = "", paid_at=None) -> int:
        """Flip pending payments to paid; returns the number updated."""
        return self.pending().update(
            status=PaymentStatus.PAID,
            transaction_ref=transaction_ref,
            paid_at=paid_at or timezone.now(),
            updated_at=timezone.now(),
        )

    def mark_failed(self) -> int:
        return self.pending().update(status=PaymentStatus.FAILED, updated_at=timezone.now())

    def mark_refunded(self) -> int:
        return self.filter(status=PaymentStatus.PAID).update(status=PaymentStatus.REFUNDED, updated_at=timezone.now())


class Payment(TimeStampedModel):
    METHOD_COD = PaymentMethod.COD
    METHOD_BANK_TRANSFER = PaymentMethod.BANK_TRANSFER
    METHOD_MOMO = PaymentMethod.MOMO

    STATUS_PENDING = PaymentStatus.PENDING
    STATUS_PAID = PaymentStatus.PAID
    STATUS_FAILED = PaymentStatus.FAILED
    STATUS_REFUNDED = PaymentStatus.REFUNDED

    order = models.ForeignKey("orders.Order", related_name="payments", on_delete=models.CASCADE)
    method = models.CharField(max_length=16, choices=PaymentMethod.choices, db_index=True)
    status = models.CharField(
        max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True
    )
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    transaction_ref = models.CharField(max_length=120, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    objects = PaymentQuerySet.as_manager()

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(name="payment_amount_non_negative", condition=models.Q(amount__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Payment#{self.id} {self.method} {self.status}"
