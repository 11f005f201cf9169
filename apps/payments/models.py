"""Payment records for AgriRent."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Receipt(models.Model):
    """Receipt for a captured payment; one per gateway payment id."""

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="receipts",
    )
    payment_id = models.CharField(max_length=64, unique=True)
    amount = models.PositiveIntegerField(help_text=_("Amount in whole currency units."))
    currency = models.CharField(max_length=3, default="INR")
    method = models.CharField(max_length=32, blank=True)
    status = models.CharField(max_length=32)
    captured_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Receipt")
        verbose_name_plural = _("Receipts")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Receipt {self.payment_id} for booking {self.booking_id}"
