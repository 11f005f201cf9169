"""Models for the review domain.

Defines the ``Review`` entity representing feedback and ratings
submitted by renters for equipment they have paid for. Each review
is tied to the booking that made the renter eligible, so one paid
booking yields at most one review.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxLengthValidator, MaxValueValidator, MinLengthValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

MIN_COMMENT_LENGTH = 10
MAX_COMMENT_LENGTH = 500


class Review(models.Model):
    """Represents a review left by a renter for a piece of equipment."""

    renter = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews'
    )
    equipment = models.ForeignKey(
        'equipment.Equipment', on_delete=models.CASCADE, related_name='reviews'
    )
    booking = models.OneToOneField(
        'bookings.Booking',
        on_delete=models.CASCADE,
        related_name='review',
        help_text=_('Paid booking that made this review possible')
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_('Rating from 1 to 5')
    )
    comment = models.TextField(
        validators=[MinLengthValidator(MIN_COMMENT_LENGTH), MaxLengthValidator(MAX_COMMENT_LENGTH)],
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['equipment', '-created_at'], name='review_equipment_created_idx'),
        ]

    def __str__(self) -> str:
        return f"Review by {self.renter_id} for equipment {self.equipment_id} (Rating: {self.rating})"
