"""Review gate.

A renter may review a machine once per paid booking of it. Submitting a
review consumes the most recent unrated paid booking.
"""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore

from apps.bookings.models import Booking
from apps.equipment.models import Equipment
from shared.db import lock_queryset_if_possible
from shared.domain.exceptions import NotFoundError, ValidationError

from .models import MAX_COMMENT_LENGTH, MIN_COMMENT_LENGTH, Review

logger = logging.getLogger(__name__)


class ReviewNotAllowed(ValidationError):
    """No paid, unrated booking of this equipment"""

    code = 'review_not_allowed'


def _clean_rating(rating) -> int:
    if isinstance(rating, str) and rating.strip().isdigit():
        rating = int(rating.strip())
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be an integer from 1 to 5")
    return rating


def _clean_comment(comment) -> str:
    comment = comment.strip() if isinstance(comment, str) else ""
    if not MIN_COMMENT_LENGTH <= len(comment) <= MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment must be {MIN_COMMENT_LENGTH} to {MAX_COMMENT_LENGTH} characters")
    return comment


def submit_review(renter, equipment_id: int, rating, comment) -> Review:
    """
    Record a review and mark the booking that allowed it as rated

    Raises:
        ValidationError: Rating or comment out of range
        NotFoundError: Unknown equipment
        ReviewNotAllowed: No paid booking left to review
    """
    rating = _clean_rating(rating)
    comment = _clean_comment(comment)

    if not Equipment.objects.filter(pk=equipment_id).exists():
        raise NotFoundError(f"Equipment {equipment_id} not found")

    with transaction.atomic():
        eligible = lock_queryset_if_possible(
            Booking.objects.filter(
                renter=renter,
                equipment_id=equipment_id,
                status=Booking.Status.PAID,
                is_rated=False,
            ).order_by("-created_at", "-id")
        )
        booking = eligible.first()
        if booking is None:
            raise ReviewNotAllowed("You can only review equipment after a paid rental")

        review = Review.objects.create(
            renter=renter,
            equipment_id=equipment_id,
            booking=booking,
            rating=rating,
            comment=comment,
        )
        booking.is_rated = True
        booking.save(update_fields=["is_rated"])
        Equipment.objects.filter(pk=equipment_id).update(popularity=F("popularity") + 1)

    logger.info(f"Review {review.pk} for equipment {equipment_id} from booking {booking.pk}")
    return review
