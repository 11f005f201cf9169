"""Event handlers of the payments context."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingPaid, BookingPaymentFailed
from shared.domain.exceptions import DomainError

from .services import generate_receipt

logger = logging.getLogger(__name__)


def generate_receipt_on_booking_paid(event: BookingPaid) -> None:
    try:
        generate_receipt(event.booking_id, event.payment_id)
    except DomainError as exc:
        # The receipt endpoint retries on demand
        logger.warning(f"Receipt for booking {event.booking_id} deferred: {exc.message}")


def log_booking_payment_failed(event: BookingPaymentFailed) -> None:
    logger.warning(
        f"Payment for booking {event.booking_id} failed, equipment {event.equipment_id} released: "
        f"{event.reason or 'no reason given'}"
    )
