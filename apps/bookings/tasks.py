"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import expire_stale_holds as expire_stale_holds_service

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="bookings.expire_stale_holds")
def expire_stale_holds() -> dict[str, int]:
    """
    Fail bookings whose payment never arrived.

    Bookings left in awaiting_payment longer than
    BOOKING_HOLD_TIMEOUT_MINUTES are moved to payment_failed and their
    equipment is released.

    Returns:
        dict: {"expired": number of failed bookings}
    """
    expired_count = expire_stale_holds_service()

    if expired_count > 0:
        logger.info(f"Expired {expired_count} stale payment holds")

    return {"expired": expired_count}
