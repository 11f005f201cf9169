"""Availability ledger for equipment.

Answers whether a machine can be booked for a day range and owns every write
to ``Equipment.available``. The flag is a cache of the booking rows: it is
false exactly while some booking of the machine is awaiting payment or paid.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from shared.db import lock_queryset_if_possible
from shared.domain.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from shared.domain.value_objects import RentalPeriod, to_utc_datetime

from .models import Equipment

logger = logging.getLogger(__name__)

DEFAULT_AVAILABILITY_WINDOW = timedelta(days=30)


def _normalized_period(start_date, end_date) -> RentalPeriod | None:
    try:
        return RentalPeriod.from_values(start_date, end_date).normalized()
    except (TypeError, ValueError):
        return None


def lock_equipment(equipment_id: int) -> Equipment:
    """Fetch the equipment row, locked for the rest of the current transaction."""

    try:
        return lock_queryset_if_possible(Equipment.objects.filter(pk=equipment_id)).get()
    except Equipment.DoesNotExist:
        raise NotFoundError(f"Equipment {equipment_id} not found")


def overlapping_bookings(equipment_id: int, start_date, end_date):
    """Bookings of the equipment that touch any day of ``[start_date, end_date]``.

    Both bounds are widened to whole UTC days. A booking overlaps when it
    starts inside the range, ends inside it, or spans it entirely. Malformed
    bounds yield an empty queryset.
    """

    from apps.bookings.models import Booking  # Local import to prevent circular dependency

    period = _normalized_period(start_date, end_date)
    if period is None:
        return Booking.objects.none()

    return Booking.objects.filter(equipment_id=equipment_id).filter(
        Q(start_date__gte=period.start, start_date__lte=period.end)
        | Q(end_date__gte=period.start, end_date__lte=period.end)
        | Q(start_date__lte=period.start, end_date__gte=period.end)
    )


def is_available(equipment_id: int, start_date, end_date) -> bool:
    """Whether the equipment may be booked for the range.

    Fails closed: unknown equipment, a cleared ``available`` flag or
    malformed dates all answer False.
    """

    from apps.bookings.models import Booking

    if _normalized_period(start_date, end_date) is None:
        logger.warning(f"Availability check for equipment {equipment_id} with malformed dates {start_date!r}..{end_date!r}")
        return False

    flag = Equipment.objects.filter(pk=equipment_id).values_list("available", flat=True).first()
    if not flag:
        return False

    return not overlapping_bookings(equipment_id, start_date, end_date).filter(
        status__in=Booking.ACTIVE_STATUSES,
    ).exists()


def has_active_booking(equipment_id: int, *, exclude_booking_id: int | None = None) -> bool:
    from apps.bookings.models import Booking

    bookings = Booking.objects.filter(equipment_id=equipment_id, status__in=Booking.ACTIVE_STATUSES)
    if exclude_booking_id is not None:
        bookings = bookings.exclude(pk=exclude_booking_id)
    return bookings.exists()


def acquire_equipment_hold(equipment_id: int) -> bool:
    """Flip ``available`` to False only if it is currently True.

    Returns whether this caller won the flip.
    """

    won = Equipment.objects.filter(pk=equipment_id, available=True).update(available=False) == 1
    if won:
        logger.info(f"Equipment {equipment_id} held")
    return won


def release_equipment_hold(equipment_id: int, exclude_booking_id: int | None = None) -> bool:
    """Set ``available`` back to True unless another booking still holds it."""

    if has_active_booking(equipment_id, exclude_booking_id=exclude_booking_id):
        logger.info(f"Equipment {equipment_id} stays held by another active booking")
        return False

    Equipment.objects.filter(pk=equipment_id).update(available=True)
    logger.info(f"Equipment {equipment_id} released")
    return True


def mark_equipment_unavailable(equipment_id: int) -> None:
    Equipment.objects.filter(pk=equipment_id).update(available=False)


@transaction.atomic
def set_owner_availability(equipment_id: int, available: bool, actor) -> Equipment:
    """Owner toggle for taking a machine off the market or back on.

    Refused while a booking awaits payment or is paid, since the flag then
    belongs to the booking flow.
    """

    equipment = lock_equipment(equipment_id)
    if equipment.owner_id != actor.pk and not getattr(actor, "is_admin", False):
        raise AuthorizationError("Only the owner can change equipment availability")

    if has_active_booking(equipment.pk):
        raise ConflictError("Equipment has an active booking")

    equipment.available = available
    equipment.save(update_fields=["available", "updated_at"])
    logger.info(f"Equipment {equipment.pk} availability set to {available} by user {actor.pk}")
    return equipment


def resolve_availability_window(
    start_param: str | None,
    end_param: str | None,
    *,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Turn availability query parameters into a concrete window.

    Missing bounds default to now and now + 30 days. A start in the past is
    clamped to now, and an end not after the start becomes start + 30 days.
    """

    now = now or timezone.now()
    try:
        start = to_utc_datetime(start_param) if start_param else now
        end = to_utc_datetime(end_param) if end_param else start + DEFAULT_AVAILABILITY_WINDOW
    except ValueError:
        raise ValidationError("Invalid date format. Use ISO-8601, e.g. 2024-01-31")

    if start < now:
        start = now
    if end <= start:
        end = start + DEFAULT_AVAILABILITY_WINDOW
    return start, end
