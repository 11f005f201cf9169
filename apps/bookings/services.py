"""Booking state machine.

Every status change of a booking goes through this module, together with
the matching write to the equipment availability flag:

    (create) -> awaiting_payment -> paid
                                 -> payment_failed
    admin override: any -> approved | rejected

Rows are inserted directly as awaiting_payment. ``paid`` is terminal
success: nothing moves a paid booking back to failure.
A failed booking can still be paid late, but only while no other active
booking overlaps its dates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.equipment.models import Equipment
from apps.equipment.services import (
    acquire_equipment_hold,
    is_available,
    lock_equipment,
    mark_equipment_unavailable,
    overlapping_bookings,
    release_equipment_hold,
)
from apps.payments import gateway
from apps.payments.gateway import PaymentGatewayError, PaymentOrder
from shared.application.uow import DjangoUnitOfWork
from shared.db import lock_queryset_if_possible
from shared.domain.exceptions import ConflictError, NotFoundError, UpstreamError, ValidationError
from shared.domain.value_objects import RentalPeriod, to_utc_datetime

from .domain.events import BookingPaid, BookingPaymentFailed
from .models import Booking

logger = logging.getLogger(__name__)


@dataclass
class BookingCheckout:
    """A freshly created booking and the options to open the payment checkout with."""

    booking: Booking
    payment: dict


def parse_rental_period(start_date, end_date) -> RentalPeriod:
    if not start_date or not end_date:
        raise ValidationError("start_date and end_date are required")
    try:
        start, end = to_utc_datetime(start_date), to_utc_datetime(end_date)
    except ValueError:
        raise ValidationError("Invalid date format. Use ISO-8601, e.g. 2024-01-31")
    if start > end:
        raise ValidationError("start_date must not be after end_date")
    return RentalPeriod(start, end)


def quote_price(daily_rate: int, period: RentalPeriod) -> int:
    """Flat daily rate times the inclusive number of days."""
    return daily_rate * period.days


def _lock_booking(booking_id: int) -> Booking:
    try:
        return lock_queryset_if_possible(Booking.objects.filter(pk=booking_id)).get()
    except Booking.DoesNotExist:
        raise NotFoundError(f"Booking {booking_id} not found")


def _competing_booking(booking: Booking) -> Booking | None:
    """Another awaiting-payment or paid booking of the same equipment overlapping this one."""
    return (
        overlapping_bookings(booking.equipment_id, booking.start_date, booking.end_date)
        .filter(status__in=Booking.ACTIVE_STATUSES)
        .exclude(pk=booking.pk)
        .first()
    )


def _reassert_hold(booking: Booking) -> None:
    """Hold the equipment for ``booking`` again, unless another booking took the dates meanwhile."""

    with transaction.atomic():
        lock_equipment(booking.equipment_id)
        competitor = _competing_booking(booking)
        if competitor is not None:
            raise ConflictError("Equipment is not available for the selected dates")
        mark_equipment_unavailable(booking.equipment_id)


def create_booking(renter, equipment_id: int, start_date, end_date) -> BookingCheckout:
    """
    Book equipment and open a payment order for it

    The availability re-check, the insert and the availability flag flip
    run in one transaction; losing any of them leaves no booking behind.
    A gateway failure afterwards is compensated: the booking is kept as
    payment_failed and the equipment is released.

    Raises:
        ValidationError: Missing or malformed dates
        NotFoundError: Unknown equipment
        ConflictError: Equipment is not available for the range
        UpstreamError: The payment order could not be created
    """
    period = parse_rental_period(start_date, end_date)

    if not Equipment.objects.filter(pk=equipment_id).exists():
        raise NotFoundError(f"Equipment {equipment_id} not found")

    if not is_available(equipment_id, period.start, period.end):
        raise ConflictError("Equipment is not available for the selected dates")

    with transaction.atomic():
        equipment = lock_equipment(equipment_id)
        if not is_available(equipment.pk, period.start, period.end):
            raise ConflictError("Equipment is not available for the selected dates")

        booking = Booking.objects.create(
            equipment=equipment,
            renter=renter,
            start_date=period.start,
            end_date=period.end,
            total_price=quote_price(equipment.daily_rate, period),
            status=Booking.Status.AWAITING_PAYMENT,
        )

        if not acquire_equipment_hold(equipment.pk):
            raise ConflictError("Equipment was booked by someone else")

    logger.info(
        f"Booking {booking.pk} created for equipment {equipment.pk} ({period}), "
        f"{period.days} days, total {booking.total_price}"
    )

    try:
        order = gateway.create_order(
            amount=booking.total_price,
            receipt=f"booking_{booking.pk}",
            notes={"booking_id": booking.pk, "equipment_name": equipment.name},
        )
    except PaymentGatewayError as exc:
        logger.warning(f"Payment order for booking {booking.pk} failed, releasing equipment: {exc}")
        fail_booking(booking.pk, reason="payment order creation failed")
        raise UpstreamError("Failed to create payment order")

    booking.payment_order_id = order.id
    booking.save(update_fields=["payment_order_id"])

    return BookingCheckout(booking=booking, payment=gateway.checkout_config(order, equipment.name, renter))


def payment_checkout(booking: Booking) -> dict:
    """Checkout options for a booking that is still waiting for its payment."""

    if booking.status != Booking.Status.AWAITING_PAYMENT:
        raise ConflictError(f"Booking is {booking.status}, not awaiting payment")

    _reassert_hold(booking)

    if booking.payment_order_id:
        order = PaymentOrder(
            id=booking.payment_order_id,
            amount=gateway.to_minor_units(booking.total_price),
            currency=getattr(settings, "PAYMENT_CURRENCY", "INR"),
            receipt=f"booking_{booking.pk}",
        )
    else:
        try:
            order = gateway.create_order(
                amount=booking.total_price,
                receipt=f"booking_{booking.pk}",
                notes={"booking_id": booking.pk, "equipment_name": booking.equipment.name},
            )
        except PaymentGatewayError as exc:
            logger.warning(f"Payment order for booking {booking.pk} failed: {exc}")
            raise UpstreamError("Failed to create payment order")
        booking.payment_order_id = order.id
        booking.save(update_fields=["payment_order_id"])

    return gateway.checkout_config(order, booking.equipment.name, booking.renter)


def confirm_booking(booking_id: int, payment_id: str, order_id: str | None = None) -> tuple[Booking, bool]:
    """
    Mark a booking paid

    Idempotent: a booking that is already paid is returned unchanged with
    ``applied=False`` and no side effects run. The BookingPaid event (and
    with it the receipt) is published only after the commit.

    Raises:
        NotFoundError: Unknown booking
        ValidationError: ``order_id`` does not belong to the booking
        ConflictError: Another booking holds the dates (late payment after a failure)
    """
    with DjangoUnitOfWork() as uow:
        booking = _lock_booking(booking_id)

        if booking.status == Booking.Status.PAID:
            logger.info(f"Booking {booking.pk} already paid, confirmation for {payment_id} ignored")
            return booking, False

        if order_id is not None and order_id != booking.payment_order_id:
            raise ValidationError("Payment order does not belong to this booking")

        lock_equipment(booking.equipment_id)
        competitor = _competing_booking(booking)
        if competitor is not None:
            logger.error(
                f"Payment {payment_id} for booking {booking.pk} ({booking.status}) arrived after booking "
                f"{competitor.pk} took the dates, refund required"
            )
            raise ConflictError("Equipment was booked by someone else")

        if booking.status != Booking.Status.AWAITING_PAYMENT:
            logger.warning(f"Booking {booking.pk} confirmed from status {booking.status}")

        booking.set_status(Booking.Status.PAID)
        booking.payment_id = payment_id
        booking.save(update_fields=["status", "payment_id", "last_status_update"])
        mark_equipment_unavailable(booking.equipment_id)

        uow.add_event(
            BookingPaid(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                equipment_id=booking.equipment_id,
                renter_id=booking.renter_id,
                payment_id=payment_id,
            )
        )

    logger.info(f"Booking {booking.pk} paid with payment {payment_id}")
    return booking, True


def fail_booking(booking_id: int, reason: str = "") -> tuple[Booking, bool]:
    """
    Mark a booking's payment failed and give the equipment back

    A paid booking is left untouched. Failing an already failed booking
    only re-asserts the release.
    """
    with DjangoUnitOfWork() as uow:
        booking = _lock_booking(booking_id)

        if booking.status == Booking.Status.PAID:
            logger.warning(f"Ignoring payment failure for paid booking {booking.pk}: {reason}")
            return booking, False

        applied = booking.status != Booking.Status.PAYMENT_FAILED
        if applied:
            booking.set_status(Booking.Status.PAYMENT_FAILED)
            booking.save(update_fields=["status", "last_status_update"])
            uow.add_event(
                BookingPaymentFailed(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    equipment_id=booking.equipment_id,
                    reason=reason,
                )
            )

        release_equipment_hold(booking.equipment_id, exclude_booking_id=booking.pk)

    if applied:
        logger.info(f"Booking {booking.pk} payment failed: {reason or 'no reason given'}")
    return booking, applied


def abandon_hold(booking: Booking) -> None:
    """Release the equipment after a rejected payment attempt, keeping the booking status."""

    with transaction.atomic():
        released = release_equipment_hold(booking.equipment_id, exclude_booking_id=booking.pk)
    logger.warning(f"Hold of booking {booking.pk} abandoned, equipment released: {released}")


def update_booking_status(booking_id: int, status: str) -> Booking:
    """Administrative status override. Equipment availability is not touched."""

    if status not in Booking.Status.values:
        raise ValidationError(f"Invalid status: {status}")

    with transaction.atomic():
        booking = _lock_booking(booking_id)
        previous = booking.status
        booking.set_status(status)
        booking.save(update_fields=["status", "last_status_update"])

    logger.info(f"Booking {booking.pk} status changed {previous} -> {status}")
    return booking


def expire_stale_holds(now: datetime | None = None) -> int:
    """Fail bookings that have been waiting for payment longer than the hold timeout."""

    now = now or timezone.now()
    timeout = timedelta(minutes=getattr(settings, "BOOKING_HOLD_TIMEOUT_MINUTES", 30))
    stale_ids = list(
        Booking.objects.filter(
            status=Booking.Status.AWAITING_PAYMENT,
            last_status_update__lte=now - timeout,
        ).values_list("pk", flat=True)
    )

    expired = 0
    for booking_id in stale_ids:
        _, applied = fail_booking(booking_id, reason="payment hold expired")
        if applied:
            expired += 1
    return expired
