from datetime import datetime, timedelta, timezone

import pytest

from apps.bookings.models import Booking
from apps.equipment.models import Equipment
from apps.equipment.services import (
    acquire_equipment_hold,
    is_available,
    overlapping_bookings,
    release_equipment_hold,
    resolve_availability_window,
    set_owner_availability,
)
from shared.domain.exceptions import AuthorizationError, ConflictError, ValidationError


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def make_booking(equipment, renter, start, end, status=Booking.Status.PAID):
    return Booking.objects.create(
        equipment=equipment,
        renter=renter,
        start_date=start,
        end_date=end,
        total_price=equipment.daily_rate,
        status=status,
    )


@pytest.mark.django_db
def test_overlap_cases(tractor, renter):
    make_booking(tractor, renter, utc(2024, 1, 10), utc(2024, 1, 12))

    # booking start inside the range
    assert not is_available(tractor.pk, utc(2024, 1, 8), utc(2024, 1, 10))
    # booking end inside the range
    assert not is_available(tractor.pk, utc(2024, 1, 12), utc(2024, 1, 15))
    # booking spans the range
    assert not is_available(tractor.pk, utc(2024, 1, 11), utc(2024, 1, 11))
    # range spans the booking
    assert not is_available(tractor.pk, utc(2024, 1, 1), utc(2024, 1, 31))

    assert is_available(tractor.pk, utc(2024, 1, 13), utc(2024, 1, 15))
    assert is_available(tractor.pk, utc(2024, 1, 5), utc(2024, 1, 9))


@pytest.mark.django_db
def test_overlap_uses_whole_days(tractor, renter):
    make_booking(tractor, renter, utc(2024, 1, 10, 6), utc(2024, 1, 12, 8))

    assert not is_available(tractor.pk, utc(2024, 1, 12, 20), utc(2024, 1, 14))
    assert not is_available(tractor.pk, "2024-01-09", "2024-01-10")


@pytest.mark.django_db
@pytest.mark.parametrize(
    "status",
    [Booking.Status.PENDING, Booking.Status.PAYMENT_FAILED, Booking.Status.APPROVED, Booking.Status.REJECTED],
)
def test_inactive_bookings_do_not_block(tractor, renter, status):
    make_booking(tractor, renter, utc(2024, 1, 10), utc(2024, 1, 12), status=status)

    assert is_available(tractor.pk, utc(2024, 1, 10), utc(2024, 1, 12))


@pytest.mark.django_db
def test_awaiting_payment_blocks(tractor, renter):
    make_booking(tractor, renter, utc(2024, 1, 10), utc(2024, 1, 12), status=Booking.Status.AWAITING_PAYMENT)

    assert not is_available(tractor.pk, utc(2024, 1, 10), utc(2024, 1, 12))


@pytest.mark.django_db
@pytest.mark.parametrize(
    "start, end",
    [("not-a-date", "2024-01-02"), ("2024-01-02", ""), (None, None), ("2024-01-05", "2024-01-01")],
)
def test_malformed_dates_fail_closed(tractor, start, end):
    assert is_available(tractor.pk, start, end) is False
    assert overlapping_bookings(tractor.pk, start, end).count() == 0


@pytest.mark.django_db
def test_unknown_or_unavailable_equipment(tractor):
    assert is_available(tractor.pk + 100, utc(2024, 1, 1), utc(2024, 1, 2)) is False

    Equipment.objects.filter(pk=tractor.pk).update(available=False)
    assert is_available(tractor.pk, utc(2024, 1, 1), utc(2024, 1, 2)) is False


@pytest.mark.django_db
def test_acquire_hold_is_compare_and_set(tractor):
    assert acquire_equipment_hold(tractor.pk) is True
    assert acquire_equipment_hold(tractor.pk) is False

    tractor.refresh_from_db()
    assert tractor.available is False


@pytest.mark.django_db
def test_release_keeps_hold_of_other_active_booking(tractor, renter):
    held = make_booking(tractor, renter, utc(2024, 1, 1), utc(2024, 1, 2), status=Booking.Status.AWAITING_PAYMENT)
    other = make_booking(tractor, renter, utc(2024, 2, 1), utc(2024, 2, 2), status=Booking.Status.PAID)
    Equipment.objects.filter(pk=tractor.pk).update(available=False)

    assert release_equipment_hold(tractor.pk, exclude_booking_id=held.pk) is False
    tractor.refresh_from_db()
    assert tractor.available is False

    other.status = Booking.Status.PAYMENT_FAILED
    other.save()
    assert release_equipment_hold(tractor.pk, exclude_booking_id=held.pk) is True
    tractor.refresh_from_db()
    assert tractor.available is True


@pytest.mark.django_db
def test_owner_toggle_refused_while_booked(tractor, owner, renter):
    make_booking(tractor, renter, utc(2024, 1, 1), utc(2024, 1, 2), status=Booking.Status.AWAITING_PAYMENT)

    with pytest.raises(ConflictError):
        set_owner_availability(tractor.pk, True, owner)


@pytest.mark.django_db
def test_owner_toggle(tractor, owner, renter):
    assert set_owner_availability(tractor.pk, False, owner).available is False

    with pytest.raises(AuthorizationError):
        set_owner_availability(tractor.pk, True, renter)


def test_availability_window_defaults():
    now = utc(2024, 6, 1, 12)

    start, end = resolve_availability_window(None, None, now=now)

    assert start == now
    assert end == now + timedelta(days=30)


def test_availability_window_clamps_past_start():
    now = utc(2024, 6, 1, 12)

    start, end = resolve_availability_window("2024-05-01", "2024-05-02", now=now)

    assert start == now
    assert end == now + timedelta(days=30)


def test_availability_window_rejects_garbage():
    with pytest.raises(ValidationError):
        resolve_availability_window("yesterday", None)
