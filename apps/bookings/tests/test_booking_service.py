from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import transaction
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.services import (
    abandon_hold,
    confirm_booking,
    create_booking,
    expire_stale_holds,
    fail_booking,
    payment_checkout,
    update_booking_status,
)
from apps.bookings.tasks import expire_stale_holds as expire_stale_holds_task
from apps.equipment.services import is_available
from apps.payments import gateway
from apps.payments.gateway import PaymentGatewayError
from apps.payments.models import Receipt
from shared.domain.exceptions import ConflictError, NotFoundError, UpstreamError, ValidationError


@pytest.mark.django_db
def test_create_prices_inclusive_days_and_holds_equipment(renter, tractor):
    checkout = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03")

    booking = checkout.booking
    assert booking.total_price == 1500
    assert booking.status == Booking.Status.AWAITING_PAYMENT
    assert booking.payment_order_id
    tractor.refresh_from_db()
    assert tractor.available is False

    assert checkout.payment["id"] == booking.payment_order_id
    assert checkout.payment["amount"] == 150000
    assert checkout.payment["currency"] == "INR"
    assert checkout.payment["description"] == "Booking for Mahindra 575 DI"
    assert checkout.payment["prefill"]["email"] == renter.email


@pytest.mark.django_db
def test_order_notes_reference_booking(renter, tractor):
    with patch("apps.payments.gateway.create_order", wraps=gateway.create_order) as create_order:
        checkout = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-01")

    kwargs = create_order.call_args.kwargs
    assert kwargs["amount"] == 500
    assert kwargs["receipt"] == f"booking_{checkout.booking.pk}"
    assert kwargs["notes"]["booking_id"] == checkout.booking.pk


@pytest.mark.django_db
@pytest.mark.parametrize(
    "start, end",
    [(None, "2024-01-03"), ("2024-01-03", None), ("first of may", "2024-05-03"), ("2024-01-05", "2024-01-01")],
)
def test_create_rejects_bad_dates(renter, tractor, start, end):
    with pytest.raises(ValidationError):
        create_booking(renter, tractor.pk, start, end)

    assert not Booking.objects.exists()


@pytest.mark.django_db
def test_create_unknown_equipment(renter):
    with pytest.raises(NotFoundError):
        create_booking(renter, 4242, "2024-01-01", "2024-01-02")


@pytest.mark.django_db
def test_second_booking_while_held_conflicts(renter, owner, tractor):
    create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03")

    with pytest.raises(ConflictError):
        create_booking(owner, tractor.pk, "2024-01-02", "2024-01-04")

    assert Booking.objects.count() == 1


@pytest.mark.django_db
def test_lost_hold_rolls_back_insert(renter, tractor):
    with patch("apps.bookings.services.acquire_equipment_hold", return_value=False):
        with pytest.raises(ConflictError):
            create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03")

    assert not Booking.objects.exists()


@pytest.mark.django_db
def test_order_failure_is_compensated(renter, tractor):
    with patch("apps.payments.gateway.create_order", side_effect=PaymentGatewayError("gateway down")):
        with pytest.raises(UpstreamError):
            create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03")

    booking = Booking.objects.get()
    assert booking.status == Booking.Status.PAYMENT_FAILED
    tractor.refresh_from_db()
    assert tractor.available is True


@pytest.mark.django_db
def test_confirm_is_idempotent(renter, tractor, django_capture_on_commit_callbacks):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking

    with django_capture_on_commit_callbacks(execute=True):
        first, applied_first = confirm_booking(booking.pk, "pay_001", order_id=booking.payment_order_id)
    with django_capture_on_commit_callbacks(execute=True):
        second, applied_second = confirm_booking(booking.pk, "pay_001", order_id=booking.payment_order_id)

    assert applied_first is True
    assert applied_second is False
    assert first.status == second.status == Booking.Status.PAID
    assert Receipt.objects.filter(booking=booking).count() == 1
    tractor.refresh_from_db()
    assert tractor.available is False


@pytest.mark.django_db
def test_confirm_rejects_foreign_order(renter, tractor):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking

    with pytest.raises(ValidationError):
        confirm_booking(booking.pk, "pay_001", order_id="order_someone_else")

    booking.refresh_from_db()
    assert booking.status == Booking.Status.AWAITING_PAYMENT


@pytest.mark.django_db
def test_rolled_back_confirm_produces_no_receipt(renter, tractor, django_capture_on_commit_callbacks):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking

    with django_capture_on_commit_callbacks(execute=True):
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                confirm_booking(booking.pk, "pay_001")
                raise RuntimeError("crash after confirm")

    booking.refresh_from_db()
    assert booking.status == Booking.Status.AWAITING_PAYMENT
    assert not Receipt.objects.exists()


@pytest.mark.django_db
def test_fail_releases_equipment(renter, tractor):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking
    assert not is_available(tractor.pk, "2024-01-01", "2024-01-03")

    booking, applied = fail_booking(booking.pk, reason="card declined")

    assert applied is True
    assert booking.status == Booking.Status.PAYMENT_FAILED
    assert is_available(tractor.pk, "2024-01-01", "2024-01-03")

    _, applied_again = fail_booking(booking.pk)
    assert applied_again is False


@pytest.mark.django_db
def test_fail_never_downgrades_paid(renter, tractor):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking
    confirm_booking(booking.pk, "pay_001")

    booking, applied = fail_booking(booking.pk, reason="late failure notice")

    assert applied is False
    assert booking.status == Booking.Status.PAID
    tractor.refresh_from_db()
    assert tractor.available is False


@pytest.mark.django_db
def test_abandon_hold_keeps_status(renter, tractor):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking

    abandon_hold(booking)

    booking.refresh_from_db()
    tractor.refresh_from_db()
    assert booking.status == Booking.Status.AWAITING_PAYMENT
    assert tractor.available is True


@pytest.mark.django_db
def test_status_override_leaves_availability_alone(renter, tractor):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking
    before = booking.last_status_update

    booking = update_booking_status(booking.pk, Booking.Status.REJECTED)

    assert booking.status == Booking.Status.REJECTED
    assert booking.last_status_update >= before
    tractor.refresh_from_db()
    assert tractor.available is False

    with pytest.raises(ValidationError):
        update_booking_status(booking.pk, "cancelled")


@pytest.mark.django_db
def test_stale_holds_expire(renter, owner, tractor):
    stale = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking
    Booking.objects.filter(pk=stale.pk).update(last_status_update=timezone.now() - timedelta(minutes=31))

    assert expire_stale_holds() == 1

    stale.refresh_from_db()
    tractor.refresh_from_db()
    assert stale.status == Booking.Status.PAYMENT_FAILED
    assert tractor.available is True


@pytest.mark.django_db
def test_expiry_task_skips_fresh_holds(renter, tractor):
    fresh = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking

    assert expire_stale_holds_task() == {"expired": 0}

    fresh.refresh_from_db()
    assert fresh.status == Booking.Status.AWAITING_PAYMENT


@pytest.mark.django_db
@pytest.mark.parametrize("lapse", ["failed", "expired"])
def test_late_capture_after_dates_rebooked_conflicts(renter, owner, tractor, lapse):
    first = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking
    if lapse == "failed":
        fail_booking(first.pk, reason="card declined")
    else:
        Booking.objects.filter(pk=first.pk).update(last_status_update=timezone.now() - timedelta(minutes=31))
        assert expire_stale_holds() == 1
    second = create_booking(owner, tractor.pk, "2024-01-02", "2024-01-04").booking

    with pytest.raises(ConflictError):
        confirm_booking(first.pk, "pay_late", order_id=first.payment_order_id)

    first.refresh_from_db()
    tractor.refresh_from_db()
    assert first.status == Booking.Status.PAYMENT_FAILED
    assert first.payment_id == ""
    assert list(
        Booking.objects.filter(equipment=tractor, status__in=Booking.ACTIVE_STATUSES).values_list("pk", flat=True)
    ) == [second.pk]
    assert tractor.available is False


@pytest.mark.django_db
def test_late_capture_confirms_while_dates_free(renter, tractor):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking
    fail_booking(booking.pk, reason="card declined")

    booking, applied = confirm_booking(booking.pk, "pay_late", order_id=booking.payment_order_id)

    assert applied is True
    assert booking.status == Booking.Status.PAID
    tractor.refresh_from_db()
    assert tractor.available is False


@pytest.mark.django_db
def test_checkout_reholds_released_equipment(renter, tractor):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking
    abandon_hold(booking)

    config = payment_checkout(booking)

    assert config["id"] == booking.payment_order_id
    tractor.refresh_from_db()
    assert tractor.available is False


@pytest.mark.django_db
def test_checkout_refuses_new_order_when_dates_taken(renter, owner, tractor):
    booking = create_booking(renter, tractor.pk, "2024-01-01", "2024-01-03").booking
    Booking.objects.filter(pk=booking.pk).update(payment_order_id="")
    booking.refresh_from_db()
    Booking.objects.create(
        equipment=tractor,
        renter=owner,
        start_date=booking.start_date,
        end_date=booking.end_date,
        total_price=1500,
        status=Booking.Status.PAID,
        payment_id="pay_other",
    )

    with patch("apps.payments.gateway.create_order") as create_order:
        with pytest.raises(ConflictError):
            payment_checkout(booking)

    create_order.assert_not_called()
    booking.refresh_from_db()
    assert booking.payment_order_id == ""
