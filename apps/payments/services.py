"""
Payment confirmation reconciler

A payment can be reported twice: by the client right after checkout and by
the gateway's webhook. Both paths are verified independently and then end in
the same idempotent ``confirm_booking`` transition, so the order in which they
arrive does not matter and the receipt is produced once.
"""

from __future__ import annotations

import logging

from apps.bookings.models import Booking
from apps.bookings.services import abandon_hold, confirm_booking, fail_booking
from shared.domain.exceptions import AuthorizationError, NotFoundError, UpstreamError, ValidationError

from . import gateway
from .gateway import PaymentGatewayError, WebhookEvent
from .models import Receipt

logger = logging.getLogger(__name__)


class PaymentSignatureError(ValidationError):
    """The checkout signature does not match the order and payment ids"""

    code = 'invalid_signature'


class WebhookSignatureError(ValidationError):
    """The webhook signature header is missing or wrong"""

    code = 'invalid_signature'


def _get_booking(booking_id) -> Booking:
    try:
        return Booking.objects.select_related("equipment").get(pk=int(booking_id))
    except (Booking.DoesNotExist, TypeError, ValueError):
        raise NotFoundError(f"Booking {booking_id} not found")


def verify_client_payment(booking_id, order_id: str, payment_id: str, signature: str, actor=None) -> Booking:
    """
    Confirm a booking from the checkout callback the client forwards

    A booking that is already paid answers success without looking at the
    signature. A bad signature releases the equipment but keeps the booking
    status, so the webhook can still settle it.

    Raises:
        ValidationError: A field is missing
        NotFoundError: Unknown booking
        AuthorizationError: ``actor`` is neither the renter nor an administrator
        PaymentSignatureError: Signature mismatch
    """
    if not all([booking_id, order_id, payment_id, signature]):
        raise ValidationError("booking_id, razorpay_order_id, razorpay_payment_id and razorpay_signature are required")

    booking = _get_booking(booking_id)

    if actor is not None and booking.renter_id != actor.pk and not getattr(actor, "is_admin", False):
        raise AuthorizationError("Not your booking")

    if booking.status == Booking.Status.PAID:
        logger.info(f"Booking {booking.pk} already paid, client verification skipped")
        return booking

    if not gateway.verify_payment_signature(order_id, payment_id, signature):
        abandon_hold(booking)
        logger.error(f"Invalid payment signature for booking {booking.pk} (order {order_id}, payment {payment_id})")
        raise PaymentSignatureError("Invalid payment signature")

    booking, _ = confirm_booking(booking.pk, payment_id, order_id=order_id)
    return booking


def _resolve_booking_id(event: WebhookEvent) -> int:
    raw_id = event.notes.get("booking_id") or event.notes.get("bookingId")
    if raw_id:
        try:
            return int(raw_id)
        except (TypeError, ValueError):
            logger.warning(f"Webhook carries malformed booking id {raw_id!r}, falling back to order lookup")

    if event.order_id:
        booking_id = Booking.objects.filter(payment_order_id=event.order_id).values_list("pk", flat=True).first()
        if booking_id:
            return booking_id

    raise NotFoundError(f"No booking for payment {event.payment_id} (order {event.order_id})")


def process_webhook(raw_body: bytes, signature: str | None) -> dict:
    """
    Apply a gateway webhook

    Returns:
        dict: acknowledgement body, always with ``received: True``

    Raises:
        WebhookSignatureError: Signature missing or wrong while a secret is configured
        ValidationError: Body is not a webhook event
        NotFoundError: The payment cannot be matched to a booking
    """
    if gateway.webhook_secret():
        if not gateway.verify_webhook_signature(raw_body, signature or ""):
            logger.error("Rejected webhook with invalid signature")
            raise WebhookSignatureError("Invalid webhook signature")
    else:
        logger.warning("RAZORPAY_WEBHOOK_SECRET is not set, webhook accepted without signature check")

    try:
        event = gateway.parse_webhook_event(raw_body)
    except ValueError:
        raise ValidationError("Malformed webhook payload")

    logger.info(f"Webhook {event.event} for payment {event.payment_id}")

    if event.event == "payment.captured":
        booking, applied = confirm_booking(
            _resolve_booking_id(event),
            event.payment_id,
            order_id=event.order_id or None,
        )
    elif event.event == "payment.failed":
        booking, applied = fail_booking(_resolve_booking_id(event), reason=event.error_description)
    else:
        logger.warning(f"Ignoring webhook event {event.event}")
        return {"received": True, "event": event.event, "ignored": True}

    return {"received": True, "event": event.event, "booking_id": booking.pk, "applied": applied}


def generate_receipt(booking_id: int, payment_id: str) -> Receipt:
    """
    Store the receipt for a captured payment

    Idempotent on ``payment_id``: an existing receipt is returned without
    asking the gateway again.

    Raises:
        NotFoundError: Unknown booking
        UpstreamError: The gateway lookup failed
    """
    existing = Receipt.objects.filter(payment_id=payment_id).first()
    if existing:
        return existing

    booking = _get_booking(booking_id)

    try:
        payment = gateway.fetch_payment(payment_id)
    except PaymentGatewayError as exc:
        logger.warning(f"Receipt for booking {booking.pk} not generated: {exc}")
        raise UpstreamError("Failed to fetch payment details")

    receipt, created = Receipt.objects.get_or_create(
        payment_id=payment_id,
        defaults={
            "booking": booking,
            "amount": payment["amount"] if payment["amount"] is not None else booking.total_price,
            "currency": payment["currency"],
            "method": payment["method"] or "",
            "status": payment["status"],
            "captured_at": payment["captured_at"],
        },
    )
    if created:
        logger.info(f"Receipt {receipt.pk} generated for booking {booking.pk}")
    return receipt


def receipt_for_booking(booking: Booking) -> Receipt:
    if booking.status != Booking.Status.PAID or not booking.payment_id:
        raise ValidationError("No payment found for this booking")
    return generate_receipt(booking.pk, booking.payment_id)
