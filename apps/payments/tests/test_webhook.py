"""Webhook endpoint tests: signature checks and reconciliation with the client path."""

from __future__ import annotations

import hashlib
import hmac
import json

from django.test import TestCase, override_settings
from django.urls import reverse

from apps.bookings.models import Booking
from apps.bookings.services import create_booking
from apps.equipment.models import Equipment
from apps.payments import gateway
from apps.payments.models import Receipt
from apps.payments.services import PaymentSignatureError, verify_client_payment
from apps.users.models import User


def _event_body(event: str, *, payment_id: str = "pay_hook_1", order_id: str = "", notes=None, **entity) -> bytes:
    entity.update({"id": payment_id, "order_id": order_id, "notes": notes or {}})
    return json.dumps({"event": event, "payload": {"payment": {"entity": entity}}}).encode()


def _sign(body: bytes, secret: bytes = b"test_webhook_secret") -> str:
    return hmac.new(secret, body, hashlib.sha256).hexdigest()


class WebhookTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(email="owner@example.com", password="OwnerPass123")
        self.renter = User.objects.create_user(email="renter@example.com", password="RenterPass123")
        self.tractor = Equipment.objects.create(
            owner=self.owner,
            name="Mahindra 575 DI",
            category="tractor",
            daily_rate=500,
            location="Pune",
        )
        self.booking = create_booking(self.renter, self.tractor.pk, "2024-01-01", "2024-01-03").booking
        self.url = reverse("payment-webhook")

    def _post(self, body: bytes, signature: str | None = None):
        extra = {"HTTP_X_RAZORPAY_SIGNATURE": signature} if signature is not None else {}
        return self.client.post(self.url, data=body, content_type="application/json", **extra)

    def _captured(self, **kwargs) -> bytes:
        kwargs.setdefault("order_id", self.booking.payment_order_id)
        kwargs.setdefault("notes", {"booking_id": str(self.booking.pk)})
        return _event_body("payment.captured", **kwargs)

    def test_captured_marks_booking_paid(self) -> None:
        body = self._captured()

        with self.captureOnCommitCallbacks(execute=True):
            response = self._post(body, _sign(body))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"received": True, "event": "payment.captured", "booking_id": self.booking.pk, "applied": True},
        )
        self.booking.refresh_from_db()
        self.tractor.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PAID)
        self.assertEqual(self.booking.payment_id, "pay_hook_1")
        self.assertFalse(self.tractor.available)
        self.assertEqual(Receipt.objects.get(booking=self.booking).amount, 1500)

    def test_missing_or_tampered_signature_is_rejected(self) -> None:
        body = self._captured()

        for signature in (None, "", _sign(body, b"wrong_secret"), _sign(body + b" ")):
            response = self._post(body, signature)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json()["error"], "invalid_signature")

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.AWAITING_PAYMENT)

    def test_failed_releases_equipment(self) -> None:
        body = _event_body(
            "payment.failed",
            order_id=self.booking.payment_order_id,
            notes={"booking_id": str(self.booking.pk)},
            error_description="Payment declined by bank",
        )

        response = self._post(body, _sign(body))

        self.assertEqual(response.status_code, 200)
        self.booking.refresh_from_db()
        self.tractor.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PAYMENT_FAILED)
        self.assertTrue(self.tractor.available)

    def test_booking_found_by_order_id_without_notes(self) -> None:
        body = self._captured(notes={})

        response = self._post(body, _sign(body))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["booking_id"], self.booking.pk)

    def test_unmatched_payment_returns_404(self) -> None:
        body = _event_body("payment.captured", order_id="order_unknown")

        response = self._post(body, _sign(body))

        self.assertEqual(response.status_code, 404)

    def test_other_events_are_acknowledged(self) -> None:
        body = _event_body("refund.processed")

        response = self._post(body, _sign(body))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"received": True, "event": "refund.processed", "ignored": True})

    def test_malformed_body(self) -> None:
        body = b"{not json"

        response = self._post(body, _sign(body))

        self.assertEqual(response.status_code, 400)

    def test_get_not_allowed(self) -> None:
        self.assertEqual(self.client.get(self.url).status_code, 405)

    @override_settings(RAZORPAY_WEBHOOK_SECRET="")
    def test_accepted_without_secret(self) -> None:
        response = self._post(self._captured())

        self.assertEqual(response.status_code, 200)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PAID)

    def test_duplicate_delivery_creates_one_receipt(self) -> None:
        body = self._captured()

        for _ in range(2):
            with self.captureOnCommitCallbacks(execute=True):
                response = self._post(body, _sign(body))
            self.assertEqual(response.status_code, 200)

        self.assertEqual(Receipt.objects.filter(booking=self.booking).count(), 1)

    def test_client_then_webhook_confirms_once(self) -> None:
        signature = gateway.payment_signature(self.booking.payment_order_id, "pay_hook_1")
        with self.captureOnCommitCallbacks(execute=True):
            verify_client_payment(self.booking.pk, self.booking.payment_order_id, "pay_hook_1", signature)

        body = self._captured()
        with self.captureOnCommitCallbacks(execute=True):
            response = self._post(body, _sign(body))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["applied"])
        self.assertEqual(Receipt.objects.filter(booking=self.booking).count(), 1)

    def test_webhook_settles_booking_after_bad_client_signature(self) -> None:
        with self.assertRaises(PaymentSignatureError):
            verify_client_payment(self.booking.pk, self.booking.payment_order_id, "pay_hook_1", "bad")
        self.tractor.refresh_from_db()
        self.assertTrue(self.tractor.available)

        body = self._captured()
        response = self._post(body, _sign(body))

        self.assertEqual(response.status_code, 200)
        self.booking.refresh_from_db()
        self.tractor.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PAID)
        self.assertFalse(self.tractor.available)
