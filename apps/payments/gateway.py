"""
Razorpay payment gateway client

Thin wrapper over the REST v1 API: orders, payment lookup and the two
HMAC-SHA256 signatures (checkout callback and webhook). Without
RAZORPAY_KEY_ID configured the network calls are emulated so the booking
flow works in development.
"""

import hashlib
import hmac
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Network or API failure while talking to the gateway."""

    pass


@dataclass
class PaymentOrder:
    id: str
    amount: int  # minor units (paise)
    currency: str
    receipt: str
    notes: dict = field(default_factory=dict)


@dataclass
class WebhookEvent:
    event: str
    payment: dict

    @property
    def payment_id(self) -> str:
        return self.payment.get("id") or ""

    @property
    def order_id(self) -> str:
        return self.payment.get("order_id") or ""

    @property
    def notes(self) -> dict:
        notes = self.payment.get("notes")
        return notes if isinstance(notes, dict) else {}

    @property
    def error_description(self) -> str:
        return self.payment.get("error_description") or ""


def _config(name: str, default=""):
    return getattr(settings, name, default)


def _is_emulated() -> bool:
    return not _config("RAZORPAY_KEY_ID")


def _auth() -> tuple:
    return (_config("RAZORPAY_KEY_ID"), _config("RAZORPAY_KEY_SECRET"))


def _url(path: str) -> str:
    return f"{_config('RAZORPAY_API_BASE_URL', 'https://api.razorpay.com/v1/')}{path}"


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def to_minor_units(amount: int) -> int:
    return int(amount) * 100


def create_order(amount: int, receipt: str, notes: dict | None = None, currency: str | None = None) -> PaymentOrder:
    """
    Create a payment order

    Args:
        amount: Amount in whole currency units
        receipt: Merchant reference, e.g. ``booking_42``
        notes: Free-form key/value pairs echoed back in webhooks

    Raises:
        PaymentGatewayError: If the gateway is unreachable or refuses the order
    """
    currency = currency or _config("PAYMENT_CURRENCY", "INR")
    notes = {key: str(value) for key, value in (notes or {}).items()}
    payload = {
        "amount": to_minor_units(amount),
        "currency": currency,
        "receipt": receipt,
        "notes": notes,
    }
    logger.info(f"Creating payment order {receipt} for {amount} {currency}")

    if _is_emulated():
        logger.warning("Payment gateway emulation in use (RAZORPAY_KEY_ID is not set)")
        return PaymentOrder(
            id=f"order_{uuid.uuid4().hex[:14]}",
            amount=payload["amount"],
            currency=currency,
            receipt=receipt,
            notes=notes,
        )

    try:
        response = requests.post(
            _url("orders"),
            json=payload,
            auth=_auth(),
            timeout=_config("RAZORPAY_TIMEOUT_SECONDS", 30),
        )
        response.raise_for_status()
        result = response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Gateway request failed while creating order {receipt}: {e}")
        raise PaymentGatewayError(f"Order creation failed: {e}")
    except ValueError as e:
        raise PaymentGatewayError(f"Gateway returned invalid JSON: {e}")

    if not result.get("id"):
        raise PaymentGatewayError(f"Gateway returned no order id for {receipt}")

    logger.info(f"Payment order {result['id']} created for {receipt}")
    return PaymentOrder(
        id=result["id"],
        amount=result.get("amount", payload["amount"]),
        currency=result.get("currency", currency),
        receipt=result.get("receipt", receipt),
        notes=result.get("notes") or notes,
    )


def fetch_payment(payment_id: str) -> dict:
    """
    Look up a payment

    Returns:
        dict: ``status``, ``amount`` (whole units, None when unknown),
        ``currency``, ``captured_at`` (aware datetime) and ``method``
    """
    logger.info(f"Fetching payment {payment_id}")

    if _is_emulated():
        return {
            "status": "captured",
            "amount": None,
            "currency": _config("PAYMENT_CURRENCY", "INR"),
            "captured_at": datetime.now(timezone.utc),
            "method": "emulated",
        }

    try:
        response = requests.get(
            _url(f"payments/{payment_id}"),
            auth=_auth(),
            timeout=_config("RAZORPAY_TIMEOUT_SECONDS", 30),
        )
        response.raise_for_status()
        result = response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Gateway request failed while fetching payment {payment_id}: {e}")
        raise PaymentGatewayError(f"Payment lookup failed: {e}")
    except ValueError as e:
        raise PaymentGatewayError(f"Gateway returned invalid JSON: {e}")

    created_at = result.get("created_at")
    return {
        "status": result.get("status", ""),
        "amount": result["amount"] // 100 if result.get("amount") is not None else None,
        "currency": result.get("currency", _config("PAYMENT_CURRENCY", "INR")),
        "captured_at": (
            datetime.fromtimestamp(created_at, tz=timezone.utc) if created_at else datetime.now(timezone.utc)
        ),
        "method": result.get("method", ""),
    }


def payment_signature(order_id: str, payment_id: str) -> str:
    return _hmac_hex(_config("RAZORPAY_KEY_SECRET"), f"{order_id}|{payment_id}".encode())


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """Check the signature the checkout hands the client after payment."""
    if not signature:
        return False
    return hmac.compare_digest(payment_signature(order_id, payment_id), signature)


def webhook_secret() -> str:
    return _config("RAZORPAY_WEBHOOK_SECRET")


def verify_webhook_signature(raw_body: bytes, signature: str) -> bool:
    """Check ``X-Razorpay-Signature`` against the raw request body."""
    secret = webhook_secret()
    if not secret or not signature:
        return False
    return hmac.compare_digest(_hmac_hex(secret, raw_body), signature)


def parse_webhook_event(raw_body: bytes) -> WebhookEvent:
    """
    Decode a webhook body

    Raises:
        ValueError: If the body is not a JSON object with an ``event`` name
    """
    data = json.loads(raw_body)
    if not isinstance(data, dict) or not isinstance(data.get("event"), str):
        raise ValueError("Webhook body is not an event object")

    payload = data.get("payload") or {}
    entity = ((payload.get("payment") or {}).get("entity")) if isinstance(payload, dict) else None
    return WebhookEvent(event=data["event"], payment=entity if isinstance(entity, dict) else {})


def checkout_config(order: PaymentOrder, equipment_name: str, renter=None) -> dict:
    """Options the browser checkout widget is opened with."""
    return {
        "id": order.id,
        "key_id": _config("RAZORPAY_KEY_ID"),
        "amount": order.amount,
        "currency": order.currency,
        "name": _config("PAYMENT_MERCHANT_NAME", "AgriRent Equipment"),
        "description": f"Booking for {equipment_name}",
        "prefill": {
            "name": getattr(renter, "name", "") or "",
            "email": getattr(renter, "email", "") or "",
            "contact": getattr(renter, "contact", "") or "",
        },
    }
