"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass
class BookingPaid(DomainEvent):
    """
    Event: Booking payment confirmed (AWAITING_PAYMENT -> PAID)

    Triggers:
    - Generate the payment receipt
    """
    booking_id: int = 0
    equipment_id: int = 0
    renter_id: int = 0
    payment_id: str = ''


@dataclass
class BookingPaymentFailed(DomainEvent):
    """
    Event: Payment failed or the hold expired (-> PAYMENT_FAILED)

    The equipment hold has already been released when this is published.

    Triggers:
    - Log the failure for follow-up with the renter
    """
    booking_id: int = 0
    equipment_id: int = 0
    reason: str = ''
