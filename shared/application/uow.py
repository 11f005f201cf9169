"""
Unit of Work

A transaction that also collects the domain events raised inside it.
The events reach the message bus only once the outermost transaction
has committed.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    ``transaction.atomic()`` plus an outbox of domain events

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = _lock_booking(booking_id)
            booking.set_status(Booking.Status.PAID)
            booking.save()
            uow.add_event(BookingPaid(booking_id=booking.pk, ...))
        # BookingPaid handlers run after COMMIT

    When the block raises, or an enclosing atomic block rolls back later,
    the collected events are dropped together with the data changes.
    """

    def __init__(self):
        self.events: List[DomainEvent] = []
        self._atomic = transaction.atomic()

    def __enter__(self):
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._schedule_publish()
        elif self.events:
            logger.warning(f"Transaction failed, dropping {len(self.events)} unpublished events")
            self.events = []
        return self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent):
        self.events.append(event)

    def _schedule_publish(self):
        if not self.events:
            return
        pending, self.events = self.events, []
        logger.debug(f"Scheduling {len(pending)} events for after commit")
        transaction.on_commit(lambda: publish_after_commit(pending))


def publish_after_commit(events: List[DomainEvent]):
    """Hand committed events to the bus. Handler failures never reach the committer."""
    from shared.application.message_bus import message_bus

    try:
        message_bus.publish_events(events)
    except Exception as e:
        logger.error(f"Publishing {len(events)} committed events failed: {e}", exc_info=True)
