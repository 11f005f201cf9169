"""
Message Bus

In-process fan-out of domain events. A context reacts to another
context's events by subscribing a handler in its ``AppConfig.ready()``,
so the publisher never imports the subscriber:

    bookings  --BookingPaid-->  payments.generate_receipt_on_booking_paid
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class MessageBus:
    """Maps an event class to the handlers subscribed to it (1:N)"""

    def __init__(self):
        self._subscribers: Dict[Type[DomainEvent], List[Handler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: Handler):
        """Subscribe ``handler``; subscribing it twice keeps one entry"""
        subscribers = self._subscribers.setdefault(event_type, [])
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug(f"{handler.__name__} subscribed to {event_type.__name__}")

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[Handler]:
        return list(self._subscribers.get(event_type, []))

    def publish_events(self, events: List[DomainEvent]):
        """
        Deliver every event to each of its handlers in subscription order

        A failing handler is logged and skipped; the remaining handlers
        still see the event.
        """
        for event in events:
            name = type(event).__name__
            handlers = self.handlers_for(type(event))
            if not handlers:
                logger.debug(f"{name} has no subscribers")
                continue

            logger.info(f"Dispatching {name} to {len(handlers)} handler(s): {event.to_dict()}")
            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(f"{handler.__name__} failed on {name} {event.event_id}: {e}", exc_info=True)


message_bus = MessageBus()
