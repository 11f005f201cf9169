"""
Domain building blocks

ValueObject for immutable values compared field by field, and DomainEvent
for the facts the booking state machine announces after a commit.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject:
    """Immutable, identity-less value. Equality is field equality."""


@dataclass
class DomainEvent:
    """
    Something that happened to an aggregate

    Subclasses add their own payload fields; those need defaults because
    the envelope fields below already have them.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    aggregate_id: int | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        """Envelope and payload as JSON-friendly values, e.g. for structured logs"""
        data = asdict(self)
        data['event_id'] = str(self.event_id)
        data['occurred_at'] = self.occurred_at.isoformat()
        data['event_type'] = self.name
        return data
