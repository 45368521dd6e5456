"""
Base Domain Classes

Building blocks shared by the domain layer:
- ValueObject: immutable objects compared by value
- EventRecorder: mixin collecting domain events on an aggregate root
- DomainEvent: something that happened and is published after commit
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass(kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Subclasses declare their payload as dataclass fields. Keyword-only
    construction keeps base defaults from clashing with payload fields.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
        }


class EventRecorder:
    """
    Mixin for aggregate roots

    Works for plain classes and Django models alike: events are kept on
    the instance until a unit of work collects them.
    """

    def record_event(self, event: DomainEvent) -> None:
        self.__dict__.setdefault('_pending_events', []).append(event)

    def pull_events(self) -> List[DomainEvent]:
        """Return recorded events and forget them"""
        events = self.__dict__.pop('_pending_events', [])
        return list(events)
