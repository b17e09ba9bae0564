"""
Base Domain Classes

This module provides the foundational building block shared by every app:
- DomainEvent: something that happened in the domain, published after commit

Events carry a stable ``kind`` (the name notification consumers subscribe to)
and a JSON-friendly ``payload``.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, List, Optional
from uuid import UUID, uuid4

from django.utils import timezone


def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    return value


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Subclasses declare their own payload fields and set ``kind``.
    ``event_id`` and ``occurred_at`` are keyword-only so subclasses can
    declare required fields.
    """
    kind: ClassVar[str] = "domain_event"

    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=timezone.now, kw_only=True)

    def payload(self) -> dict:
        """Event specific attributes, serialised for transport."""
        skip = {"event_id", "occurred_at"}
        return {
            key: _jsonable(value)
            for key, value in asdict(self).items()
            if key not in skip
        }

    def recipient_ids(self) -> Optional[List[int]]:
        """
        Agent ids that should hear about the event

        ``None`` means broadcast to everybody. Admins are always included
        by sinks that route per user.
        """
        return []

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'kind': self.kind,
            'occurred_at': self.occurred_at.isoformat(),
            'payload': self.payload(),
        }
