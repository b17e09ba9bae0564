"""
Calendar Domain Events
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class CalendarEventCreated(DomainEvent):
    """
    Event: a commitment was booked on an agent's calendar

    Pushed to the agent and to admins.
    """
    kind = "calendar_event_created"

    calendar_event_id: int
    agent_id: int
    title: str
    event_type: str
    start_time: datetime
    end_time: datetime
    property_id: Optional[int] = None
    inquiry_id: Optional[int] = None

    def recipient_ids(self):
        return [self.agent_id]
