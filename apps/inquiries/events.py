"""
Inquiry Domain Events

Events that represent things that have happened to inquiries.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class InquiryCreated(DomainEvent):
    """
    Event: a buyer submitted a new inquiry

    Triggers:
    - Alert admins so the inquiry gets assigned
    """
    kind = "inquiry_created"

    inquiry_id: int
    property_id: int
    client_name: str


@dataclass
class InquiryAssigned(DomainEvent):
    """
    Event: an inquiry was assigned or reassigned to an agent

    Triggers:
    - Push to the new agent and to admins
    """
    kind = "inquiry_assigned"

    inquiry_id: int
    property_id: int
    agent_id: int
    previous_agent_id: Optional[int]
    assigned_by: Optional[int]

    def recipient_ids(self):
        return [self.agent_id]


@dataclass
class InquiryStatusChanged(DomainEvent):
    """
    Event: an inquiry moved to a new status

    Also raised for sibling inquiries cancelled by a reservation and for
    inquiries expired by the sweeper.
    """
    kind = "inquiry_status_changed"

    inquiry_id: int
    property_id: int
    old_status: str
    new_status: str
    assigned_to: Optional[int]
    changed_by: Optional[int]
    commission_locked: bool = False
    commission_amount: Optional[Decimal] = None

    def recipient_ids(self):
        return [self.assigned_to] if self.assigned_to else []
