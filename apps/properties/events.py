"""
Property Domain Events
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class PropertyStatusChanged(DomainEvent):
    """
    Event: a property was reserved, sold or returned to the market

    Broadcast to every connected user.
    """
    kind = "property_status_changed"

    property_id: int
    old_status: str
    new_status: str
    reservation_type: str
    reserved_by_inquiry_id: Optional[int] = None
    reservation_expiry: Optional[datetime] = None

    def recipient_ids(self):
        return None
