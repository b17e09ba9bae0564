"""Read-only listing queries."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from shared.domain.exceptions import NotFound

from .models import Property


def list_properties(
    *,
    status: Optional[str] = None,
    property_type: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    location: Optional[str] = None,
    agent_id: Optional[int] = None,
):
    """Listings newest first; ``location`` matches any part of the location."""

    qs = Property.objects.select_related("agent")
    if status:
        qs = qs.filter(status=status)
    if property_type:
        qs = qs.filter(property_type=property_type)
    if min_price is not None:
        qs = qs.filter(price__gte=min_price)
    if max_price is not None:
        qs = qs.filter(price__lte=max_price)
    if location:
        qs = qs.filter(location__icontains=location)
    if agent_id:
        qs = qs.filter(agent_id=agent_id)
    return qs.order_by("-created_at", "-id")


def get_property(property_id: int) -> Property:
    try:
        return Property.objects.select_related("agent").get(pk=property_id)
    except Property.DoesNotExist:
        raise NotFound("Property", property_id)
