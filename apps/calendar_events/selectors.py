"""Read-only calendar queries for reporting and export."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from shared.domain.exceptions import NotFound

from .models import CalendarEvent


def list_calendar_events(
    *,
    agent_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    status: Optional[str] = None,
    event_type: Optional[str] = None,
):
    """Events ordered by start time; ``start_date``/``end_date`` bound the whole event."""

    qs = CalendarEvent.objects.select_related("agent", "property", "inquiry")
    if agent_id:
        qs = qs.filter(agent_id=agent_id)
    if start_date:
        qs = qs.filter(start_time__gte=start_date)
    if end_date:
        qs = qs.filter(end_time__lte=end_date)
    if status:
        qs = qs.filter(status=status)
    if event_type:
        qs = qs.filter(event_type=event_type)
    return qs.order_by("start_time", "id")


def get_calendar_event(event_id: int) -> CalendarEvent:
    try:
        return CalendarEvent.objects.select_related("agent").get(pk=event_id)
    except CalendarEvent.DoesNotExist:
        raise NotFound("CalendarEvent", event_id)
