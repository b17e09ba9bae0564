"""Schedule conflict detection.

A proposed window is widened by ``CONFLICT_BUFFER`` on both sides. It
conflicts with a scheduled event of the same agent when the two overlap,
or when the event starts inside the widened window.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from django.db.models import Q  # type: ignore

from .models import CalendarEvent

CONFLICT_BUFFER = timedelta(minutes=30)


def buffered_window(start_time: datetime, end_time: datetime) -> tuple[datetime, datetime]:
    return start_time - CONFLICT_BUFFER, end_time + CONFLICT_BUFFER


def windows_conflict(
    start_time: datetime,
    end_time: datetime,
    other_start: datetime,
    other_end: datetime,
) -> bool:
    """In-memory version of the predicate used by ``has_conflict``."""

    buffer_start, buffer_end = buffered_window(start_time, end_time)
    overlaps = other_start < buffer_end and other_end > buffer_start
    starts_inside = buffer_start <= other_start < buffer_end
    return overlaps or starts_inside


def conflicting_events(
    agent_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_event_id: Optional[int] = None,
):
    buffer_start, buffer_end = buffered_window(start_time, end_time)

    overlap = Q(start_time__lt=buffer_end) & Q(end_time__gt=buffer_start)
    starts_inside = Q(start_time__gte=buffer_start) & Q(start_time__lt=buffer_end)

    qs = CalendarEvent.objects.filter(
        agent_id=agent_id,
        status=CalendarEvent.Status.SCHEDULED,
    ).filter(overlap | starts_inside)

    if exclude_event_id is not None:
        qs = qs.exclude(pk=exclude_event_id)

    return qs


def has_conflict(
    agent_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_event_id: Optional[int] = None,
) -> bool:
    """True when the window collides with another scheduled event of the agent.

    Read-only. Callers must run it in the same transaction as the write it
    guards, after locking the agent (see ``services``).
    """
    return conflicting_events(agent_id, start_time, end_time, exclude_event_id).exists()
