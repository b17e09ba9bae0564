"""Calendar booking services.

Conflict check and write run in one transaction after the agent row has
been locked, which serialises concurrent bookings for the same agent.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from django.contrib.auth import get_user_model  # type: ignore

from apps.inquiries.models import Inquiry
from apps.properties.models import Property
from shared.application.retry import retry_on_transient
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import NotFound, ScheduleConflict, ValidationFailure

from .conflicts import has_conflict
from .events import CalendarEventCreated
from .models import CalendarEvent

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "event_type",
    "start_time",
    "end_time",
    "status",
    "property_id",
    "inquiry_id",
)


def _lock_agent(uow, agent_id: int):
    User = get_user_model()
    try:
        return uow.lock(User.objects.filter(pk=agent_id)).get()
    except User.DoesNotExist:
        raise NotFound("Agent", agent_id)


def _ensure_window(start_time: datetime, end_time: datetime) -> None:
    if end_time <= start_time:
        raise ValidationFailure("End time must be after start time", field="end_time")


def _ensure_links(property_id: Optional[int], inquiry_id: Optional[int]) -> None:
    if property_id is not None and not Property.objects.filter(pk=property_id).exists():
        raise NotFound("Property", property_id)
    if inquiry_id is not None and not Inquiry.objects.filter(pk=inquiry_id).exists():
        raise NotFound("Inquiry", inquiry_id)


def _ensure_free(agent_id: int, start_time: datetime, end_time: datetime, exclude_event_id=None) -> None:
    if has_conflict(agent_id, start_time, end_time, exclude_event_id):
        logger.info(
            f"Schedule conflict for agent {agent_id}: {start_time.isoformat()} - {end_time.isoformat()}"
        )
        raise ScheduleConflict(agent_id=agent_id)


@retry_on_transient
def create_calendar_event(
    *,
    agent_id: int,
    title: str,
    event_type: str,
    start_time: datetime,
    end_time: datetime,
    description: str = "",
    property_id: Optional[int] = None,
    inquiry_id: Optional[int] = None,
    status: str = CalendarEvent.Status.SCHEDULED,
    sink=None,
) -> CalendarEvent:
    """Book a commitment on the agent's calendar."""

    _ensure_window(start_time, end_time)

    with DjangoUnitOfWork(sink=sink) as uow:
        _lock_agent(uow, agent_id)
        _ensure_links(property_id, inquiry_id)
        _ensure_free(agent_id, start_time, end_time)

        event = CalendarEvent.objects.create(
            agent_id=agent_id,
            title=title,
            description=description or "",
            event_type=event_type,
            start_time=start_time,
            end_time=end_time,
            property_id=property_id,
            inquiry_id=inquiry_id,
            status=status,
        )
        uow.add_event(
            CalendarEventCreated(
                calendar_event_id=event.pk,
                agent_id=agent_id,
                title=title,
                event_type=event_type,
                start_time=start_time,
                end_time=end_time,
                property_id=property_id,
                inquiry_id=inquiry_id,
            )
        )

    logger.info(f"Calendar event {event.pk} booked for agent {agent_id}")
    return event


@retry_on_transient
def update_calendar_event(event_id: int, patch: dict[str, Any], *, sink=None) -> CalendarEvent:
    """Apply a partial update; only keys present in ``patch`` change.

    Moving the window, or putting the event back to ``scheduled``, re-runs
    the conflict check against the merged window, ignoring the event itself.
    Linked property and inquiry ids must exist; ``None`` unlinks.
    """

    unknown = set(patch) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationFailure(f"Cannot update fields: {', '.join(sorted(unknown))}")

    agent_id = CalendarEvent.objects.filter(pk=event_id).values_list("agent_id", flat=True).first()
    if agent_id is None:
        raise NotFound("CalendarEvent", event_id)

    with DjangoUnitOfWork(sink=sink) as uow:
        _lock_agent(uow, agent_id)
        try:
            event = uow.lock(CalendarEvent.objects.filter(pk=event_id)).get()
        except CalendarEvent.DoesNotExist:
            raise NotFound("CalendarEvent", event_id)

        if not patch:
            return event

        start_time = patch.get("start_time", event.start_time)
        end_time = patch.get("end_time", event.end_time)
        status = patch.get("status", event.status)

        window_changed = "start_time" in patch or "end_time" in patch
        rescheduled = status == CalendarEvent.Status.SCHEDULED and event.status != status

        if window_changed:
            _ensure_window(start_time, end_time)

        _ensure_links(patch.get("property_id"), patch.get("inquiry_id"))

        if window_changed or rescheduled:
            _ensure_free(agent_id, start_time, end_time, exclude_event_id=event.pk)

        for field, value in patch.items():
            setattr(event, field, value)
        changed = [f[:-3] if f.endswith("_id") else f for f in patch]
        event.save(update_fields=changed + ["updated_at"])

    logger.info(f"Calendar event {event_id} updated: {sorted(patch)}")
    return event


@retry_on_transient
def delete_calendar_event(event_id: int) -> bool:
    """Remove the event. Returns whether a row existed."""

    deleted, _ = CalendarEvent.objects.filter(pk=event_id).delete()
    if deleted:
        logger.info(f"Calendar event {event_id} deleted")
    return bool(deleted)
