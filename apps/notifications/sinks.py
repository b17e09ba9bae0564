"""Notification sinks.

A sink receives domain events after the transaction that produced them has
committed. Delivery is best effort: a failing sink is logged and never
affects the mutation that raised the event.

Lifecycle: ``install_sink`` once at process start, ``shutdown_sink`` at
shutdown. Services accept ``sink=`` to bypass the installed one.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from django.utils.module_loading import import_string  # type: ignore

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

DEFAULT_SINK = "apps.notifications.sinks.LoggingSink"

TITLES = {
    "inquiry_created": "New inquiry received",
    "inquiry_assigned": "Inquiry assigned to you",
    "inquiry_status_changed": "Inquiry status changed",
    "property_status_changed": "Property status changed",
    "calendar_event_created": "New calendar event",
}


class NotificationSink(ABC):
    """Base class for sinks"""

    def open(self) -> None:
        """Acquire resources; called by ``install_sink``."""

    @abstractmethod
    def send(self, event: DomainEvent) -> None:
        pass

    def close(self) -> None:
        """Release resources; called by ``shutdown_sink``."""


class LoggingSink(NotificationSink):
    """Writes every event to the log."""

    def send(self, event: DomainEvent) -> None:
        logger.info(f"Notification {event.kind}: {event.payload()}")


class MemorySink(NotificationSink):
    """Keeps events in process, for tests and local runs."""

    def __init__(self):
        self.events: list[DomainEvent] = []

    def send(self, event: DomainEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [event.kind for event in self.events]

    def clear(self) -> None:
        self.events.clear()

    def close(self) -> None:
        self.clear()


class DatabaseSink(NotificationSink):
    """
    Stores one ``Notification`` per recipient.

    Targeted events reach the named agents plus every admin; broadcast
    events (``recipient_ids() is None``) reach every active user.
    """

    def send(self, event: DomainEvent) -> None:
        from django.contrib.auth import get_user_model

        from .models import Notification

        User = get_user_model()
        targets = event.recipient_ids()

        if targets is None:
            recipients = User.objects.filter(is_active=True)
        else:
            ids = set(User.objects.admins().values_list("pk", flat=True))
            ids.update(pk for pk in targets if pk)
            recipients = User.objects.filter(pk__in=ids, is_active=True)

        title = TITLES.get(event.kind, event.kind)
        payload = event.to_dict()
        Notification.objects.bulk_create(
            [
                Notification(user=user, kind=event.kind, title=title, payload=payload)
                for user in recipients
            ]
        )


_lock = threading.Lock()
_sink: Optional[NotificationSink] = None


def load_sink(path: Optional[str] = None) -> NotificationSink:
    """Instantiate the sink class named by a dotted path."""
    return import_string(path or DEFAULT_SINK)()


def install_sink(sink: NotificationSink) -> NotificationSink:
    """Make ``sink`` the process-wide default, closing the previous one."""
    global _sink
    with _lock:
        previous, _sink = _sink, sink
        sink.open()
    if previous is not None and previous is not sink:
        previous.close()
    logger.debug(f"Installed notification sink {sink.__class__.__name__}")
    return sink


def get_sink() -> NotificationSink:
    global _sink
    with _lock:
        if _sink is None:
            _sink = load_sink()
            _sink.open()
        return _sink


def shutdown_sink() -> None:
    global _sink
    with _lock:
        sink, _sink = _sink, None
    if sink is not None:
        sink.close()
        logger.debug(f"Closed notification sink {sink.__class__.__name__}")


def publish(events: Iterable[DomainEvent], sink: Optional[NotificationSink] = None) -> None:
    """
    Deliver events one by one.

    Errors are logged and don't stop delivery of the remaining events.
    """
    target = sink or get_sink()
    for event in events:
        try:
            target.send(event)
        except Exception as e:
            logger.error(
                f"Error delivering {event.kind} (ID: {event.event_id}) "
                f"to {target.__class__.__name__}: {e}",
                exc_info=True,
            )
