"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.

The unit of work is the explicit transactional boundary passed between
services that mutate more than one aggregate (Property and Inquiry).
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from django.db import transaction
from django.db.utils import NotSupportedError

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""

    @abstractmethod
    def add_event(self, event: DomainEvent):
        """Record an event to publish after commit"""


def lock_for_update(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Manages Django database transactions and ensures domain events
    are handed to the notification sink after commit.

    Usage:
        with DjangoUnitOfWork() as uow:
            inquiry = uow.lock(Inquiry.objects.filter(pk=inquiry_id)).get()
            ...
            uow.add_event(InquiryStatusChanged(...))
            # Transaction commits here
        # Events are published after commit
    """

    def __init__(self, sink=None):
        self._events: List[DomainEvent] = []
        self._transaction = None
        self._sink = sink

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    @property
    def events(self) -> List[DomainEvent]:
        return self._events.copy()

    def lock(self, queryset):
        """Row-lock the queryset for the rest of the transaction."""
        return lock_for_update(queryset)

    def commit(self):
        """
        Schedule event publishing

        Events are published using Django's transaction.on_commit()
        so they are only sent after the outermost commit succeeds.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        """
        Deliver collected events to the notification sink

        Called after successful transaction commit. Delivery is best effort:
        the mutation is already durable.
        """
        from apps.notifications.sinks import publish

        logger.info(f"Publishing {len(events)} domain events after commit")
        publish(events, sink=self._sink)


def unit_of_work(uow: Optional[DjangoUnitOfWork] = None, sink=None):
    """Join the caller's unit of work, or open a new one."""
    if uow is not None:
        return _Joined(uow)
    return DjangoUnitOfWork(sink=sink)


class _Joined:
    """Context manager reusing an already open unit of work."""

    def __init__(self, uow: DjangoUnitOfWork):
        self._uow = uow

    def __enter__(self):
        return self._uow

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False
