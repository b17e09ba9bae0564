"""Tests for notification sinks and delivery."""

from __future__ import annotations

from decimal import Decimal

import pytest

from apps.inquiries.events import InquiryAssigned
from apps.inquiries.models import Inquiry
from apps.inquiries.services import create_inquiry
from apps.notifications.models import Notification
from apps.notifications.sinks import (
    DatabaseSink,
    LoggingSink,
    MemorySink,
    NotificationSink,
    get_sink,
    install_sink,
    load_sink,
    publish,
    shutdown_sink,
)
from apps.properties.events import PropertyStatusChanged
from shared.domain.exceptions import DuplicateInquiry


class ExplodingSink(NotificationSink):
    def send(self, event):
        raise ConnectionError("push gateway down")


class TrackingSink(MemorySink):
    def __init__(self):
        super().__init__()
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True

    def close(self):
        self.closed = True


@pytest.mark.django_db
def test_database_sink_targets_agent_and_admins(agent, other_agent, admin):
    event = InquiryAssigned(
        inquiry_id=1,
        property_id=1,
        agent_id=agent.pk,
        previous_agent_id=None,
        assigned_by=admin.pk,
    )

    DatabaseSink().send(event)

    recipients = set(Notification.objects.values_list("user_id", flat=True))
    assert recipients == {agent.pk, admin.pk}
    notification = Notification.objects.get(user=agent)
    assert notification.kind == "inquiry_assigned"
    assert notification.title == "Inquiry assigned to you"
    assert notification.payload["payload"]["agent_id"] == agent.pk
    assert not notification.is_read


@pytest.mark.django_db
def test_database_sink_broadcasts_property_changes(agent, other_agent, admin):
    other_agent.is_active = False
    other_agent.save(update_fields=["is_active"])
    event = PropertyStatusChanged(
        property_id=7,
        old_status="available",
        new_status="reserved",
        reservation_type="deposit",
    )

    DatabaseSink().send(event)

    recipients = set(Notification.objects.values_list("user_id", flat=True))
    assert recipients == {agent.pk, admin.pk}


@pytest.mark.django_db
def test_mark_read(agent):
    notification = Notification.objects.create(user=agent, kind="inquiry_created", title="New inquiry received")

    notification.mark_read()

    notification.refresh_from_db()
    assert notification.is_read


def test_publish_keeps_going_after_a_failed_event(caplog):
    class FlakySink(MemorySink):
        def send(self, event):
            if event.property_id == 1:
                raise ValueError("bad payload")
            super().send(event)

    sink = FlakySink()
    events = [
        PropertyStatusChanged(property_id=n, old_status="reserved", new_status="available", reservation_type="none")
        for n in (1, 2)
    ]

    publish(events, sink=sink)

    assert [e.property_id for e in sink.events] == [2]
    assert "Error delivering property_status_changed" in caplog.text


@pytest.mark.django_db
def test_sink_failure_never_rolls_back_the_mutation(listing, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        inquiry = create_inquiry(
            listing.pk,
            "Pedro Penduko",
            "pedro@example.com",
            "09175550000",
            sink=ExplodingSink(),
        )

    assert Inquiry.objects.filter(pk=inquiry.pk).exists()


@pytest.mark.django_db
def test_failed_mutation_publishes_nothing(listing, memory_sink, django_capture_on_commit_callbacks):
    create_inquiry(listing.pk, "Pedro", "pedro@example.com", "09175550000")
    memory_sink.clear()

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(DuplicateInquiry):
            create_inquiry(listing.pk, "Pedro", "pedro@example.com", "09175550000")

    assert callbacks == []
    assert memory_sink.events == []


def test_sink_lifecycle():
    first, second = TrackingSink(), TrackingSink()

    install_sink(first)
    assert first.opened
    assert get_sink() is first

    install_sink(second)
    assert first.closed
    assert get_sink() is second

    shutdown_sink()
    assert second.closed

    install_sink(MemorySink())


def test_load_sink_from_dotted_path():
    assert isinstance(load_sink("apps.notifications.sinks.LoggingSink"), LoggingSink)
    assert isinstance(load_sink(None), LoggingSink)


def test_event_serialisation():
    event = InquiryAssigned(
        inquiry_id=3,
        property_id=4,
        agent_id=5,
        previous_agent_id=None,
        assigned_by=None,
    )

    data = event.to_dict()

    assert data["kind"] == "inquiry_assigned"
    assert data["payload"] == {
        "inquiry_id": 3,
        "property_id": 4,
        "agent_id": 5,
        "previous_agent_id": None,
        "assigned_by": None,
    }
    assert "event_id" not in data["payload"]
    assert isinstance(data["event_id"], str)


def test_decimal_payload_is_stringified():
    from apps.inquiries.events import InquiryStatusChanged

    event = InquiryStatusChanged(
        inquiry_id=1,
        property_id=2,
        old_status="negotiating",
        new_status="deposit_paid",
        assigned_to=None,
        changed_by=None,
        commission_locked=True,
        commission_amount=Decimal("1500.50"),
    )

    assert event.payload()["commission_amount"] == "1500.50"
    assert event.recipient_ids() == []
