"""Tests for calendar booking services."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase

from apps.calendar_events.models import CalendarEvent
from apps.calendar_events.selectors import get_calendar_event, list_calendar_events
from apps.calendar_events.services import (
    create_calendar_event,
    delete_calendar_event,
    update_calendar_event,
)
from apps.inquiries.models import Inquiry
from apps.notifications.sinks import MemorySink
from apps.properties.models import Property
from apps.users.models import CustomUser
from shared.domain.exceptions import NotFound, ScheduleConflict, ValidationFailure

START = datetime(2030, 3, 4, 9, 0, tzinfo=dt_timezone.utc)


class CalendarServiceTests(TestCase):
    """Covers booking, conflicts, partial updates and removal."""

    def setUp(self) -> None:
        self.agent = CustomUser.objects.create_user(
            email="agent@example.com",
            password="AgentPass123",
            full_name="Ana Reyes",
        )
        self.sink = MemorySink()

    def _book(self, start: datetime, hours: int = 1, **kwargs) -> CalendarEvent:
        return create_calendar_event(
            agent_id=self.agent.pk,
            title=kwargs.pop("title", "Site viewing"),
            event_type=kwargs.pop("event_type", CalendarEvent.EventType.VIEWING),
            start_time=start,
            end_time=start + timedelta(hours=hours),
            sink=self.sink,
            **kwargs,
        )

    def test_agent_can_book_free_slot(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            event = self._book(START)

        self.assertEqual(event.status, CalendarEvent.Status.SCHEDULED)
        self.assertEqual(CalendarEvent.objects.count(), 1)
        self.assertEqual(self.sink.kinds(), ["calendar_event_created"])
        self.assertEqual(self.sink.events[0].recipient_ids(), [self.agent.pk])

    def test_overlap_within_buffer_is_rejected(self) -> None:
        self._book(START)

        with self.assertRaises(ScheduleConflict):
            self._book(START + timedelta(minutes=80))

        self.assertEqual(CalendarEvent.objects.count(), 1)

    def test_booking_one_buffer_apart_succeeds(self) -> None:
        self._book(START)

        second = self._book(START + timedelta(minutes=90))

        self.assertIsNotNone(second.pk)
        self.assertEqual(CalendarEvent.objects.count(), 2)

    def test_end_must_be_after_start(self) -> None:
        with self.assertRaises(ValidationFailure):
            self._book(START, hours=0)

    def test_unknown_agent(self) -> None:
        with self.assertRaises(NotFound):
            create_calendar_event(
                agent_id=self.agent.pk + 100,
                title="Meeting",
                event_type=CalendarEvent.EventType.MEETING,
                start_time=START,
                end_time=START + timedelta(hours=1),
            )

    def test_every_booking_is_checked_whatever_its_status(self) -> None:
        self._book(START)

        with self.assertRaises(ScheduleConflict):
            self._book(START, status=CalendarEvent.Status.COMPLETED)

    def test_moving_completed_event_onto_scheduled_one_is_rejected(self) -> None:
        self._book(START)
        done = self._book(START + timedelta(hours=4), status=CalendarEvent.Status.COMPLETED)

        with self.assertRaises(ScheduleConflict):
            update_calendar_event(done.pk, {"start_time": START, "end_time": START + timedelta(hours=1)})

    def test_links_to_property_and_inquiry(self) -> None:
        listing = Property.objects.create(
            title="Bungalow in Davao",
            property_type=Property.PropertyType.HOUSE,
            price=Decimal("3200000.00"),
            location="Davao City",
        )
        inquiry = Inquiry.objects.create(
            property=listing,
            client_name="Liza Soberano",
            client_email="liza@example.com",
            client_phone="09173334444",
        )

        event = self._book(START, property_id=listing.pk, inquiry_id=inquiry.pk)
        unlinked = update_calendar_event(event.pk, {"inquiry_id": None})

        self.assertEqual(event.property, listing)
        self.assertIsNone(unlinked.inquiry_id)
        self.assertEqual(unlinked.property_id, listing.pk)

    def test_booking_with_missing_property(self) -> None:
        with self.assertRaises(NotFound) as ctx:
            self._book(START, property_id=999999)

        self.assertEqual(ctx.exception.entity, "Property")
        self.assertFalse(CalendarEvent.objects.exists())

    def test_linking_missing_inquiry(self) -> None:
        event = self._book(START)

        with self.assertRaises(NotFound) as ctx:
            update_calendar_event(event.pk, {"inquiry_id": 424242})

        self.assertEqual(ctx.exception.entity, "Inquiry")
        event.refresh_from_db()
        self.assertIsNone(event.inquiry_id)

    def test_moving_event_within_its_own_window_is_allowed(self) -> None:
        event = self._book(START)

        updated = update_calendar_event(event.pk, {"start_time": START + timedelta(minutes=15)})

        self.assertEqual(updated.start_time, START + timedelta(minutes=15))
        self.assertEqual(updated.end_time, START + timedelta(hours=1))

    def test_moving_event_into_another_is_rejected(self) -> None:
        self._book(START)
        later = self._book(START + timedelta(hours=3))

        with self.assertRaises(ScheduleConflict):
            update_calendar_event(
                later.pk,
                {"start_time": START + timedelta(minutes=30), "end_time": START + timedelta(hours=2)},
            )

        later.refresh_from_db()
        self.assertEqual(later.start_time, START + timedelta(hours=3))

    def test_merged_window_must_stay_valid(self) -> None:
        event = self._book(START)

        with self.assertRaises(ValidationFailure):
            update_calendar_event(event.pk, {"start_time": START + timedelta(hours=2)})

    def test_rescheduling_cancelled_event_rechecks_conflicts(self) -> None:
        cancelled = self._book(START, status=CalendarEvent.Status.CANCELLED)
        self._book(START)

        with self.assertRaises(ScheduleConflict):
            update_calendar_event(cancelled.pk, {"status": CalendarEvent.Status.SCHEDULED})

    def test_untouched_fields_are_kept(self) -> None:
        event = self._book(START, description="Bring keys")

        updated = update_calendar_event(event.pk, {"title": "Second viewing"})

        self.assertEqual(updated.title, "Second viewing")
        self.assertEqual(updated.description, "Bring keys")
        self.assertEqual(updated.start_time, START)

    def test_unknown_fields_are_rejected(self) -> None:
        event = self._book(START)

        with self.assertRaises(ValidationFailure):
            update_calendar_event(event.pk, {"agent_id": 999})

    def test_update_missing_event(self) -> None:
        with self.assertRaises(NotFound):
            update_calendar_event(12345, {"title": "Nope"})

    def test_delete_reports_whether_event_existed(self) -> None:
        event = self._book(START)

        self.assertTrue(delete_calendar_event(event.pk))
        self.assertFalse(delete_calendar_event(event.pk))
        with self.assertRaises(NotFound):
            get_calendar_event(event.pk)

    def test_list_filters_by_range_and_status(self) -> None:
        first = self._book(START)
        self._book(START + timedelta(days=1))
        self._book(START + timedelta(days=2), status=CalendarEvent.Status.CANCELLED)

        day_one = list_calendar_events(
            agent_id=self.agent.pk,
            start_date=START - timedelta(hours=1),
            end_date=START + timedelta(hours=12),
        )
        scheduled = list_calendar_events(status=CalendarEvent.Status.SCHEDULED)

        self.assertEqual(list(day_one), [first])
        self.assertEqual(scheduled.count(), 2)
