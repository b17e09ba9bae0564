"""Tests for listing management and listing queries."""

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from apps.inquiries.models import Inquiry, InquiryStatus
from apps.inquiries.services import create_inquiry, update_inquiry_status
from apps.notifications.sinks import MemorySink
from apps.properties.models import Property
from apps.properties.selectors import get_property, list_properties
from apps.properties.services import archive_property, create_property, update_property
from apps.users.models import CustomUser
from shared.domain.exceptions import NotFound, PropertyUnavailable, ValidationFailure


class PropertyManagementTests(TestCase):
    """Covers creating, editing and archiving listings."""

    def setUp(self) -> None:
        self.agent = CustomUser.objects.create_user(
            email="agent@example.com",
            password="AgentPass123",
            full_name="Ana Reyes",
        )
        self.sink = MemorySink()

    def _create(self, **kwargs) -> Property:
        data = {
            "title": "Corner lot in Antipolo",
            "property_type": Property.PropertyType.LOT,
            "price": Decimal("2750000.00"),
            "location": "Antipolo, Rizal",
            "agent_id": self.agent.pk,
        }
        data.update(kwargs)
        return create_property(**data)

    def test_create_property_is_available(self) -> None:
        listing = self._create(lot_area=Decimal("240.00"))

        self.assertEqual(listing.status, Property.Status.AVAILABLE)
        self.assertEqual(listing.reservation_type, Property.ReservationType.NONE)
        self.assertEqual(listing.agent, self.agent)
        self.assertEqual(listing.lot_area, Decimal("240.00"))

    def test_create_cannot_start_reserved(self) -> None:
        with self.assertRaises(ValidationFailure):
            self._create(status=Property.Status.RESERVED)

        self.assertFalse(Property.objects.exists())

    def test_create_with_missing_agent(self) -> None:
        with self.assertRaises(NotFound):
            self._create(agent_id=self.agent.pk + 100)

    def test_partial_edit_keeps_other_fields(self) -> None:
        listing = self._create(address="Sumulong Highway")

        updated = update_property(listing.pk, {"price": Decimal("2600000.00")}, sink=self.sink)

        self.assertEqual(updated.price, Decimal("2600000.00"))
        self.assertEqual(updated.address, "Sumulong Highway")
        self.assertEqual(self.sink.events, [])

    def test_reservation_fields_cannot_be_edited(self) -> None:
        listing = self._create()

        with self.assertRaises(ValidationFailure) as ctx:
            update_property(listing.pk, {"reservation_expiry": None})

        self.assertEqual(ctx.exception.context["fields"], ["reservation_expiry"])

    def test_status_cannot_be_set_to_sold_by_hand(self) -> None:
        listing = self._create()

        with self.assertRaises(ValidationFailure):
            update_property(listing.pk, {"status": Property.Status.SOLD})

    def test_update_missing_property(self) -> None:
        with self.assertRaises(NotFound):
            update_property(404, {"title": "Gone"})

    def test_archive_publishes_status_change(self) -> None:
        listing = self._create()

        with self.captureOnCommitCallbacks(execute=True):
            archived = archive_property(listing.pk, sink=self.sink)

        self.assertEqual(archived.status, Property.Status.ARCHIVED)
        self.assertEqual(self.sink.kinds(), ["property_status_changed"])
        event = self.sink.events[0]
        self.assertEqual((event.old_status, event.new_status), ("available", "archived"))

    def test_archived_property_can_return_to_market(self) -> None:
        listing = self._create(status=Property.Status.ARCHIVED)

        restored = update_property(listing.pk, {"status": Property.Status.AVAILABLE})

        self.assertEqual(restored.status, Property.Status.AVAILABLE)

    def test_archived_property_cannot_be_won(self) -> None:
        listing = self._create()
        inquiry = create_inquiry(listing.pk, "Rico Blanco", "rico@example.com", "09175556666")
        archive_property(listing.pk)

        with self.assertRaises(PropertyUnavailable):
            update_inquiry_status(inquiry.pk, InquiryStatus.RESERVED, self.agent)

        inquiry.refresh_from_db()
        self.assertEqual(inquiry.status, InquiryStatus.NEW)

    def test_reserved_property_cannot_be_archived(self) -> None:
        listing = self._create()
        inquiry = create_inquiry(listing.pk, "Rico Blanco", "rico@example.com", "09175556666")
        update_inquiry_status(inquiry.pk, InquiryStatus.RESERVED, self.agent)

        with self.assertRaises(PropertyUnavailable):
            archive_property(listing.pk)

        listing.refresh_from_db()
        self.assertEqual(listing.status, Property.Status.RESERVED)
        self.assertEqual(listing.reserved_by_inquiry_id, inquiry.pk)

    def test_reserved_property_still_accepts_listing_edits(self) -> None:
        listing = self._create()
        inquiry = create_inquiry(listing.pk, "Rico Blanco", "rico@example.com", "09175556666")
        update_inquiry_status(inquiry.pk, InquiryStatus.RESERVED, self.agent)

        updated = update_property(listing.pk, {"description": "Titled, ready for transfer"})

        self.assertEqual(updated.status, Property.Status.RESERVED)
        self.assertEqual(Inquiry.objects.get(pk=inquiry.pk).status, InquiryStatus.RESERVED)


class PropertySelectorTests(TestCase):
    def setUp(self) -> None:
        self.house = Property.objects.create(
            title="House in Quezon City",
            property_type=Property.PropertyType.HOUSE,
            price=Decimal("9000000.00"),
            location="Quezon City",
        )
        self.condo = Property.objects.create(
            title="Studio in BGC",
            property_type=Property.PropertyType.CONDO,
            price=Decimal("4000000.00"),
            location="Taguig City",
            status=Property.Status.ARCHIVED,
        )

    def test_filters(self) -> None:
        self.assertEqual(list(list_properties(property_type=Property.PropertyType.HOUSE)), [self.house])
        self.assertEqual(list(list_properties(status=Property.Status.ARCHIVED)), [self.condo])
        self.assertEqual(list(list_properties(max_price=Decimal("5000000"))), [self.condo])
        self.assertEqual(list(list_properties(min_price=Decimal("5000000"))), [self.house])
        self.assertEqual(list(list_properties(location="quezon")), [self.house])

    def test_get_property(self) -> None:
        self.assertEqual(get_property(self.house.pk), self.house)
        with self.assertRaises(NotFound):
            get_property(404)
