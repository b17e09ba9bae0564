"""Tests for inquiry read queries and agent stats."""

from __future__ import annotations

from decimal import Decimal

import pytest

from apps.inquiries.models import Inquiry, InquiryStatus
from apps.inquiries.selectors import agent_stats, get_inquiry, inquiry_history, list_inquiries
from apps.inquiries.services import update_inquiry_status
from apps.properties.models import Property
from shared.domain.exceptions import NotFound

pytestmark = pytest.mark.django_db


def add_inquiry(listing, n: int, **fields) -> Inquiry:
    return Inquiry.objects.create(
        property=listing,
        client_name=f"Client {n}",
        client_email=f"client{n}@example.com",
        client_phone=f"0918000000{n}",
        **fields,
    )


def test_list_inquiries_filters(listing, agent, other_agent):
    mine = add_inquiry(listing, 1, assigned_to=agent, status=InquiryStatus.CONTACTED)
    add_inquiry(listing, 2, assigned_to=other_agent)

    assert list(list_inquiries(assigned_to=agent.pk)) == [mine]
    assert list(list_inquiries(status=InquiryStatus.CONTACTED)) == [mine]
    assert list_inquiries(property_id=listing.pk).count() == 2


def test_get_inquiry_missing():
    with pytest.raises(NotFound):
        get_inquiry(42)


def test_history_is_newest_first(listing, agent):
    inquiry = add_inquiry(listing, 1)
    update_inquiry_status(inquiry.pk, InquiryStatus.CONTACTED, agent)
    update_inquiry_status(inquiry.pk, InquiryStatus.NEGOTIATING, agent)

    statuses = [entry.new_status for entry in inquiry_history(inquiry.pk)]

    assert statuses == [InquiryStatus.NEGOTIATING, InquiryStatus.CONTACTED]


def test_agent_stats(listing, agent, other_agent, admin):
    second_listing = Property.objects.create(
        title="Lot in Batangas",
        property_type=Property.PropertyType.LOT,
        price=Decimal("900000.00"),
        location="Batangas",
        agent=agent,
    )
    add_inquiry(listing, 1, assigned_to=agent, status=InquiryStatus.SOLD, commission_amount=Decimal("100000.00"))
    add_inquiry(second_listing, 2, assigned_to=agent, status=InquiryStatus.SOLD, commission_amount=Decimal("25000.00"))
    add_inquiry(listing, 3, assigned_to=agent, status=InquiryStatus.NEGOTIATING, commission_amount=Decimal("5000.00"))
    add_inquiry(listing, 4, assigned_to=other_agent, status=InquiryStatus.CANCELLED)

    stats = agent_stats()

    assert [row["agent_id"] for row in stats] == [agent.pk, other_agent.pk]
    top = stats[0]
    assert top["total_properties"] == 2
    assert top["sold_inquiries"] == 2
    assert top["active_inquiries"] == 1
    assert top["total_commission"] == Decimal("125000.00")

    idle = stats[1]
    assert idle["total_properties"] == 0
    assert idle["sold_inquiries"] == 0
    assert idle["active_inquiries"] == 0
    assert idle["total_commission"] == Decimal("0")


def test_agent_stats_for_one_agent(listing, agent, other_agent):
    stats = agent_stats(agent_id=other_agent.pk)

    assert len(stats) == 1
    assert stats[0]["email"] == other_agent.email
