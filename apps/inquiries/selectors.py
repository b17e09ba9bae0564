"""Read-only queries over inquiries for reporting and export."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Count, DecimalField, IntegerField, OuterRef, Q, Subquery, Sum, Value  # type: ignore
from django.db.models.functions import Coalesce  # type: ignore

from apps.properties.models import Property
from shared.domain.exceptions import NotFound

from .models import ACTIVE_STATUSES, Inquiry, InquiryStatus, InquiryStatusHistory


def list_inquiries(
    *,
    status: Optional[str] = None,
    property_id: Optional[int] = None,
    assigned_to: Optional[int] = None,
):
    """Inquiries newest first, optionally filtered."""

    qs = Inquiry.objects.select_related("property", "assigned_to")
    if status:
        qs = qs.filter(status=status)
    if property_id:
        qs = qs.filter(property_id=property_id)
    if assigned_to:
        qs = qs.filter(assigned_to_id=assigned_to)
    return qs.order_by("-created_at", "-id")


def get_inquiry(inquiry_id: int) -> Inquiry:
    try:
        return Inquiry.objects.select_related("property", "assigned_to").get(pk=inquiry_id)
    except Inquiry.DoesNotExist:
        raise NotFound("Inquiry", inquiry_id)


def inquiry_history(inquiry_id: int):
    """Status history newest first, with the acting user joined."""

    return (
        InquiryStatusHistory.objects.filter(inquiry_id=inquiry_id)
        .select_related("changed_by")
        .order_by("-created_at", "-id")
    )


def agent_stats(agent_id: Optional[int] = None) -> list[dict]:
    """
    Per-agent performance summary.

    Returns one dict per active agent with ``total_properties``,
    ``sold_inquiries``, ``active_inquiries`` and ``total_commission`` (sum over
    sold inquiries), ordered by commission then sales.
    """
    User = get_user_model()
    qs = User.objects.agents()
    if agent_id:
        qs = qs.filter(pk=agent_id)

    listed = (
        Property.objects.filter(agent=OuterRef("pk"))
        .order_by()
        .values("agent")
        .annotate(count=Count("pk"))
        .values("count")
    )
    zero = Value(Decimal("0.00"), output_field=DecimalField(max_digits=14, decimal_places=2))
    qs = qs.annotate(
        # Subquery keeps the property join from multiplying the commission sum.
        total_properties=Coalesce(Subquery(listed, output_field=IntegerField()), 0),
        sold_inquiries=Count(
            "assigned_inquiries",
            filter=Q(assigned_inquiries__status=InquiryStatus.SOLD),
            distinct=True,
        ),
        active_inquiries=Count(
            "assigned_inquiries",
            filter=Q(assigned_inquiries__status__in=ACTIVE_STATUSES),
            distinct=True,
        ),
        total_commission=Coalesce(
            Sum(
                "assigned_inquiries__commission_amount",
                filter=Q(assigned_inquiries__status=InquiryStatus.SOLD),
            ),
            zero,
        ),
    ).order_by("-total_commission", "-sold_inquiries", "full_name")

    return [
        {
            "agent_id": agent.pk,
            "full_name": agent.full_name,
            "email": agent.email,
            "total_properties": agent.total_properties,
            "sold_inquiries": agent.sold_inquiries,
            "active_inquiries": agent.active_inquiries,
            "total_commission": agent.total_commission,
        }
        for agent in qs
    ]
