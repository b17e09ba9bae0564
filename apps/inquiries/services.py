"""Inquiry lifecycle services.

Every public operation here is one atomic unit: it opens a unit of work,
row-locks what it mutates, records history and domain events, and commits
or rolls back as a whole. Transitions are accepted on the target status
alone unless ``INQUIRY_STRICT_TRANSITIONS`` is enabled.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore

from apps.properties.models import Property
from apps.properties.services import clear_reservation, lock_property
from shared.application.retry import retry_on_transient
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    CommissionLocked,
    DuplicateInquiry,
    InvalidTransition,
    NotFound,
    ValidationFailure,
)

from .events import InquiryAssigned, InquiryCreated, InquiryStatusChanged
from .models import RELEASED_STATUSES, Inquiry, InquiryStatus, InquiryStatusHistory
from .reservations import win_inquiry

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)

S = InquiryStatus

_ESCAPES = (S.CANCELLED, S.EXPIRED)

# Consulted only when INQUIRY_STRICT_TRANSITIONS is on.
ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    S.NEW: (S.CONTACTED, S.VIEWING_SCHEDULED) + _ESCAPES,
    S.CONTACTED: (S.VIEWING_SCHEDULED, S.NEGOTIATING) + _ESCAPES,
    S.VIEWING_SCHEDULED: (S.VIEWING_COMPLETED, S.CONTACTED) + _ESCAPES,
    S.VIEWING_COMPLETED: (S.NEGOTIATING, S.VIEWING_SCHEDULED) + _ESCAPES,
    S.NEGOTIATING: (S.DEPOSIT_PAID, S.PAYMENT_PROCESSING, S.SOLD) + _ESCAPES,
    S.DEPOSIT_PAID: (S.RESERVED, S.PAYMENT_PROCESSING, S.SOLD) + _ESCAPES,
    S.RESERVED: (S.PAYMENT_PROCESSING, S.SOLD) + _ESCAPES,
    S.PAYMENT_PROCESSING: (S.SOLD,) + _ESCAPES,
    S.SOLD: (),
    S.CANCELLED: (),
    S.EXPIRED: (),
}

WINNING_STATUSES = {
    S.RESERVED: Property.ReservationType.DEPOSIT,
    S.SOLD: Property.ReservationType.FULL_PAYMENT,
}


def validate_transition(old_status: str, new_status: str) -> None:
    if new_status not in S.values:
        raise ValidationFailure(f"Unknown inquiry status: {new_status}", field="status")

    if not getattr(settings, "INQUIRY_STRICT_TRANSITIONS", False):
        return

    if new_status not in ALLOWED_TRANSITIONS.get(old_status, ()):
        raise InvalidTransition(
            f"Cannot move inquiry from {old_status} to {new_status}",
            old_status=old_status,
            new_status=new_status,
        )


def check_duplicate_inquiry(property_id: int, client_email: str, client_phone: str) -> Optional[Inquiry]:
    """Latest unreleased inquiry for the same client (email OR phone) and property."""

    return (
        Inquiry.objects.filter(property_id=property_id)
        .for_client(client_email, client_phone)
        .unreleased()
        .order_by("-created_at", "-id")
        .first()
    )


@retry_on_transient
def create_inquiry(
    property_id: int,
    client_name: str,
    client_email: str,
    client_phone: str,
    message: str = "",
    *,
    sink=None,
) -> Inquiry:
    """Record first buyer contact, rejecting active duplicates."""

    with DjangoUnitOfWork(sink=sink) as uow:
        # Locking the property serialises concurrent submissions for it.
        lock_property(uow, property_id)

        duplicate = check_duplicate_inquiry(property_id, client_email, client_phone)
        if duplicate is not None:
            logger.info(
                f"Rejected duplicate inquiry for property {property_id}: "
                f"inquiry {duplicate.pk} is still {duplicate.status}"
            )
            raise DuplicateInquiry(existing_inquiry_id=duplicate.pk)

        inquiry = Inquiry.objects.create(
            property_id=property_id,
            client_name=client_name,
            client_email=client_email,
            client_phone=client_phone,
            message=message or "",
            status=S.NEW,
        )
        uow.add_event(
            InquiryCreated(
                inquiry_id=inquiry.pk,
                property_id=property_id,
                client_name=client_name,
            )
        )

    logger.info(f"Inquiry {inquiry.pk} created for property {property_id}")
    return inquiry


def _lock_inquiry(uow, inquiry_id: int) -> Inquiry:
    try:
        return uow.lock(Inquiry.objects.filter(pk=inquiry_id)).get()
    except Inquiry.DoesNotExist:
        raise NotFound("Inquiry", inquiry_id)


def _get_agent(agent_id: int):
    User = get_user_model()
    try:
        return User.objects.get(pk=agent_id)
    except User.DoesNotExist:
        raise NotFound("Agent", agent_id)


def _set_agent(inquiry_id: int, agent_id: int, actor, *, guard_commission: bool, sink=None) -> Inquiry:
    with DjangoUnitOfWork(sink=sink) as uow:
        inquiry = _lock_inquiry(uow, inquiry_id)

        if guard_commission and inquiry.commission_locked:
            logger.info(f"Reassignment of inquiry {inquiry_id} blocked: commission locked")
            raise CommissionLocked(inquiry_id=inquiry_id)

        agent = _get_agent(agent_id)
        previous_agent_id = inquiry.assigned_to_id
        inquiry.assigned_to = agent
        inquiry.save(update_fields=["assigned_to", "updated_at"])

        uow.add_event(
            InquiryAssigned(
                inquiry_id=inquiry.pk,
                property_id=inquiry.property_id,
                agent_id=agent.pk,
                previous_agent_id=previous_agent_id,
                assigned_by=getattr(actor, "pk", None),
            )
        )

    logger.info(
        f"Inquiry {inquiry_id} assigned to agent {agent_id} "
        f"(was {previous_agent_id}) by {getattr(actor, 'pk', None)}"
    )
    return inquiry


@retry_on_transient
def assign_inquiry(inquiry_id: int, agent_id: int, actor: "CustomUser", *, sink=None) -> Inquiry:
    """Set the responsible agent unconditionally."""
    return _set_agent(inquiry_id, agent_id, actor, guard_commission=False, sink=sink)


@retry_on_transient
def reassign_inquiry(inquiry_id: int, new_agent_id: int, actor: "CustomUser", *, sink=None) -> Inquiry:
    """Move the inquiry to another agent unless its commission is locked."""
    return _set_agent(inquiry_id, new_agent_id, actor, guard_commission=True, sink=sink)


@retry_on_transient
def update_inquiry_status(
    inquiry_id: int,
    new_status: str,
    actor: "CustomUser",
    notes: Optional[str] = None,
    commission_amount: Optional[Decimal] = None,
    *,
    expiry_days: Optional[int] = None,
    sink=None,
) -> Inquiry:
    """Move an inquiry to ``new_status`` and apply the side effects.

    - history is appended for every call
    - ``deposit_paid`` locks the commission; a lock is never released
    - ``reserved`` / ``sold`` win the property and cancel sibling inquiries
    - ``cancelled`` / ``expired`` on the inquiry holding the property
      return the property to the market
    """

    property_id = (
        Inquiry.objects.filter(pk=inquiry_id).values_list("property_id", flat=True).first()
    )
    if property_id is None:
        raise NotFound("Inquiry", inquiry_id)

    with DjangoUnitOfWork(sink=sink) as uow:
        # Property before inquiry: the same lock order as the expiry sweeper.
        property_obj = lock_property(uow, property_id)
        inquiry = _lock_inquiry(uow, inquiry_id)

        old_status = inquiry.status
        validate_transition(old_status, new_status)

        inquiry.status = new_status
        update_fields = ["status", "updated_at"]

        if notes is not None:
            inquiry.notes = notes
            update_fields.append("notes")

        if commission_amount is not None:
            inquiry.commission_amount = commission_amount
            update_fields.append("commission_amount")

        if new_status == S.DEPOSIT_PAID or inquiry.commission_locked:
            inquiry.commission_locked = True
            update_fields.append("commission_locked")

        inquiry.save(update_fields=update_fields)

        InquiryStatusHistory.record(inquiry, old_status, new_status, actor, notes)
        uow.add_event(
            InquiryStatusChanged(
                inquiry_id=inquiry.pk,
                property_id=property_id,
                old_status=old_status,
                new_status=new_status,
                assigned_to=inquiry.assigned_to_id,
                changed_by=getattr(actor, "pk", None),
                commission_locked=inquiry.commission_locked,
                commission_amount=inquiry.commission_amount,
            )
        )

        if new_status in WINNING_STATUSES:
            win_inquiry(
                property_id,
                inquiry.pk,
                WINNING_STATUSES[new_status],
                expiry_days,
                actor=actor,
                uow=uow,
            )
        elif new_status in RELEASED_STATUSES and property_obj.reserved_by_inquiry_id == inquiry.pk:
            uow.add_event(clear_reservation(property_obj))

    logger.info(
        f"Inquiry {inquiry_id} {old_status} -> {new_status} "
        f"by {getattr(actor, 'pk', None)} (commission_locked={inquiry.commission_locked})"
    )
    return inquiry
