"""Property services.

Listing management for staff (create, edit, archive) and the reservation
primitives shared by the reservation coordinator and the expiry sweeper.

The reservation fields are written only by ``apply_reservation`` and
``clear_reservation``, on a Property the caller has already row-locked
inside a unit of work. Listing edits may move a property between
``available`` and ``archived``; ``reserved`` and ``sold`` follow the
inquiry that won it.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.contrib.auth import get_user_model  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.retry import retry_on_transient
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import NotFound, PropertyUnavailable, ValidationFailure

from .events import PropertyStatusChanged
from .models import Property

logger = logging.getLogger(__name__)

RESERVATION_FIELDS = [
    "status",
    "reservation_type",
    "reservation_date",
    "reservation_expiry",
    "reserved_by_inquiry",
    "updated_at",
]


def lock_property(uow, property_id: int) -> Property:
    """Load the property under a row lock held until the unit of work ends."""

    try:
        return uow.lock(Property.objects.filter(pk=property_id)).get()
    except Property.DoesNotExist:
        raise NotFound("Property", property_id)


def apply_reservation(
    property_obj: Property,
    inquiry_id: int,
    reservation_type: str,
    expiry_days: int,
    *,
    now=None,
) -> PropertyStatusChanged:
    """Commit the property to one inquiry.

    ``deposit`` reserves the property until ``now + expiry_days``;
    ``full_payment`` marks it sold and never expires.
    """

    now = now or timezone.now()
    old_status = property_obj.status

    if reservation_type == Property.ReservationType.FULL_PAYMENT:
        property_obj.status = Property.Status.SOLD
        property_obj.reservation_expiry = None
    elif reservation_type == Property.ReservationType.DEPOSIT:
        property_obj.status = Property.Status.RESERVED
        property_obj.reservation_expiry = now + timedelta(days=expiry_days)
    else:
        raise ValueError(f"Unsupported reservation type: {reservation_type}")

    property_obj.reservation_type = reservation_type
    property_obj.reservation_date = now
    property_obj.reserved_by_inquiry_id = inquiry_id
    property_obj.save(update_fields=RESERVATION_FIELDS)

    logger.info(
        f"Property {property_obj.pk} {old_status} -> {property_obj.status} "
        f"({reservation_type}) for inquiry {inquiry_id}"
    )
    return _status_event(property_obj, old_status)


def clear_reservation(property_obj: Property) -> PropertyStatusChanged:
    """Return the property to the market and drop every reservation field."""

    old_status = property_obj.status
    property_obj.status = Property.Status.AVAILABLE
    property_obj.reservation_type = Property.ReservationType.NONE
    property_obj.reservation_date = None
    property_obj.reservation_expiry = None
    property_obj.reserved_by_inquiry = None
    property_obj.save(update_fields=RESERVATION_FIELDS)

    logger.info(f"Property {property_obj.pk} {old_status} -> available, reservation cleared")
    return _status_event(property_obj, old_status)


def _status_event(property_obj: Property, old_status: str) -> PropertyStatusChanged:
    return PropertyStatusChanged(
        property_id=property_obj.pk,
        old_status=old_status,
        new_status=property_obj.status,
        reservation_type=property_obj.reservation_type,
        reserved_by_inquiry_id=property_obj.reserved_by_inquiry_id,
        reservation_expiry=property_obj.reservation_expiry,
    )


# ============================================================================
# LISTING MANAGEMENT
# ============================================================================

LISTING_FIELDS = (
    "title",
    "description",
    "property_type",
    "price",
    "location",
    "address",
    "bedrooms",
    "bathrooms",
    "floor_area",
    "lot_area",
    "agent_id",
)

UPDATABLE_FIELDS = LISTING_FIELDS + ("status",)

# Statuses staff may set by hand; the others are set by winning an inquiry.
MANUAL_STATUSES = (Property.Status.AVAILABLE, Property.Status.ARCHIVED)


def _ensure_manual_status(status: str) -> None:
    if status not in Property.Status.values:
        raise ValidationFailure(f"Unknown property status: {status}", field="status")
    if status not in MANUAL_STATUSES:
        raise ValidationFailure(
            f"Status {status} is set by the inquiry that wins the property",
            field="status",
        )


def _ensure_agent(agent_id: int) -> None:
    if not get_user_model().objects.filter(pk=agent_id).exists():
        raise NotFound("Agent", agent_id)


@retry_on_transient
def create_property(
    *,
    title: str,
    property_type: str,
    price,
    location: str,
    agent_id: int | None = None,
    description: str = "",
    address: str = "",
    bedrooms: int | None = None,
    bathrooms: int | None = None,
    floor_area=None,
    lot_area=None,
    status: str = Property.Status.AVAILABLE,
) -> Property:
    """Add a listing, available unless created straight into the archive."""

    _ensure_manual_status(status)

    with DjangoUnitOfWork():
        if agent_id is not None:
            _ensure_agent(agent_id)

        property_obj = Property.objects.create(
            title=title,
            description=description or "",
            property_type=property_type,
            price=price,
            location=location,
            address=address or "",
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            floor_area=floor_area,
            lot_area=lot_area,
            agent_id=agent_id,
            status=status,
        )

    logger.info(f"Property {property_obj.pk} created ({status}) for agent {agent_id}")
    return property_obj


@retry_on_transient
def update_property(property_id: int, patch: dict, *, sink=None) -> Property:
    """Apply a partial listing edit; only keys present in ``patch`` change.

    A status edit is limited to ``available`` / ``archived`` and is refused
    while the property is reserved or sold. It publishes
    ``property_status_changed``.
    """

    reservation_keys = {"reservation_type", "reservation_date", "reservation_expiry", "reserved_by_inquiry_id"}
    if reservation_keys & set(patch):
        raise ValidationFailure(
            "Reservation fields are managed by the inquiry lifecycle",
            fields=sorted(reservation_keys & set(patch)),
        )

    unknown = set(patch) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationFailure(f"Cannot update fields: {', '.join(sorted(unknown))}")

    with DjangoUnitOfWork(sink=sink) as uow:
        property_obj = lock_property(uow, property_id)
        if not patch:
            return property_obj

        if patch.get("agent_id") is not None:
            _ensure_agent(patch["agent_id"])

        old_status = property_obj.status
        new_status = patch.get("status", old_status)
        status_changed = new_status != old_status

        if status_changed:
            _ensure_manual_status(new_status)
            if property_obj.is_committed:
                raise PropertyUnavailable(
                    f"Property {property_id} is {old_status} by inquiry "
                    f"{property_obj.reserved_by_inquiry_id}",
                    property_id=property_id,
                    reserved_by_inquiry_id=property_obj.reserved_by_inquiry_id,
                )

        for field, value in patch.items():
            setattr(property_obj, field, value)
        changed = [f[:-3] if f.endswith("_id") else f for f in patch]
        property_obj.save(update_fields=changed + ["updated_at"])

        if status_changed:
            uow.add_event(_status_event(property_obj, old_status))

    logger.info(f"Property {property_id} updated: {sorted(patch)}")
    return property_obj


def archive_property(property_id: int, *, sink=None) -> Property:
    """Take a listing off the market. Archived properties cannot be won."""
    return update_property(property_id, {"status": Property.Status.ARCHIVED}, sink=sink)
