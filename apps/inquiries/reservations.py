"""Reservation coordination.

Ties a property's availability to exactly one winning inquiry, and
reclaims deposit reservations whose hold period has lapsed.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.properties.models import Property
from apps.properties.services import apply_reservation, clear_reservation, lock_property
from shared.application.retry import retry_on_transient
from shared.application.uow import DjangoUnitOfWork, unit_of_work
from shared.domain.exceptions import PropertyUnavailable, ValidationFailure

from .events import InquiryStatusChanged
from .models import RELEASED_STATUSES, Inquiry, InquiryStatus, InquiryStatusHistory

logger = logging.getLogger(__name__)


def default_expiry_days() -> int:
    return int(getattr(settings, "RESERVATION_DEPOSIT_EXPIRY_DAYS", 30))


def _ensure_can_win(property_obj: Property, inquiry_id: int) -> None:
    if property_obj.status == Property.Status.ARCHIVED:
        raise PropertyUnavailable(
            f"Property {property_obj.pk} is archived",
            property_id=property_obj.pk,
        )

    holder_id = property_obj.reserved_by_inquiry_id
    if not property_obj.is_committed or holder_id in (None, inquiry_id):
        return

    holder_active = (
        Inquiry.objects.filter(pk=holder_id).exclude(status__in=RELEASED_STATUSES).exists()
    )
    if holder_active:
        raise PropertyUnavailable(
            f"Property {property_obj.pk} is already {property_obj.status} by inquiry {holder_id}",
            property_id=property_obj.pk,
            reserved_by_inquiry_id=holder_id,
        )


def cancel_competing_inquiries(uow, property_id: int, winner_id: int, actor=None) -> list[int]:
    """Cancel every other still-active inquiry on the property."""

    siblings = list(
        uow.lock(
            Inquiry.objects.filter(property_id=property_id)
            .exclude(pk=winner_id)
            .active()
        )
    )
    if not siblings:
        return []

    note = f"Cancelled automatically: property committed to inquiry #{winner_id}"
    InquiryStatusHistory.objects.bulk_create(
        [
            InquiryStatusHistory(
                inquiry=sibling,
                old_status=sibling.status,
                new_status=InquiryStatus.CANCELLED,
                changed_by=actor,
                notes=note,
            )
            for sibling in siblings
        ]
    )
    Inquiry.objects.filter(pk__in=[s.pk for s in siblings]).update(
        status=InquiryStatus.CANCELLED,
        updated_at=timezone.now(),
    )

    for sibling in siblings:
        uow.add_event(
            InquiryStatusChanged(
                inquiry_id=sibling.pk,
                property_id=property_id,
                old_status=sibling.status,
                new_status=InquiryStatus.CANCELLED,
                assigned_to=sibling.assigned_to_id,
                changed_by=getattr(actor, "pk", None),
                commission_locked=sibling.commission_locked,
                commission_amount=sibling.commission_amount,
            )
        )

    cancelled = [s.pk for s in siblings]
    logger.info(f"Cancelled {len(cancelled)} competing inquiries on property {property_id}: {cancelled}")
    return cancelled


@retry_on_transient
def win_inquiry(
    property_id: int,
    inquiry_id: int,
    reservation_type: str,
    expiry_days: Optional[int] = None,
    *,
    actor=None,
    uow: Optional[DjangoUnitOfWork] = None,
    sink=None,
) -> Property:
    """Commit the property to ``inquiry_id`` and cancel its competitors.

    Runs inside the caller's unit of work when one is given, so the property
    update, the cascade and the caller's own writes commit together.
    """

    if expiry_days is None:
        expiry_days = default_expiry_days()

    with unit_of_work(uow, sink=sink) as work:
        property_obj = lock_property(work, property_id)

        if not Inquiry.objects.filter(pk=inquiry_id, property_id=property_id).exists():
            raise ValidationFailure(
                f"Inquiry {inquiry_id} does not belong to property {property_id}",
                inquiry_id=inquiry_id,
                property_id=property_id,
            )

        _ensure_can_win(property_obj, inquiry_id)

        work.add_event(apply_reservation(property_obj, inquiry_id, reservation_type, expiry_days))
        cancel_competing_inquiries(work, property_id, inquiry_id, actor=actor)

    return property_obj


@retry_on_transient
def reclaim_property(property_id: int, *, now=None, sink=None) -> bool:
    """Release one lapsed deposit reservation. Returns False when nothing was due."""

    now = now or timezone.now()

    with DjangoUnitOfWork(sink=sink) as uow:
        property_obj = uow.lock(Property.objects.filter(pk=property_id)).first()
        # Re-checked under the lock: a concurrent sweep may have reclaimed it.
        if property_obj is None or not property_obj.reservation_lapsed(now):
            return False

        inquiry_id = property_obj.reserved_by_inquiry_id
        uow.add_event(clear_reservation(property_obj))

        inquiry = None
        if inquiry_id:
            inquiry = uow.lock(Inquiry.objects.filter(pk=inquiry_id)).first()

        if inquiry is not None and inquiry.status != InquiryStatus.EXPIRED:
            old_status = inquiry.status
            inquiry.status = InquiryStatus.EXPIRED
            inquiry.save(update_fields=["status", "updated_at"])
            InquiryStatusHistory.record(
                inquiry,
                old_status,
                InquiryStatus.EXPIRED,
                actor=None,
                notes="Deposit reservation expired",
            )
            uow.add_event(
                InquiryStatusChanged(
                    inquiry_id=inquiry.pk,
                    property_id=property_id,
                    old_status=old_status,
                    new_status=InquiryStatus.EXPIRED,
                    assigned_to=inquiry.assigned_to_id,
                    changed_by=None,
                    commission_locked=inquiry.commission_locked,
                    commission_amount=inquiry.commission_amount,
                )
            )

    logger.info(f"Reclaimed property {property_id}; inquiry {inquiry_id} expired")
    return True


def expire_reservations(*, now=None, sink=None) -> int:
    """
    Reclaim every deposit reservation whose expiry has passed.

    Each property is its own atomic unit; a failure is logged and the sweep
    moves on. Idempotent: already reclaimed properties no longer match.

    Returns:
        int: number of properties returned to the market
    """
    now = now or timezone.now()

    due_ids = list(
        Property.objects.filter(
            status=Property.Status.RESERVED,
            reservation_type=Property.ReservationType.DEPOSIT,
            reservation_expiry__lt=now,
        )
        .order_by("reservation_expiry")
        .values_list("pk", flat=True)
    )

    reclaimed = 0
    for property_id in due_ids:
        try:
            if reclaim_property(property_id, now=now, sink=sink):
                reclaimed += 1
        except Exception as e:
            logger.error(f"Error reclaiming property {property_id}: {e}", exc_info=True)

    if due_ids:
        logger.info(f"Expired {reclaimed} of {len(due_ids)} lapsed reservations")

    return reclaimed
