"""Property domain models.

A Property is a listing. Its ``status`` ties it to at most one winning
inquiry through the ``reserved_by_inquiry`` back-reference; the property
never owns the inquiry.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Property(models.Model):
    """Real-estate listing."""

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        RESERVED = "reserved", _("Reserved")
        SOLD = "sold", _("Sold")
        ARCHIVED = "archived", _("Archived")

    class PropertyType(models.TextChoices):
        HOUSE = "house", _("House")
        CONDO = "condo", _("Condominium")
        TOWNHOUSE = "townhouse", _("Townhouse")
        LOT = "lot", _("Lot")
        COMMERCIAL = "commercial", _("Commercial")

    class ReservationType(models.TextChoices):
        NONE = "none", _("None")
        DEPOSIT = "deposit", _("Deposit")
        FULL_PAYMENT = "full_payment", _("Full payment")

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    property_type = models.CharField(max_length=20, choices=PropertyType.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    location = models.CharField(max_length=255)
    address = models.CharField(max_length=255, blank=True)
    bedrooms = models.PositiveSmallIntegerField(null=True, blank=True)
    bathrooms = models.PositiveSmallIntegerField(null=True, blank=True)
    floor_area = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    lot_area = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="properties",
    )
    reservation_type = models.CharField(
        max_length=20,
        choices=ReservationType.choices,
        default=ReservationType.NONE,
    )
    reservation_date = models.DateTimeField(null=True, blank=True)
    reservation_expiry = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("Set only for deposit reservations; the hold lapses after this moment."),
    )
    reserved_by_inquiry = models.ForeignKey(
        "inquiries.Inquiry",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        db_constraint=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="property_status_idx"),
            models.Index(
                fields=["status", "reservation_type", "reservation_expiry"],
                name="property_reservation_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.status})"

    @property
    def is_committed(self) -> bool:
        return self.status in (self.Status.RESERVED, self.Status.SOLD)

    def reservation_lapsed(self, now=None) -> bool:
        now = now or timezone.now()
        return bool(
            self.status == self.Status.RESERVED
            and self.reservation_type == self.ReservationType.DEPOSIT
            and self.reservation_expiry
            and self.reservation_expiry < now
        )
