"""Inquiry domain models.

An Inquiry is a buyer's interest in exactly one property. Inquiries are
never deleted: terminal states stay in the table for audit, and every
status change appends an ``InquiryStatusHistory`` row.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.users.models import PHONE_VALIDATOR


class InquiryStatus(models.TextChoices):
    NEW = "new", _("New")
    CONTACTED = "contacted", _("Contacted")
    VIEWING_SCHEDULED = "viewing_scheduled", _("Viewing scheduled")
    VIEWING_COMPLETED = "viewing_completed", _("Viewing completed")
    NEGOTIATING = "negotiating", _("Negotiating")
    DEPOSIT_PAID = "deposit_paid", _("Deposit paid")
    RESERVED = "reserved", _("Reserved")
    PAYMENT_PROCESSING = "payment_processing", _("Payment processing")
    SOLD = "sold", _("Sold")
    CANCELLED = "cancelled", _("Cancelled")
    EXPIRED = "expired", _("Expired")


TERMINAL_STATUSES = (InquiryStatus.SOLD, InquiryStatus.CANCELLED, InquiryStatus.EXPIRED)

ACTIVE_STATUSES = tuple(s for s in InquiryStatus if s not in TERMINAL_STATUSES)

# Statuses that free the client to submit a new inquiry for the same property.
RELEASED_STATUSES = (InquiryStatus.CANCELLED, InquiryStatus.EXPIRED)


class InquiryQuerySet(models.QuerySet):
    def active(self):
        return self.exclude(status__in=TERMINAL_STATUSES)

    def unreleased(self):
        return self.exclude(status__in=RELEASED_STATUSES)

    def for_client(self, email: str, phone: str):
        return self.filter(models.Q(client_email__iexact=email) | models.Q(client_phone=phone))


class Inquiry(models.Model):
    """Buyer inquiry against a single property."""

    Status = InquiryStatus

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="inquiries",
    )
    client_name = models.CharField(max_length=255)
    client_email = models.EmailField()
    client_phone = models.CharField(max_length=20, validators=[PHONE_VALIDATOR])
    message = models.TextField(blank=True)
    status = models.CharField(
        max_length=32,
        choices=InquiryStatus.choices,
        default=InquiryStatus.NEW,
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_inquiries",
    )
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    commission_locked = models.BooleanField(
        default=False,
        help_text=_("Set once a deposit is paid; freezes the assigned agent."),
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = InquiryQuerySet.as_manager()

    class Meta:
        verbose_name = _("Inquiry")
        verbose_name_plural = _("Inquiries")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["property", "status"], name="inquiry_property_status_idx"),
            models.Index(fields=["assigned_to", "status"], name="inquiry_agent_status_idx"),
            models.Index(fields=["client_email"], name="inquiry_client_email_idx"),
            models.Index(fields=["client_phone"], name="inquiry_client_phone_idx"),
        ]

    def __str__(self) -> str:
        return f"Inquiry #{self.pk} from {self.client_name} ({self.status})"


class InquiryStatusHistory(models.Model):
    """Append-only audit entry, one per status transition."""

    inquiry = models.ForeignKey(Inquiry, on_delete=models.CASCADE, related_name="history")
    old_status = models.CharField(max_length=32, choices=InquiryStatus.choices, blank=True)
    new_status = models.CharField(max_length=32, choices=InquiryStatus.choices)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("Empty for transitions made by the system."),
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("Inquiry status change")
        verbose_name_plural = _("Inquiry status history")
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"Inquiry #{self.inquiry_id}: {self.old_status or '-'} -> {self.new_status}"

    @classmethod
    def record(cls, inquiry: Inquiry, old_status: str, new_status: str, actor=None, notes=None):
        return cls.objects.create(
            inquiry=inquiry,
            old_status=old_status or "",
            new_status=new_status,
            changed_by=actor,
            notes=notes or "",
        )

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise ValueError("Status history entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        raise ValueError("Status history entries cannot be deleted.")
