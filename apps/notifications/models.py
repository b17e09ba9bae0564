"""Notification model.

A persisted inbox entry created by ``DatabaseSink`` for every recipient of
a domain event (inquiry assignment, status change, property status change,
calendar booking). Each notification can be marked as read.
"""

from __future__ import annotations

from django.db import models  # type: ignore


class Notification(models.Model):
    """A message about a domain event, addressed to one user."""

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notifications'
    )
    kind = models.CharField(max_length=64, db_index=True)
    title = models.CharField(max_length=255)
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"

    def mark_read(self) -> None:
        self.is_read = True
        self.save(update_fields=['is_read'])
