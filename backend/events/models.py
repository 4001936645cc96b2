# events/models.py
"""
Audit log storage.

One BusinessEvent row per business operation. Rows are never updated or
deleted through the application.
"""
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from accounts.models import Company


class BusinessEvent(models.Model):
    """
    Immutable event record.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="events",
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Event type name (e.g., 'invoice.sent')",
    )

    aggregate_type = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Entity type (e.g., 'Invoice', 'Transaction')",
    )

    aggregate_id = models.CharField(
        max_length=64,
        db_index=True,
    )

    # Deduplication across retries
    idempotency_key = models.CharField(
        max_length=255,
        editable=False,
        help_text="Unique idempotency key per company",
    )

    data = models.JSONField(
        default=dict,
        help_text="Event data payload",
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
    )

    caused_by_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="caused_events",
    )

    recorded_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
    )

    occurred_at = models.DateTimeField(
        db_index=True,
        default=timezone.now,
    )

    class Meta:
        ordering = ["-occurred_at"]
        indexes = [
            models.Index(fields=["company", "aggregate_type", "aggregate_id"]),
            models.Index(fields=["company", "event_type", "occurred_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "idempotency_key"],
                name="uniq_event_company_idempotency_key",
            ),
        ]

    def __str__(self):
        return f"{self.event_type} {self.aggregate_type}#{self.aggregate_id}"

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            raise ValueError("Business events are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Business events are immutable.")
