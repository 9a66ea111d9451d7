"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models
from django.db.models import Q
from django.utils import timezone


class Session(models.Model):
    """Persistence model for bookable sessions."""

    class Status(models.TextChoices):
        SCHEDULED = "scheduled", "Scheduled"
        CANCELLED = "cancelled", "Cancelled"
        COMPLETED = "completed", "Completed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    starts_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=60)
    seat_cap = models.PositiveIntegerField(default=5)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.SCHEDULED
    )
    price_cents = models.PositiveIntegerField(default=0)
    room_link = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["starts_at"]
        indexes = [
            models.Index(fields=["status", "starts_at"], name="session_status_starts_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(seat_cap__gte=1), name="session_seat_cap_positive"
            ),
            models.CheckConstraint(
                condition=Q(duration_minutes__gt=0), name="session_duration_positive"
            ),
            models.CheckConstraint(
                condition=Q(price_cents__gte=0), name="session_price_non_negative"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.title} - {self.starts_at:%Y-%m-%d %H:%M} UTC"


class Reservation(models.Model):
    """Persistence model for a held seat.

    The (session, participant_id) uniqueness constraint is what makes a
    repeated insert detectable as a duplicate.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(
        Session, on_delete=models.CASCADE, related_name="reservations"
    )
    participant_id = models.CharField(max_length=255)
    participant_email = models.EmailField(blank=True, null=True)
    participant_timezone = models.CharField(max_length=64, blank=True, null=True)
    reminder_24h_at = models.DateTimeField(blank=True, null=True)
    reminder_24h_sent = models.BooleanField(default=False)
    reminder_1h_at = models.DateTimeField(blank=True, null=True)
    reminder_1h_sent = models.BooleanField(default=False)
    confirmation_sent = models.BooleanField(default=False)
    room_number = models.PositiveIntegerField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["session", "created_at"], name="reservation_roster_idx"),
            models.Index(
                fields=["reminder_24h_sent", "reminder_24h_at"],
                name="reservation_24h_due_idx",
            ),
            models.Index(
                fields=["reminder_1h_sent", "reminder_1h_at"],
                name="reservation_1h_due_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "participant_id"],
                name="reservation_unique_participant",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.participant_id} @ {self.session_id}"


class Room(models.Model):
    """Lookup table from sub-room number to its external meeting link."""

    room_number = models.PositiveIntegerField(unique=True)
    link = models.URLField(max_length=500)
    label = models.CharField(max_length=100, blank=True)

    class Meta:
        ordering = ["room_number"]

    def __str__(self) -> str:
        return self.label or f"Room {self.room_number}"
