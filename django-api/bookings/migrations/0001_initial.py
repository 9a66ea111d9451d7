import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Room",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("room_number", models.PositiveIntegerField(unique=True)),
                ("link", models.URLField(max_length=500)),
                ("label", models.CharField(blank=True, max_length=100)),
            ],
            options={
                "ordering": ["room_number"],
            },
        ),
        migrations.CreateModel(
            name="Session",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("starts_at", models.DateTimeField()),
                ("duration_minutes", models.PositiveIntegerField(default=60)),
                ("seat_cap", models.PositiveIntegerField(default=5)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("cancelled", "Cancelled"),
                            ("completed", "Completed"),
                        ],
                        default="scheduled",
                        max_length=20,
                    ),
                ),
                ("price_cents", models.PositiveIntegerField(default=0)),
                ("room_link", models.URLField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["starts_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "starts_at"],
                        name="session_status_starts_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("seat_cap__gte", 1)),
                        name="session_seat_cap_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("duration_minutes__gt", 0)),
                        name="session_duration_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("price_cents__gte", 0)),
                        name="session_price_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("participant_id", models.CharField(max_length=255)),
                (
                    "participant_email",
                    models.EmailField(blank=True, max_length=254, null=True),
                ),
                (
                    "participant_timezone",
                    models.CharField(blank=True, max_length=64, null=True),
                ),
                ("reminder_24h_at", models.DateTimeField(blank=True, null=True)),
                ("reminder_24h_sent", models.BooleanField(default=False)),
                ("reminder_1h_at", models.DateTimeField(blank=True, null=True)),
                ("reminder_1h_sent", models.BooleanField(default=False)),
                ("confirmation_sent", models.BooleanField(default=False)),
                ("room_number", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to="bookings.session",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["session", "created_at"],
                        name="reservation_roster_idx",
                    ),
                    models.Index(
                        fields=["reminder_24h_sent", "reminder_24h_at"],
                        name="reservation_24h_due_idx",
                    ),
                    models.Index(
                        fields=["reminder_1h_sent", "reminder_1h_at"],
                        name="reservation_1h_due_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("session", "participant_id"),
                        name="reservation_unique_participant",
                    )
                ],
            },
        ),
    ]
