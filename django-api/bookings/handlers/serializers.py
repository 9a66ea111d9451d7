"""Serializers for transforming domain models to API responses and admin input to drafts."""

from decimal import ROUND_HALF_UP, Decimal

from rest_framework import serializers

from bookings.domain import Capacity, Money, SessionDraft, SessionStatus
from bookings.domain.timezones import LOCAL_INPUT_FORMAT, local_to_utc, utc_to_local_input


class SessionListingSerializer(serializers.Serializer):
    """Serializer for a SessionListing (session plus live occupancy)."""

    id = serializers.CharField(source="session.id")
    title = serializers.CharField(source="session.title")
    starts_at = serializers.DateTimeField(source="session.starts_at")
    ends_at = serializers.DateTimeField(source="session.ends_at")
    duration_minutes = serializers.IntegerField(source="session.duration_minutes")
    status = serializers.CharField(source="session.status.value")
    price_cents = serializers.IntegerField(source="session.price.cents")
    price = serializers.CharField(source="session.price")
    seat_cap = serializers.IntegerField(source="session.seat_cap.value")
    capacity = serializers.IntegerField()
    seats_taken = serializers.IntegerField()
    seats_left = serializers.IntegerField()
    is_full = serializers.BooleanField()
    mode = serializers.CharField(source="mode.value")
    tier = serializers.CharField(source="tier.value")


class AdminSessionSerializer(serializers.Serializer):
    """Serializer for the Session domain model as admins see it."""

    id = serializers.CharField()
    title = serializers.CharField()
    starts_at = serializers.DateTimeField()
    starts_at_local = serializers.SerializerMethodField()
    duration_minutes = serializers.IntegerField()
    seat_cap = serializers.IntegerField(source="seat_cap.value")
    status = serializers.CharField(source="status.value")
    price_cents = serializers.IntegerField(source="price.cents")
    room_link = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)

    def get_starts_at_local(self, session) -> str:
        return utc_to_local_input(session.starts_at, self.context["reference_timezone"])


class ReservationSerializer(serializers.Serializer):
    """Serializer for the Reservation domain model."""

    id = serializers.CharField()
    session_id = serializers.CharField()
    participant_id = serializers.CharField(source="participant_id.value")
    created_at = serializers.DateTimeField()
    confirmation_sent = serializers.BooleanField()
    room_number = serializers.IntegerField(allow_null=True)


def dollars_to_cents(amount: Decimal) -> int:
    cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, int(cents))


class SessionInputSerializer(serializers.Serializer):
    """Admin input for creating or replacing a session.

    ``starts_at_local`` is wall time in the reference timezone passed in
    the serializer context.
    """

    title = serializers.CharField(max_length=255)
    starts_at_local = serializers.CharField()
    duration_minutes = serializers.IntegerField(min_value=1, default=60)
    seat_cap = serializers.IntegerField(min_value=1, default=5)
    status = serializers.ChoiceField(
        choices=[s.value for s in SessionStatus],
        default=SessionStatus.SCHEDULED.value,
    )
    price_dollars = serializers.DecimalField(
        max_digits=8, decimal_places=2, min_value=Decimal("0"), default=Decimal("0")
    )
    repeat_weeks = serializers.IntegerField(min_value=0, max_value=52, default=0)
    room_number = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    room_link = serializers.URLField(required=False, allow_null=True, allow_blank=True)

    def validate_title(self, value: str) -> str:
        if not value.strip():
            raise serializers.ValidationError("Title is required.")
        return value.strip()

    def validate(self, attrs: dict) -> dict:
        try:
            attrs["starts_at"] = local_to_utc(
                attrs["starts_at_local"], self.context["reference_timezone"]
            )
        except ValueError:
            raise serializers.ValidationError(
                {"starts_at_local": f"Expected local time as {LOCAL_INPUT_FORMAT}."}
            )
        return attrs

    def to_draft(self, room_link: str | None) -> SessionDraft:
        data = self.validated_data
        return SessionDraft(
            title=data["title"],
            starts_at=data["starts_at"],
            duration_minutes=data["duration_minutes"],
            seat_cap=Capacity(data["seat_cap"]),
            status=SessionStatus(data["status"]),
            price=Money(dollars_to_cents(data["price_dollars"])),
            room_link=room_link,
        )
