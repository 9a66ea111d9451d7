from django.contrib import admin

from bookings.models import Reservation, Room, Session


class ReservationInline(admin.TabularInline):
    model = Reservation
    extra = 0
    fields = [
        "participant_id",
        "participant_email",
        "created_at",
        "room_number",
        "confirmation_sent",
    ]
    readonly_fields = ["created_at"]


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = [
        "title",
        "starts_at",
        "duration_minutes",
        "seat_cap",
        "price_cents",
        "status",
    ]
    list_filter = ["status"]
    search_fields = ["title"]
    inlines = [ReservationInline]


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = [
        "participant_id",
        "session",
        "created_at",
        "reminder_24h_sent",
        "reminder_1h_sent",
    ]
    list_filter = ["confirmation_sent"]
    search_fields = ["participant_id", "participant_email"]


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ["room_number", "label", "link"]
