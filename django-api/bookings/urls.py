from django.urls import path

from bookings.conf import get_bookings_settings
from bookings.handlers import (
    AdminSessionDetailView,
    AdminSessionListView,
    CheckoutView,
    JoinView,
    ReminderSweepView,
    ReservationView,
    SessionDetailView,
    SessionListView,
    StripeWebhookView,
)

config = get_bookings_settings()

urlpatterns = [
    path("sessions", SessionListView.as_view(), name="session-list"),
    path("sessions/<str:session_id>", SessionDetailView.as_view(), name="session-detail"),
    path(
        "sessions/<str:session_id>/reservations",
        ReservationView.as_view(admin_ids=config.admin_participant_ids),
        name="session-reserve",
    ),
    path(
        "sessions/<str:session_id>/checkout",
        CheckoutView.as_view(),
        name="session-checkout",
    ),
    path("sessions/<str:session_id>/join", JoinView.as_view(), name="session-join"),
    path("webhooks/stripe", StripeWebhookView.as_view(), name="stripe-webhook"),
    path(
        "cron/reminders",
        ReminderSweepView.as_view(cron_secret=config.cron_secret),
        name="reminder-sweep",
    ),
    path(
        "admin/sessions",
        AdminSessionListView.as_view(admin_ids=config.admin_participant_ids),
        name="admin-session-list",
    ),
    path(
        "admin/sessions/<str:session_id>",
        AdminSessionDetailView.as_view(admin_ids=config.admin_participant_ids),
        name="admin-session-detail",
    ),
]
