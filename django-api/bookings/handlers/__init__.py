from bookings.handlers.views import (
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

__all__ = [
    "SessionListView",
    "SessionDetailView",
    "ReservationView",
    "CheckoutView",
    "JoinView",
    "StripeWebhookView",
    "ReminderSweepView",
    "AdminSessionListView",
    "AdminSessionDetailView",
]
