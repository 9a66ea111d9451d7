from django.apps import AppConfig


class BookingsConfig(AppConfig):
    name = "bookings"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self) -> None:
        from bookings import signals  # noqa: F401
        from bookings.conf import get_bookings_settings
        from bookings.gateways.stripe_gateway import configure_http_client

        configure_http_client(get_bookings_settings().gateway_timeout_seconds)
