"""Typed access to the ``BOOKINGS`` settings group."""

from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class BookingsSettings:
    admin_participant_ids: frozenset[str]
    cron_secret: str
    stripe_secret_key: str
    stripe_webhook_secret: str
    currency: str
    gateway_timeout_seconds: int
    site_url: str
    reference_timezone: str
    reminder_batch_size: int
    list_cache_seconds: int


def get_bookings_settings() -> BookingsSettings:
    raw = settings.BOOKINGS
    return BookingsSettings(
        admin_participant_ids=frozenset(raw.get("ADMIN_PARTICIPANT_IDS", ())),
        cron_secret=raw.get("CRON_SECRET", ""),
        stripe_secret_key=raw.get("STRIPE_SECRET_KEY", ""),
        stripe_webhook_secret=raw.get("STRIPE_WEBHOOK_SECRET", ""),
        currency=raw.get("CURRENCY", "usd"),
        gateway_timeout_seconds=int(raw.get("GATEWAY_TIMEOUT_SECONDS", 10)),
        site_url=raw.get("SITE_URL", "").rstrip("/"),
        reference_timezone=raw.get("REFERENCE_TIMEZONE", "America/New_York"),
        reminder_batch_size=int(raw.get("REMINDER_BATCH_SIZE", 200)),
        list_cache_seconds=int(raw.get("LIST_CACHE_SECONDS", 30)),
    )
