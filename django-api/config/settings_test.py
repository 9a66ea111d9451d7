"""Settings used by the test suite."""

from config.settings import *  # noqa: F401,F403
from config.settings import BOOKINGS

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

BOOKINGS = {
    **BOOKINGS,
    "ADMIN_PARTICIPANT_IDS": ["admin-1"],
    "CRON_SECRET": "test-cron-secret",
    "STRIPE_SECRET_KEY": "sk_test_dummy",
    "STRIPE_WEBHOOK_SECRET": "whsec_test_secret",
    "SITE_URL": "https://rooms.test",
}
