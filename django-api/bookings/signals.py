"""Django signals for cache invalidation."""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from bookings.cache import invalidate_session
from bookings.models import Reservation, Session


@receiver([post_save, post_delete], sender=Session)
def invalidate_session_cache(sender, instance, **kwargs):
    """Invalidate caches when a session is saved or deleted."""
    invalidate_session(instance.pk)


@receiver([post_save, post_delete], sender=Reservation)
def invalidate_occupancy_cache(sender, instance, **kwargs):
    """Invalidate caches when a seat is taken or released."""
    invalidate_session(instance.session_id)
