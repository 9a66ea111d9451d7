"""Cache keys for session views and their invalidation."""

from django.core.cache import cache

from bookings.domain import SessionId

SESSION_LIST_KEY = "sessions:list"


def session_detail_key(session_id: SessionId | str) -> str:
    return f"sessions:{session_id}"


def invalidate_session(session_id: SessionId | str) -> None:
    """Drop every cached view that shows this session's occupancy."""
    cache.delete_many([SESSION_LIST_KEY, session_detail_key(session_id)])
