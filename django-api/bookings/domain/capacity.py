"""Seat capacity policy.

Pure functions over Session attributes. Capacity is never stored.
"""

from enum import Enum

from bookings.domain.models import Session

FAN_OUT = 5
PRO_PRICE_CENTS = 450


class RoomMode(Enum):
    SINGLE = "single"
    SPLIT = "split"


class SessionTier(Enum):
    COMMUNITY = "community"
    PRO = "pro"


def session_tier(session: Session) -> SessionTier:
    """Pro sessions are moderated and kept to one room."""
    if session.price.cents >= PRO_PRICE_CENTS:
        return SessionTier.PRO
    return SessionTier.COMMUNITY


def room_mode(session: Session) -> RoomMode:
    if session.room_link or session_tier(session) is SessionTier.PRO:
        return RoomMode.SINGLE
    return RoomMode.SPLIT


def room_count(session: Session) -> int:
    """Number of sub-rooms a session's participants may be spread across."""
    if room_mode(session) is RoomMode.SPLIT:
        return FAN_OUT
    return 1


def effective_capacity(session: Session) -> int:
    return session.seat_cap.value * room_count(session)
