from bookings.domain.models import (
    Milestone,
    Reservation,
    Room,
    Session,
    SessionDraft,
    SessionStatus,
)
from bookings.domain.value_objects import (
    Capacity,
    Money,
    ParticipantId,
    ReservationId,
    SessionId,
)

__all__ = [
    "Session",
    "SessionDraft",
    "SessionStatus",
    "Reservation",
    "Room",
    "Milestone",
    "SessionId",
    "ReservationId",
    "ParticipantId",
    "Money",
    "Capacity",
]
