"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in bookings/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from bookings.domain.value_objects import (
    Capacity,
    Money,
    ParticipantId,
    ReservationId,
    SessionId,
)


class SessionStatus(Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Milestone(Enum):
    """Notification milestones tracked per reservation."""

    DAY_BEFORE = "24h"
    HOUR_BEFORE = "1h"

    @property
    def lead_time(self) -> timedelta:
        if self is Milestone.DAY_BEFORE:
            return timedelta(hours=24)
        return timedelta(hours=1)


@dataclass(frozen=True)
class Session:
    """Domain representation of a bookable Session."""

    id: SessionId
    title: str
    starts_at: datetime
    duration_minutes: int
    seat_cap: Capacity
    status: SessionStatus
    price: Money
    room_link: str | None
    created_at: datetime

    def __post_init__(self) -> None:
        if self.duration_minutes <= 0:
            raise ValueError("Session duration must be positive")

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration_minutes)

    @property
    def is_scheduled(self) -> bool:
        return self.status is SessionStatus.SCHEDULED


@dataclass(frozen=True)
class Reservation:
    """Domain representation of a Reservation (a held seat)."""

    id: ReservationId
    session_id: SessionId
    participant_id: ParticipantId
    created_at: datetime
    participant_email: str | None = None
    participant_timezone: str | None = None
    reminder_24h_at: datetime | None = None
    reminder_24h_sent: bool = False
    reminder_1h_at: datetime | None = None
    reminder_1h_sent: bool = False
    confirmation_sent: bool = False
    room_number: int | None = None

    def milestone_at(self, milestone: Milestone) -> datetime | None:
        if milestone is Milestone.DAY_BEFORE:
            return self.reminder_24h_at
        return self.reminder_1h_at

    def milestone_sent(self, milestone: Milestone) -> bool:
        if milestone is Milestone.DAY_BEFORE:
            return self.reminder_24h_sent
        return self.reminder_1h_sent


@dataclass(frozen=True)
class Room:
    """A numbered sub-room and its external meeting link."""

    room_number: int
    link: str
    label: str = ""


@dataclass(frozen=True)
class SessionDraft:
    """Validated admin input for creating or replacing a Session."""

    title: str
    starts_at: datetime
    duration_minutes: int
    seat_cap: Capacity
    status: SessionStatus
    price: Money
    room_link: str | None = None

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("Title is required")
        if self.duration_minutes <= 0:
            raise ValueError("Session duration must be positive")
