"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from datetime import datetime

from bookings.domain import (
    Milestone,
    ParticipantId,
    Reservation,
    ReservationId,
    Room,
    Session,
    SessionDraft,
    SessionId,
)


class SessionStore(ABC):
    """Interface for session definition persistence."""

    @abstractmethod
    def get_session(self, session_id: SessionId) -> Session | None:
        """Return a session by ID, or None if not found."""
        ...

    @abstractmethod
    def get_sessions(self, session_ids: Iterable[SessionId]) -> dict[SessionId, Session]:
        """Return the sessions that exist among ``session_ids``, keyed by ID."""
        ...

    @abstractmethod
    def list_scheduled(self, starting_after: datetime) -> list[Session]:
        """Return scheduled sessions starting at or after the instant, by start."""
        ...

    @abstractmethod
    def seats_taken(self, session_ids: Iterable[SessionId]) -> dict[SessionId, int]:
        """Return reservation counts per session. Sessions without any are omitted."""
        ...

    @abstractmethod
    def reserved_by(
        self, participant_id: ParticipantId, session_ids: Iterable[SessionId]
    ) -> set[SessionId]:
        """Return the sessions among ``session_ids`` the participant holds a seat in."""
        ...

    @abstractmethod
    def add_sessions(self, drafts: Iterable[SessionDraft]) -> list[Session]:
        """Insert sessions in one transaction and return them."""
        ...

    @abstractmethod
    def replace_session(self, session_id: SessionId, draft: SessionDraft) -> Session | None:
        """Overwrite a session's editable fields. Returns None if not found."""
        ...

    @abstractmethod
    def delete_session(self, session_id: SessionId) -> bool:
        """Delete a session and its reservations. Returns False if not found."""
        ...


class ReservationStore(ABC):
    """Interface for reservation persistence.

    Only the reservation ledger may call ``insert_reservation``, and only
    inside ``lock_session``.
    """

    @abstractmethod
    def lock_session(self, session_id: SessionId) -> AbstractContextManager[Session | None]:
        """Open a transaction holding an exclusive lock on the session row.

        Yields the session, or None if it does not exist. Everything done
        through the store inside the block commits or rolls back together.
        """
        ...

    @abstractmethod
    def count_reservations(self, session_id: SessionId) -> int:
        ...

    @abstractmethod
    def find_reservation(
        self, session_id: SessionId, participant_id: ParticipantId
    ) -> Reservation | None:
        ...

    @abstractmethod
    def insert_reservation(
        self, session_id: SessionId, participant_id: ParticipantId, created_at: datetime
    ) -> Reservation | None:
        """Insert a reservation. Returns None when the pair already exists."""
        ...

    @abstractmethod
    def get_reservation(self, reservation_id: ReservationId) -> Reservation | None:
        ...

    @abstractmethod
    def list_roster(self, session_id: SessionId) -> list[Reservation]:
        """Return a session's reservations ordered by creation instant."""
        ...

    @abstractmethod
    def record_follow_up(
        self,
        reservation_id: ReservationId,
        *,
        email: str | None,
        reminder_24h_at: datetime | None,
        reminder_1h_at: datetime | None,
    ) -> Reservation | None:
        """Store the resolved email and fill milestone instants not yet set.

        A stored instant is never replaced, and None never clears one.
        """
        ...

    @abstractmethod
    def mark_confirmation_sent(self, reservation_id: ReservationId) -> bool:
        """Set the confirmation flag. Returns False if it was already set."""
        ...

    @abstractmethod
    def due_reminders(
        self, milestone: Milestone, now: datetime, limit: int
    ) -> list[Reservation]:
        """Return reservations whose milestone is due and not yet sent.

        Oldest due first, with reservations lacking an email after all others.
        """
        ...

    @abstractmethod
    def mark_reminders_sent(
        self, reservation_id: ReservationId, milestones: Iterable[Milestone]
    ) -> bool:
        """Set the sent flags. Returns False if the first one was already set."""
        ...

    @abstractmethod
    def freeze_room(self, reservation_id: ReservationId, room_number: int) -> int:
        """Persist a room number unless one is already stored; return the stored one."""
        ...

    @abstractmethod
    def set_participant_timezone(
        self, reservation_id: ReservationId, timezone_name: str
    ) -> None:
        ...


class RoomStore(ABC):
    """Interface for the sub-room link table."""

    @abstractmethod
    def get_room(self, room_number: int) -> Room | None:
        ...
