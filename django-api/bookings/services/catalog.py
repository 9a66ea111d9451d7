"""Session catalog service - listing, lookup and admin mutation.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.utils import timezone

from bookings.domain import ParticipantId, Session, SessionDraft, SessionId
from bookings.domain.capacity import (
    RoomMode,
    SessionTier,
    effective_capacity,
    room_mode,
    session_tier,
)
from bookings.domain.errors import (
    InvalidSessionDataError,
    InvalidSessionIdError,
    RoomNotConfiguredError,
    SessionNotFoundError,
)
from bookings.domain.windows import RESERVATION_GRACE
from bookings.stores.interfaces import RoomStore, SessionStore

MAX_REPEAT_WEEKS = 52


def parse_session_id(value: str) -> SessionId:
    try:
        return SessionId.from_string(value)
    except (ValueError, TypeError):
        raise InvalidSessionIdError()


@dataclass(frozen=True)
class SessionListing:
    """A session as shown to participants, with live occupancy."""

    session: Session
    seats_taken: int
    capacity: int
    mode: RoomMode
    tier: SessionTier

    @property
    def is_full(self) -> bool:
        return self.seats_taken >= self.capacity

    @property
    def seats_left(self) -> int:
        return max(0, self.capacity - self.seats_taken)


class SessionCatalog:
    def __init__(
        self,
        sessions: SessionStore,
        rooms: RoomStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._sessions = sessions
        self._rooms = rooms
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def list_upcoming(self) -> list[SessionListing]:
        """Return scheduled sessions that have not passed the reservation grace."""
        upcoming = self._sessions.list_scheduled(self._clock() - RESERVATION_GRACE)
        taken = self._sessions.seats_taken(s.id for s in upcoming)
        return [self._listing(s, taken.get(s.id, 0)) for s in upcoming]

    def get_listing(self, session_id: str) -> SessionListing:
        """Return one session with its occupancy.

        Raises:
            InvalidSessionIdError: If the session_id is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
        """
        session = self.get_session(session_id)
        taken = self._sessions.seats_taken([session.id])
        return self._listing(session, taken.get(session.id, 0))

    def get_session(self, session_id: str) -> Session:
        """Return a session by ID.

        Raises:
            InvalidSessionIdError: If the session_id is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
        """
        session = self._sessions.get_session(parse_session_id(session_id))
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def find_session(self, session_id: SessionId) -> Session | None:
        return self._sessions.get_session(session_id)

    def reserved_session_ids(
        self, participant_id: ParticipantId | None, session_ids: list[SessionId]
    ) -> set[SessionId]:
        if participant_id is None or not session_ids:
            return set()
        return self._sessions.reserved_by(participant_id, session_ids)

    def create_sessions(self, draft: SessionDraft, repeat_weeks: int = 0) -> list[Session]:
        """Create a session plus ``repeat_weeks`` weekly copies of it."""
        if not 0 <= repeat_weeks <= MAX_REPEAT_WEEKS:
            raise InvalidSessionDataError(
                f"repeat_weeks must be between 0 and {MAX_REPEAT_WEEKS}"
            )
        drafts = [
            SessionDraft(
                title=draft.title,
                starts_at=draft.starts_at + timedelta(weeks=week),
                duration_minutes=draft.duration_minutes,
                seat_cap=draft.seat_cap,
                status=draft.status,
                price=draft.price,
                room_link=draft.room_link,
            )
            for week in range(repeat_weeks + 1)
        ]
        return self._sessions.add_sessions(drafts)

    def update_session(self, session_id: str, draft: SessionDraft) -> Session:
        session = self._sessions.replace_session(parse_session_id(session_id), draft)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete_session(self, session_id: str) -> None:
        if not self._sessions.delete_session(parse_session_id(session_id)):
            raise SessionNotFoundError(session_id)

    def room_link_for(self, room_number: int) -> str:
        """Resolve a sub-room number to the link used as a single-room override."""
        room = self._rooms.get_room(room_number)
        if room is None:
            raise RoomNotConfiguredError(room_number)
        return room.link

    def _listing(self, session: Session, seats_taken: int) -> SessionListing:
        return SessionListing(
            session=session,
            seats_taken=seats_taken,
            capacity=effective_capacity(session),
            mode=room_mode(session),
            tier=session_tier(session),
        )
