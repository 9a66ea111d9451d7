"""Room join - sends a reserved participant to their sub-room link."""

import logging
from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from bookings.domain import ParticipantId, Session, SessionId
from bookings.domain.errors import (
    JoinWindowClosedError,
    RoomNotConfiguredError,
    SessionNotFoundError,
)
from bookings.domain.rooms import resolve_room
from bookings.domain.timezones import is_valid_zone
from bookings.domain.windows import join_window_open
from bookings.stores.interfaces import ReservationStore, RoomStore, SessionStore

logger = logging.getLogger(__name__)


class RoomJoinService:
    def __init__(
        self,
        sessions: SessionStore,
        reservations: ReservationStore,
        rooms: RoomStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._sessions = sessions
        self._reservations = reservations
        self._rooms = rooms
        self._clock = clock

    def join(
        self,
        session_id: SessionId,
        participant_id: ParticipantId,
        timezone_hint: str | None = None,
    ) -> str:
        """Return the meeting link the participant should be redirected to.

        Raises:
            SessionNotFoundError: If the session does not exist.
            JoinWindowClosedError: If the room is not open right now.
            NotReservedError: If the participant holds no reservation.
            CapacityExceededError: If no sub-room has space left.
            RoomNotConfiguredError: If the assigned room has no link.
        """
        session = self._sessions.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(str(session_id))

        now = self._clock()
        if not join_window_open(session, now):
            raise JoinWindowClosedError()

        roster = self._reservations.list_roster(session_id)
        assignment = resolve_room(session, roster, participant_id, now)
        reservation = next(r for r in roster if r.participant_id == participant_id)

        if timezone_hint and is_valid_zone(timezone_hint):
            if timezone_hint != reservation.participant_timezone:
                self._reservations.set_participant_timezone(reservation.id, timezone_hint)

        if assignment.override_link:
            return assignment.override_link

        room_number = assignment.room_number
        if assignment.frozen and reservation.room_number is None:
            room_number = self._freeze(session, participant_id, now)

        room = self._rooms.get_room(room_number)
        if room is None:
            raise RoomNotConfiguredError(room_number)

        logger.info(
            "Participant joined room",
            extra={
                "session_id": str(session_id),
                "reservation_id": str(reservation.id),
                "room_number": room_number,
            },
        )
        return room.link

    def _freeze(self, session: Session, participant_id: ParticipantId, now: datetime) -> int:
        """Persist the first post-start room, resolved again under the session lock."""
        with self._reservations.lock_session(session.id):
            roster = self._reservations.list_roster(session.id)
            assignment = resolve_room(session, roster, participant_id, now)
            reservation = next(r for r in roster if r.participant_id == participant_id)
            return self._reservations.freeze_room(reservation.id, assignment.room_number)
