"""Reservation ledger - the only writer of reservations.

Every check and the insert happen inside one store transaction holding the
session lock, so concurrent callers for the same session cannot oversell it.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from bookings.domain import ParticipantId, SessionId
from bookings.domain.capacity import effective_capacity
from bookings.domain.outcomes import ReserveOutcome, ReserveResult
from bookings.domain.windows import reservation_window_open
from bookings.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


class ReservationLedger:
    def __init__(
        self,
        store: ReservationStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._clock = clock

    def reserve(self, session_id: SessionId, participant_id: ParticipantId) -> ReserveResult:
        """Reserve one seat for the participant.

        Checks, in order: the session exists and is scheduled, the participant
        holds no seat yet, the reservation window is open, a seat is free.
        Store failures propagate; every business outcome is returned.
        """
        with self._store.lock_session(session_id) as session:
            now = self._clock()
            if session is None or not session.is_scheduled:
                result = ReserveResult(ReserveOutcome.SESSION_NOT_FOUND)
            elif existing := self._store.find_reservation(session_id, participant_id):
                result = ReserveResult(ReserveOutcome.ALREADY_BOOKED, existing)
            elif not reservation_window_open(session, now):
                result = ReserveResult(ReserveOutcome.WINDOW_CLOSED)
            elif self._store.count_reservations(session_id) >= effective_capacity(session):
                result = ReserveResult(ReserveOutcome.CAPACITY_EXCEEDED)
            else:
                result = self._insert(session_id, participant_id, now)

        logger.info(
            "Reservation attempt",
            extra={
                "session_id": str(session_id),
                "participant_id": participant_id.value,
                "outcome": result.outcome.value,
            },
        )
        return result

    def _insert(
        self, session_id: SessionId, participant_id: ParticipantId, now: datetime
    ) -> ReserveResult:
        reservation = self._store.insert_reservation(session_id, participant_id, now)
        if reservation is None:
            return ReserveResult(
                ReserveOutcome.ALREADY_BOOKED,
                self._store.find_reservation(session_id, participant_id),
            )
        return ReserveResult(ReserveOutcome.BOOKED, reservation)
