"""Unit tests for the reservation ledger.

Run with: pytest tests/test_ledger.py -v
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from uuid import uuid4

import pytest

from bookings.domain import Capacity, ParticipantId, SessionId, SessionStatus
from bookings.domain.outcomes import ReserveOutcome
from bookings.services.ledger import ReservationLedger

from fakes import NOW, make_reservation, make_session


@pytest.fixture
def ledger(store, clock):
    return ReservationLedger(store, clock)


class TestReserve:
    """Tests for ReservationLedger.reserve."""

    def test_books_free_seat(self, ledger, store):
        """A first reservation is BOOKED and stored at the clock's instant."""
        session = store.add(make_session())
        result = ledger.reserve(session.id, ParticipantId("writer-1"))
        assert result.outcome is ReserveOutcome.BOOKED
        assert result.seat_held
        assert result.reservation.created_at == NOW
        assert store.count_reservations(session.id) == 1

    def test_unknown_session(self, ledger):
        """A missing session is SESSION_NOT_FOUND."""
        result = ledger.reserve(SessionId(uuid4()), ParticipantId("writer-1"))
        assert result.outcome is ReserveOutcome.SESSION_NOT_FOUND

    def test_cancelled_session_is_not_found(self, ledger, store):
        """Only scheduled sessions take reservations."""
        session = store.add(make_session(status=SessionStatus.CANCELLED))
        result = ledger.reserve(session.id, ParticipantId("writer-1"))
        assert result.outcome is ReserveOutcome.SESSION_NOT_FOUND

    def test_second_attempt_is_already_booked(self, ledger, store):
        """Reserving twice returns the existing reservation."""
        session = store.add(make_session())
        first = ledger.reserve(session.id, ParticipantId("writer-1"))
        second = ledger.reserve(session.id, ParticipantId("writer-1"))
        assert second.outcome is ReserveOutcome.ALREADY_BOOKED
        assert second.reservation.id == first.reservation.id
        assert store.count_reservations(session.id) == 1

    @pytest.mark.parametrize(
        "after_start,expected",
        [
            (timedelta(minutes=3), ReserveOutcome.BOOKED),
            (timedelta(minutes=4, seconds=59), ReserveOutcome.BOOKED),
            (timedelta(minutes=5), ReserveOutcome.BOOKED),
            (timedelta(minutes=5, seconds=1), ReserveOutcome.WINDOW_CLOSED),
            (timedelta(minutes=6), ReserveOutcome.WINDOW_CLOSED),
        ],
    )
    def test_window_closes_five_minutes_after_start(self, ledger, store, after_start, expected):
        """Reservations are accepted up to and including start plus five minutes."""
        session = store.add(make_session(starts_at=NOW - after_start))
        result = ledger.reserve(session.id, ParticipantId("writer-1"))
        assert result.outcome is expected

    def test_existing_holder_wins_over_closed_window(self, ledger, store):
        """A seat holder replaying late still sees ALREADY_BOOKED."""
        session = store.add(make_session(starts_at=NOW - timedelta(hours=1)))
        store.add_reservation(make_reservation(session, "writer-1"))
        result = ledger.reserve(session.id, ParticipantId("writer-1"))
        assert result.outcome is ReserveOutcome.ALREADY_BOOKED

    def test_capacity_exceeded_when_full(self, ledger, store):
        """A single-room session holds exactly seat_cap reservations."""
        session = store.add(
            make_session(seat_cap=Capacity(2), room_link="https://meet.test/one")
        )
        for name in ("a", "b"):
            store.add_reservation(make_reservation(session, name))
        result = ledger.reserve(session.id, ParticipantId("c"))
        assert result.outcome is ReserveOutcome.CAPACITY_EXCEEDED
        assert store.insert_calls == 0

    def test_split_session_uses_fan_out_capacity(self, ledger, store):
        """A community session accepts seat_cap times five reservations."""
        session = store.add(make_session(seat_cap=Capacity(1)))
        outcomes = [
            ledger.reserve(session.id, ParticipantId(f"writer-{i}")).outcome for i in range(6)
        ]
        assert outcomes.count(ReserveOutcome.BOOKED) == 5
        assert outcomes[-1] is ReserveOutcome.CAPACITY_EXCEEDED

    def test_five_seats_fan_out_to_twenty_five(self, ledger, store):
        """Seat cap five across five sub-rooms books 25; the 26th is refused."""
        session = store.add(make_session(seat_cap=Capacity(5)))
        outcomes = [
            ledger.reserve(session.id, ParticipantId(f"writer-{i}")).outcome for i in range(26)
        ]
        assert outcomes[:25] == [ReserveOutcome.BOOKED] * 25
        assert outcomes[25] is ReserveOutcome.CAPACITY_EXCEEDED
        assert store.count_reservations(session.id) == 25


class TestConcurrentReserve:
    """Concurrent reservation attempts never oversell a session."""

    def test_parallel_attempts_fill_exactly_to_capacity(self, ledger, store):
        """Twenty parallel attempts on a five-seat room book exactly five."""
        session = store.add(
            make_session(seat_cap=Capacity(5), room_link="https://meet.test/one")
        )
        with ThreadPoolExecutor(max_workers=10) as pool:
            outcomes = list(
                pool.map(
                    lambda i: ledger.reserve(session.id, ParticipantId(f"w-{i}")).outcome,
                    range(20),
                )
            )
        assert outcomes.count(ReserveOutcome.BOOKED) == 5
        assert outcomes.count(ReserveOutcome.CAPACITY_EXCEEDED) == 15
        assert store.count_reservations(session.id) == 5

    def test_parallel_attempts_by_one_participant_book_once(self, ledger, store):
        """Repeated parallel attempts by one participant hold one seat."""
        session = store.add(make_session())
        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(
                pool.map(
                    lambda _: ledger.reserve(session.id, ParticipantId("writer-1")).outcome,
                    range(8),
                )
            )
        assert outcomes.count(ReserveOutcome.BOOKED) == 1
        assert outcomes.count(ReserveOutcome.ALREADY_BOOKED) == 7
        assert store.count_reservations(session.id) == 1
