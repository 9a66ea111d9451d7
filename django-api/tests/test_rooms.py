"""Unit tests for sub-room assignment.

Run with: pytest tests/test_rooms.py -v
"""

from collections import Counter
from datetime import timedelta

import pytest

from bookings.domain import Capacity, ParticipantId
from bookings.domain.errors import CapacityExceededError, NotReservedError
from bookings.domain.rooms import active_room_count, resolve_room

from fakes import NOW, make_reservation, make_session


def roster_of(session, count, start=NOW - timedelta(days=1)):
    return [
        make_reservation(session, f"writer-{i}", created_at=start + timedelta(minutes=i))
        for i in range(count)
    ]


class TestActiveRoomCount:
    """Tests for how many sub-rooms are in use before start."""

    @pytest.mark.parametrize(
        "size,expected",
        [(0, 1), (1, 1), (3, 1), (4, 2), (9, 3), (15, 5), (40, 5)],
    )
    def test_just_enough_rooms(self, size, expected):
        """Rooms open only as the roster needs them, up to the maximum."""
        assert active_room_count(size, seat_cap=3, max_rooms=5) == expected


class TestResolveBeforeStart:
    """Tests for balanced assignment before the session starts."""

    def test_not_reserved_participant_is_rejected(self):
        """Someone without a reservation gets NotReservedError."""
        session = make_session()
        with pytest.raises(NotReservedError):
            resolve_room(session, roster_of(session, 2), ParticipantId("stranger"), NOW)

    def test_override_link_wins(self):
        """With a session room link every participant is sent there."""
        session = make_session(room_link="https://meet.test/main")
        roster = roster_of(session, 3)
        result = resolve_room(session, roster, ParticipantId("writer-2"), NOW)
        assert result.override_link == "https://meet.test/main"
        assert result.room_number is None

    def test_roster_is_spread_evenly(self):
        """Nine participants with seat cap 3 fill three rooms of three."""
        session = make_session(seat_cap=Capacity(3))
        roster = roster_of(session, 9)
        rooms = Counter(
            resolve_room(session, roster, r.participant_id, NOW).room_number for r in roster
        )
        assert rooms == {1: 3, 2: 3, 3: 3}

    def test_no_room_over_seat_cap(self):
        """Every room holds at most seat_cap participants at full capacity."""
        session = make_session(seat_cap=Capacity(2))
        roster = roster_of(session, 10)
        rooms = Counter(
            resolve_room(session, roster, r.participant_id, NOW).room_number for r in roster
        )
        assert max(rooms.values()) == 2
        assert set(rooms) == {1, 2, 3, 4, 5}

    def test_resolution_ignores_roster_order(self):
        """Assignment depends on creation order, not list order."""
        session = make_session(seat_cap=Capacity(2))
        roster = roster_of(session, 5)
        target = roster[3].participant_id
        forward = resolve_room(session, roster, target, NOW)
        backward = resolve_room(session, list(reversed(roster)), target, NOW)
        assert forward == backward

    def test_assignment_is_not_frozen(self):
        """Pre-start assignments are recomputed, never persisted."""
        session = make_session()
        roster = roster_of(session, 1)
        assert not resolve_room(session, roster, roster[0].participant_id, NOW).frozen


class TestResolveAfterStart:
    """Tests for the post-start freeze."""

    def test_stored_room_is_returned(self):
        """A frozen room number is returned unchanged."""
        session = make_session(starts_at=NOW - timedelta(minutes=1))
        roster = [make_reservation(session, "writer-1", room_number=4)]
        result = resolve_room(session, roster, ParticipantId("writer-1"), NOW)
        assert result.room_number == 4

    def test_established_slot_is_kept(self):
        """The first post-start join keeps the room seen just before start."""
        session = make_session(seat_cap=Capacity(2), starts_at=NOW - timedelta(minutes=1))
        roster = roster_of(session, 4)
        before = resolve_room(
            session, roster, roster[1].participant_id, session.starts_at - timedelta(minutes=2)
        )
        after = resolve_room(session, roster, roster[1].participant_id, NOW)
        assert after.frozen
        assert after.room_number == before.room_number == 2

    def test_late_reservation_rebalances_only_before_start(self):
        """A reservation after start does not move frozen participants."""
        session = make_session(seat_cap=Capacity(2), starts_at=NOW - timedelta(minutes=2))
        early = roster_of(session, 2)
        frozen = [
            make_reservation(session, r.participant_id.value, id=r.id, room_number=1)
            for r in early
        ]
        late = make_reservation(session, "latecomer", created_at=NOW - timedelta(minutes=1))
        result = resolve_room(session, [*frozen, late], late.participant_id, NOW)
        assert result.room_number == 2

    def test_full_established_room_falls_back_to_lowest_free(self):
        """If the established room filled up, the lowest room with space is used."""
        session = make_session(seat_cap=Capacity(1), starts_at=NOW - timedelta(minutes=1))
        first, second = roster_of(session, 2)
        # Someone else already took room 2 after start.
        squatter = make_reservation(
            session, "squatter", created_at=NOW - timedelta(seconds=30), room_number=2
        )
        result = resolve_room(session, [first, second, squatter], second.participant_id, NOW)
        assert result.room_number == 1

    def test_every_room_full_raises(self):
        """With all rooms at seat cap the join fails with CapacityExceededError."""
        session = make_session(seat_cap=Capacity(1), starts_at=NOW - timedelta(minutes=1))
        frozen = [
            make_reservation(session, f"writer-{n}", room_number=n) for n in range(1, 6)
        ]
        extra = make_reservation(session, "extra", created_at=NOW - timedelta(seconds=10))
        with pytest.raises(CapacityExceededError):
            resolve_room(session, [*frozen, extra], extra.participant_id, NOW)
