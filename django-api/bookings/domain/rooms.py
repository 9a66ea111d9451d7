"""Sub-room assignment.

Assignment is derived from the reservation roster rather than stored, with
two modes:

* Before the session starts the roster is spread round-robin over just
  enough sub-rooms to hold it. Roster index ``i`` lands in sub-room
  ``i % active + 1``, so the newest participant always lands in a least-filled
  room (ties go to the lowest number). Later reservations may move people.
* From the start instant on, the first resolution for a participant is
  frozen onto their reservation and returned unchanged afterwards.
"""

import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from bookings.domain.capacity import room_count
from bookings.domain.errors import CapacityExceededError, NotReservedError
from bookings.domain.models import Reservation, Session
from bookings.domain.value_objects import ParticipantId


@dataclass(frozen=True)
class RoomAssignment:
    """Where a participant should be sent.

    Exactly one of ``room_number`` and ``override_link`` is set. ``frozen``
    marks a post-start assignment that must be persisted.
    """

    room_number: int | None = None
    override_link: str | None = None
    frozen: bool = False


def order_roster(roster: Sequence[Reservation]) -> list[Reservation]:
    return sorted(roster, key=lambda r: (r.created_at, str(r.id)))


def active_room_count(roster_size: int, seat_cap: int, max_rooms: int) -> int:
    needed = math.ceil(roster_size / seat_cap) if roster_size else 1
    return max(1, min(max_rooms, needed))


def balanced_room(index: int, roster_size: int, seat_cap: int, max_rooms: int) -> int:
    return index % active_room_count(roster_size, seat_cap, max_rooms) + 1


def resolve_room(
    session: Session,
    roster: Sequence[Reservation],
    participant_id: ParticipantId,
    now: datetime,
) -> RoomAssignment:
    """Map a reserved participant to the sub-room they belong in.

    Raises:
        NotReservedError: If the participant holds no reservation.
        CapacityExceededError: If, after start, no sub-room has space.
    """
    ordered = order_roster(roster)
    position = next(
        (i for i, r in enumerate(ordered) if r.participant_id == participant_id),
        None,
    )
    if position is None:
        raise NotReservedError(str(session.id))

    if session.room_link:
        return RoomAssignment(override_link=session.room_link)

    seat_cap = session.seat_cap.value
    rooms = room_count(session)

    if now < session.starts_at:
        return RoomAssignment(
            room_number=balanced_room(position, len(ordered), seat_cap, rooms)
        )

    entry = ordered[position]
    if entry.room_number is not None:
        return RoomAssignment(room_number=entry.room_number, frozen=True)

    occupancy = Counter(
        r.room_number
        for r in ordered
        if r.room_number is not None and r.participant_id != participant_id
    )

    established: int | None = None
    if entry.created_at < session.starts_at:
        before_start = [r for r in ordered if r.created_at < session.starts_at]
        slot = before_start.index(entry)
        established = balanced_room(slot, len(before_start), seat_cap, rooms)

    if established is not None and occupancy[established] < seat_cap:
        return RoomAssignment(room_number=established, frozen=True)

    for number in range(1, rooms + 1):
        if occupancy[number] < seat_cap:
            return RoomAssignment(room_number=number, frozen=True)

    raise CapacityExceededError()
