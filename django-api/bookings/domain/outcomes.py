"""Typed results for expected business outcomes.

Capacity, timing and duplicate outcomes are ordinary results, not errors:
callers branch on them.
"""

from dataclasses import dataclass, field
from enum import Enum

from bookings.domain.models import Reservation


class ReserveOutcome(Enum):
    BOOKED = "booked"
    ALREADY_BOOKED = "already_booked"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    WINDOW_CLOSED = "window_closed"
    SESSION_NOT_FOUND = "session_not_found"


SEAT_HELD = frozenset({ReserveOutcome.BOOKED, ReserveOutcome.ALREADY_BOOKED})


@dataclass(frozen=True)
class ReserveResult:
    outcome: ReserveOutcome
    reservation: Reservation | None = None

    @property
    def seat_held(self) -> bool:
        return self.outcome in SEAT_HELD


class ReconciliationOutcome(Enum):
    IGNORED = "ignored"
    BOOKED = "booked"
    ALREADY_BOOKED = "already_booked"
    REFUNDED = "refunded"
    REFUND_SKIPPED = "refund_skipped"


@dataclass(frozen=True)
class ReconciliationResult:
    """What a single payment event delivery resulted in."""

    outcome: ReconciliationOutcome
    reason: str | None = None
    reservation: Reservation | None = None


@dataclass(frozen=True)
class SweepFailure:
    reservation_id: str
    reason: str


@dataclass
class SweepSummary:
    """Counts reported by one reminder sweep run."""

    sent: int = 0
    skipped_late: int = 0
    invalid_email: int = 0
    failures: list[SweepFailure] = field(default_factory=list)
