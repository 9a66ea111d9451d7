"""Time windows during which reservation and join actions are allowed."""

from datetime import datetime, timedelta

from bookings.domain.models import Milestone, Session

RESERVATION_GRACE = timedelta(minutes=5)
JOIN_OPENS_BEFORE_START = timedelta(minutes=5)
JOIN_CLOSES_AFTER_END = timedelta(minutes=10)


def reservation_deadline(session: Session) -> datetime:
    return session.starts_at + RESERVATION_GRACE


def reservation_window_open(session: Session, now: datetime) -> bool:
    """Reservations are accepted until the grace period after start has elapsed."""
    return now <= reservation_deadline(session)


def join_window_open(session: Session, now: datetime) -> bool:
    opens_at = session.starts_at - JOIN_OPENS_BEFORE_START
    closes_at = session.ends_at + JOIN_CLOSES_AFTER_END
    return opens_at <= now <= closes_at


def has_started(session: Session, now: datetime) -> bool:
    return now >= session.starts_at


def milestone_schedule(
    starts_at: datetime, now: datetime
) -> dict[Milestone, datetime | None]:
    """Return the due instant of each milestone, or None when already past."""
    schedule: dict[Milestone, datetime | None] = {}
    for milestone in Milestone:
        due_at = starts_at - milestone.lead_time
        schedule[milestone] = due_at if due_at > now else None
    return schedule
