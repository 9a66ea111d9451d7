"""Reminder sweep.

Sends due 24-hour and 1-hour reminders exactly once each. Safe to run
repeatedly and concurrently: a reminder is marked sent only after the mailer
accepted it, and the flag is re-read right before sending.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from bookings.domain import Milestone, Reservation, Session
from bookings.domain.outcomes import SweepFailure, SweepSummary
from bookings.domain.windows import has_started
from bookings.gateways.interfaces import Mailer
from bookings.services.follow_up import is_valid_email
from bookings.stores.interfaces import ReservationStore, SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DueReminder:
    reservation: Reservation
    milestone: Milestone
    # Milestones flagged sent together with this one.
    supersedes: tuple[Milestone, ...] = ()

    @property
    def milestones(self) -> tuple[Milestone, ...]:
        return (self.milestone, *self.supersedes)


def collapse_due(
    day_before: list[Reservation], hour_before: list[Reservation]
) -> list[DueReminder]:
    """Keep one reminder per reservation, preferring the 1-hour one."""
    urgent = {r.id for r in hour_before}
    day_before_ids = {r.id for r in day_before}
    due = [
        DueReminder(
            r,
            Milestone.HOUR_BEFORE,
            (Milestone.DAY_BEFORE,) if r.id in day_before_ids else (),
        )
        for r in hour_before
    ]
    due.extend(
        DueReminder(r, Milestone.DAY_BEFORE) for r in day_before if r.id not in urgent
    )
    return due


class ReminderSweep:
    def __init__(
        self,
        reservations: ReservationStore,
        sessions: SessionStore,
        mailer: Mailer,
        clock: Callable[[], datetime] = timezone.now,
        batch_size: int = 200,
    ) -> None:
        self._reservations = reservations
        self._sessions = sessions
        self._mailer = mailer
        self._clock = clock
        self._batch_size = batch_size

    def run(self) -> SweepSummary:
        """Process every due reminder; one failure never stops the others."""
        now = self._clock()
        due = collapse_due(
            self._reservations.due_reminders(Milestone.DAY_BEFORE, now, self._batch_size),
            self._reservations.due_reminders(Milestone.HOUR_BEFORE, now, self._batch_size),
        )
        sessions = self._sessions.get_sessions({d.reservation.session_id for d in due})

        summary = SweepSummary()
        for item in due:
            try:
                self._process(item, sessions.get(item.reservation.session_id), now, summary)
            except Exception as e:
                logger.exception(
                    "Reminder failed",
                    extra={"reservation_id": str(item.reservation.id)},
                )
                summary.failures.append(SweepFailure(str(item.reservation.id), str(e)))

        logger.info(
            "Reminder sweep finished",
            extra={
                "sent": summary.sent,
                "skipped_late": summary.skipped_late,
                "invalid_email": summary.invalid_email,
                "failed": len(summary.failures),
            },
        )
        return summary

    def _process(
        self,
        item: DueReminder,
        session: Session | None,
        now: datetime,
        summary: SweepSummary,
    ) -> None:
        reservation_id = item.reservation.id

        if session is None or has_started(session, now):
            # Never remind about a session that is already under way.
            if self._reservations.mark_reminders_sent(reservation_id, item.milestones):
                summary.skipped_late += 1
            return

        current = self._reservations.get_reservation(reservation_id)
        if current is None or current.milestone_sent(item.milestone):
            return

        if not is_valid_email(current.participant_email):
            summary.invalid_email += 1
            summary.failures.append(
                SweepFailure(
                    str(reservation_id),
                    f"Invalid or missing email: {current.participant_email}",
                )
            )
            return

        delivered = self._mailer.send_reminder(
            to=current.participant_email,
            session=session,
            milestone=item.milestone,
            timezone_name=current.participant_timezone,
        )
        if not delivered:
            summary.failures.append(
                SweepFailure(str(reservation_id), "Mailer did not accept the message")
            )
            return

        self._reservations.mark_reminders_sent(reservation_id, item.milestones)
        summary.sent += 1
