"""Post-booking enrichment shared by the paid and free reservation paths.

Resolves the participant's email, schedules reminder milestones and sends
the confirmation email once per reservation.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.utils import timezone

from bookings.domain import Milestone, Reservation, Session
from bookings.domain.windows import milestone_schedule
from bookings.gateways.interfaces import IdentityDirectory, Mailer
from bookings.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    try:
        validate_email(value)
    except ValidationError:
        return False
    return True


class BookingFollowUp:
    def __init__(
        self,
        store: ReservationStore,
        mailer: Mailer,
        directory: IdentityDirectory,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._mailer = mailer
        self._directory = directory
        self._clock = clock

    def resolve_email(
        self, reservation: Reservation, hints: Iterable[str | None] = ()
    ) -> str | None:
        """Pick the first usable address: stored, then hints, then identity service."""
        for candidate in (reservation.participant_email, *hints):
            if is_valid_email(candidate):
                return candidate
        try:
            fallback = self._directory.email_for(reservation.participant_id)
        except Exception:
            logger.exception(
                "Identity lookup failed",
                extra={"reservation_id": str(reservation.id)},
            )
            return None
        return fallback if is_valid_email(fallback) else None

    def complete(
        self,
        session: Session,
        reservation: Reservation,
        email_hints: Iterable[str | None] = (),
    ) -> Reservation:
        """Enrich a held reservation. Safe to call repeatedly for the same one."""
        email = self.resolve_email(reservation, email_hints)
        schedule = milestone_schedule(session.starts_at, self._clock())
        updated = self._store.record_follow_up(
            reservation.id,
            email=email,
            reminder_24h_at=schedule[Milestone.DAY_BEFORE],
            reminder_1h_at=schedule[Milestone.HOUR_BEFORE],
        )
        if updated is None:
            return reservation

        self._confirm(session, updated)
        return self._store.get_reservation(updated.id) or updated

    def _confirm(self, session: Session, reservation: Reservation) -> None:
        if reservation.confirmation_sent:
            return
        if not reservation.participant_email:
            logger.warning(
                "No email for confirmation",
                extra={"reservation_id": str(reservation.id)},
            )
            return

        try:
            delivered = self._mailer.send_confirmation(
                to=reservation.participant_email,
                session=session,
                timezone_name=reservation.participant_timezone,
            )
        except Exception:
            logger.exception(
                "Confirmation email failed",
                extra={"reservation_id": str(reservation.id)},
            )
            return

        if delivered:
            self._store.mark_confirmation_sent(reservation.id)
