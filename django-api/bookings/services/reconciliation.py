"""Payment reconciliation - turns payment events into reservations or refunds.

Events arrive at least once. Replays are safe because:
- the ledger reports an existing seat as ALREADY_BOOKED instead of inserting,
- refunds carry an idempotency key derived from the event ID,
- the confirmation email is gated on the reservation's flag.

Only infrastructure failures (store errors, ``GatewayError``) escape from
``reconcile``; the webhook turns those into a retryable response.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from django.utils import timezone

from bookings.cache import invalidate_session
from bookings.domain import ParticipantId, Reservation, Session, SessionId
from bookings.domain.outcomes import (
    ReconciliationOutcome,
    ReconciliationResult,
    ReserveOutcome,
)
from bookings.domain.payments import CheckoutCompleted, PaymentEvent
from bookings.domain.windows import reservation_window_open
from bookings.gateways.interfaces import PaymentGateway
from bookings.services.follow_up import BookingFollowUp
from bookings.services.ledger import ReservationLedger
from bookings.stores.interfaces import ReservationStore, SessionStore

logger = logging.getLogger(__name__)

REFUNDABLE = frozenset(
    {
        ReserveOutcome.CAPACITY_EXCEEDED,
        ReserveOutcome.WINDOW_CLOSED,
        ReserveOutcome.SESSION_NOT_FOUND,
    }
)


def refund_idempotency_key(event_id: str) -> str:
    return f"refund:{event_id}"


class PaymentReconciler:
    def __init__(
        self,
        ledger: ReservationLedger,
        sessions: SessionStore,
        reservations: ReservationStore,
        gateway: PaymentGateway,
        follow_up: BookingFollowUp,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._ledger = ledger
        self._sessions = sessions
        self._reservations = reservations
        self._gateway = gateway
        self._follow_up = follow_up
        self._clock = clock

    def handle(self, payload: bytes, signature: str | None) -> ReconciliationResult:
        """Verify and reconcile one webhook delivery.

        Raises:
            InvalidSignatureError: If the signature does not verify.
            InvalidPayloadError: If the body is not a valid event.
        """
        return self.reconcile(self._gateway.verify_event(payload, signature))

    def reconcile(self, event: PaymentEvent) -> ReconciliationResult:
        if not isinstance(event, CheckoutCompleted):
            return self._ignore(event.event_id, f"unhandled_event:{event.event_type}")
        if not event.paid:
            return self._ignore(event.event_id, "payment_status_not_paid")
        if not event.has_correlation:
            return self._ignore(event.event_id, "missing_metadata")
        try:
            session_id = SessionId(UUID(event.session_id))
            participant_id = ParticipantId(event.participant_id)
        except ValueError:
            return self._ignore(event.event_id, "invalid_metadata")

        try:
            return self._reconcile_checkout(event, session_id, participant_id)
        finally:
            invalidate_session(session_id)

    def _reconcile_checkout(
        self,
        event: CheckoutCompleted,
        session_id: SessionId,
        participant_id: ParticipantId,
    ) -> ReconciliationResult:
        session = self._sessions.get_session(session_id)
        if session is not None and not reservation_window_open(session, self._clock()):
            existing = self._reservations.find_reservation(session_id, participant_id)
            if existing is None:
                return self._refund(event, "late_payment")
            return self._finish(event, ReserveOutcome.ALREADY_BOOKED, session, existing)

        result = self._ledger.reserve(session_id, participant_id)
        if result.outcome in REFUNDABLE:
            return self._refund(event, result.outcome.value)

        if session is None:
            session = self._sessions.get_session(session_id)
        return self._finish(event, result.outcome, session, result.reservation)

    def _finish(
        self,
        event: CheckoutCompleted,
        outcome: ReserveOutcome,
        session: Session | None,
        reservation: Reservation | None,
    ) -> ReconciliationResult:
        if session is not None and reservation is not None:
            reservation = self._follow_up.complete(session, reservation, event.email_hints)
        mapped = (
            ReconciliationOutcome.BOOKED
            if outcome is ReserveOutcome.BOOKED
            else ReconciliationOutcome.ALREADY_BOOKED
        )
        return ReconciliationResult(mapped, reservation=reservation)

    def _refund(self, event: CheckoutCompleted, reason: str) -> ReconciliationResult:
        if not event.payment_reference:
            logger.warning(
                "Refund skipped: no payment reference",
                extra={"event_id": event.event_id, "reason": reason},
            )
            return ReconciliationResult(ReconciliationOutcome.REFUND_SKIPPED, reason)

        refund_id = self._gateway.refund(
            event.payment_reference, refund_idempotency_key(event.event_id)
        )
        logger.warning(
            "Payment refunded",
            extra={"event_id": event.event_id, "refund_id": refund_id, "reason": reason},
        )
        return ReconciliationResult(ReconciliationOutcome.REFUNDED, reason)

    def _ignore(self, event_id: str, reason: str) -> ReconciliationResult:
        logger.info("Payment event ignored", extra={"event_id": event_id, "reason": reason})
        return ReconciliationResult(ReconciliationOutcome.IGNORED, reason)
