"""Participant-facing signup flows: direct reservation and paid checkout."""

import logging

from bookings.conf import get_bookings_settings
from bookings.domain import ParticipantId
from bookings.domain.capacity import effective_capacity
from bookings.domain.errors import (
    AlreadyReservedError,
    CapacityExceededError,
    FreeSessionError,
    PaymentRequiredError,
    SessionNotOpenError,
)
from bookings.domain.outcomes import ReserveOutcome, ReserveResult
from bookings.domain.windows import reservation_window_open
from bookings.gateways.interfaces import CheckoutRequest, PaymentGateway
from bookings.services.catalog import SessionCatalog, parse_session_id
from bookings.services.follow_up import BookingFollowUp
from bookings.services.ledger import ReservationLedger
from bookings.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


class SignupService:
    def __init__(
        self,
        catalog: SessionCatalog,
        ledger: ReservationLedger,
        reservations: ReservationStore,
        follow_up: BookingFollowUp,
        gateway: PaymentGateway,
        site_url: str | None = None,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._reservations = reservations
        self._follow_up = follow_up
        self._gateway = gateway
        self._site_url = site_url if site_url is not None else get_bookings_settings().site_url

    def reserve(
        self, session_id: str, participant_id: ParticipantId, *, is_admin: bool = False
    ) -> ReserveResult:
        """Reserve a seat without payment.

        Free sessions are open to everyone; paid ones only to admins.

        Raises:
            InvalidSessionIdError: If the session_id is not a valid UUID.
            PaymentRequiredError: If a non-admin tries to skip checkout.
        """
        sid = parse_session_id(session_id)
        session = self._catalog.find_session(sid)
        if session is None:
            return ReserveResult(ReserveOutcome.SESSION_NOT_FOUND)
        if not session.price.is_free and not is_admin:
            raise PaymentRequiredError()

        result = self._ledger.reserve(sid, participant_id)
        if result.seat_held and result.reservation is not None:
            reservation = self._follow_up.complete(session, result.reservation)
            return ReserveResult(result.outcome, reservation)
        return result

    def start_checkout(self, session_id: str, participant_id: ParticipantId) -> str:
        """Create a gateway checkout for a paid session and return its URL.

        The occupancy checks here only save the participant a pointless
        payment; the ledger re-checks everything when the payment lands.

        Raises:
            InvalidSessionIdError, SessionNotFoundError, FreeSessionError,
            SessionNotOpenError, CapacityExceededError, AlreadyReservedError,
            GatewayError.
        """
        listing = self._catalog.get_listing(session_id)
        session = listing.session
        if session.price.is_free:
            raise FreeSessionError()
        if not session.is_scheduled:
            raise SessionNotOpenError("Session is not open for signup")
        if not reservation_window_open(session, self._catalog.now()):
            raise SessionNotOpenError("Signup for this session has closed")
        if self._reservations.find_reservation(session.id, participant_id):
            raise AlreadyReservedError()
        if listing.seats_taken >= effective_capacity(session):
            raise CapacityExceededError()

        url = self._gateway.create_checkout(
            CheckoutRequest(
                session=session,
                participant_id=participant_id,
                success_url=(
                    f"{self._site_url}/sessions/success"
                    f"?cs_id={{CHECKOUT_SESSION_ID}}&session_id={session.id}"
                ),
                cancel_url=f"{self._site_url}/sessions/{session.id}?canceled=1",
            )
        )
        logger.info(
            "Checkout created",
            extra={"session_id": str(session.id), "participant_id": participant_id.value},
        )
        return url
