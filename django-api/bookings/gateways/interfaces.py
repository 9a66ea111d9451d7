"""Interfaces for external collaborators: payment gateway, mailer, identity."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from bookings.domain import Milestone, ParticipantId, Session
from bookings.domain.payments import PaymentEvent


@dataclass(frozen=True)
class CheckoutRequest:
    session: Session
    participant_id: ParticipantId
    success_url: str
    cancel_url: str


class PaymentGateway(ABC):
    """Card payment processor."""

    @abstractmethod
    def verify_event(self, payload: bytes, signature: str | None) -> PaymentEvent:
        """Verify a signed event body and parse it.

        Raises:
            InvalidSignatureError: If the signature is missing or wrong.
            InvalidPayloadError: If the verified body is not a valid event.
        """
        ...

    @abstractmethod
    def refund(self, payment_reference: str, idempotency_key: str) -> str:
        """Refund a payment in full and return the refund ID.

        Repeated calls with the same key refund at most once.

        Raises:
            GatewayError: If the gateway cannot be reached or rejects the call.
        """
        ...

    @abstractmethod
    def create_checkout(self, request: CheckoutRequest) -> str:
        """Create a hosted checkout and return the URL to send the payer to.

        Raises:
            GatewayError: If the gateway cannot be reached or rejects the call.
        """
        ...


class Mailer(ABC):
    """Outbound email delivery.

    Methods return True only when the provider accepted the message.
    """

    @abstractmethod
    def send_confirmation(
        self, *, to: str, session: Session, timezone_name: str | None
    ) -> bool:
        ...

    @abstractmethod
    def send_reminder(
        self,
        *,
        to: str,
        session: Session,
        milestone: Milestone,
        timezone_name: str | None,
    ) -> bool:
        ...


class IdentityDirectory(ABC):
    """Read-only lookups against the identity service."""

    @abstractmethod
    def email_for(self, participant_id: ParticipantId) -> str | None:
        ...
