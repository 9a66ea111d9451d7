"""Inbound payment gateway events.

Events are a closed union: checkout completion is the only kind acted on,
every other kind parses to ``UnhandledEvent`` and is a no-op.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

CHECKOUT_COMPLETED = "checkout.session.completed"
PAID = "paid"

PARTICIPANT_METADATA_KEY = "participant_id"
SESSION_METADATA_KEY = "session_id"


@dataclass(frozen=True)
class CheckoutCompleted:
    event_id: str
    session_id: str | None
    participant_id: str | None
    payment_reference: str | None
    paid: bool
    customer_email: str | None = None
    fallback_email: str | None = None

    @property
    def has_correlation(self) -> bool:
        return bool(self.session_id and self.participant_id)

    @property
    def email_hints(self) -> tuple[str | None, ...]:
        return (self.customer_email, self.fallback_email)


@dataclass(frozen=True)
class UnhandledEvent:
    event_id: str
    event_type: str


PaymentEvent = CheckoutCompleted | UnhandledEvent


def _reference(value: Any) -> str | None:
    # Gateways may expand the payment object inline instead of sending its id.
    if isinstance(value, Mapping):
        value = value.get("id")
    return str(value) if value else None


def parse_event(data: Mapping[str, Any]) -> PaymentEvent:
    """Turn a verified event body into a PaymentEvent.

    Raises:
        ValueError: If the body has no event id or type.
    """
    event_id = data.get("id")
    event_type = data.get("type")
    if not event_id or not event_type:
        raise ValueError("Event is missing id or type")

    if event_type != CHECKOUT_COMPLETED:
        return UnhandledEvent(event_id=str(event_id), event_type=str(event_type))

    obj = (data.get("data") or {}).get("object") or {}
    metadata = obj.get("metadata") or {}
    customer_details = obj.get("customer_details") or {}

    return CheckoutCompleted(
        event_id=str(event_id),
        session_id=metadata.get(SESSION_METADATA_KEY) or None,
        participant_id=metadata.get(PARTICIPANT_METADATA_KEY) or None,
        payment_reference=_reference(obj.get("payment_intent")),
        paid=obj.get("payment_status") == PAID,
        customer_email=customer_details.get("email") or None,
        fallback_email=obj.get("customer_email") or None,
    )
