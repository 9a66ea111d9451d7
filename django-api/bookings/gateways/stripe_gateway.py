"""Stripe implementation of the payment gateway."""

import json
import logging

import stripe

from bookings.domain.errors import GatewayError, InvalidPayloadError, InvalidSignatureError
from bookings.domain.payments import (
    PARTICIPANT_METADATA_KEY,
    SESSION_METADATA_KEY,
    PaymentEvent,
    parse_event,
)
from bookings.gateways.interfaces import CheckoutRequest, PaymentGateway

logger = logging.getLogger(__name__)

REFUND_REASON = "requested_by_customer"


def configure_http_client(timeout_seconds: int, max_network_retries: int = 2) -> None:
    """Bound every Stripe call by ``timeout_seconds``."""
    stripe.default_http_client = stripe.RequestsClient(timeout=timeout_seconds)
    stripe.max_network_retries = max_network_retries


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str, webhook_secret: str, currency: str = "usd") -> None:
        self._api_key = api_key
        self._webhook_secret = webhook_secret
        self._currency = currency

    def verify_event(self, payload: bytes, signature: str | None) -> PaymentEvent:
        if not signature or not self._webhook_secret:
            raise InvalidSignatureError()
        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(body, signature, self._webhook_secret)
        except UnicodeDecodeError:
            raise InvalidPayloadError()
        except stripe.SignatureVerificationError:
            logger.warning("Rejected webhook with invalid signature")
            raise InvalidSignatureError()

        try:
            return parse_event(json.loads(body))
        except (ValueError, AttributeError):
            raise InvalidPayloadError()

    def refund(self, payment_reference: str, idempotency_key: str) -> str:
        try:
            refund = stripe.Refund.create(
                payment_intent=payment_reference,
                reason=REFUND_REASON,
                idempotency_key=idempotency_key,
                api_key=self._api_key,
            )
        except stripe.StripeError as e:
            logger.error(
                "Refund failed",
                extra={"payment_reference": payment_reference, "error": str(e)},
            )
            raise GatewayError("refund") from e
        return refund.id

    def create_checkout(self, request: CheckoutRequest) -> str:
        session = request.session
        metadata = {
            PARTICIPANT_METADATA_KEY: request.participant_id.value,
            SESSION_METADATA_KEY: str(session.id),
        }
        try:
            checkout = stripe.checkout.Session.create(
                mode="payment",
                line_items=[
                    {
                        "price_data": {
                            "currency": self._currency,
                            "unit_amount": session.price.cents,
                            "product_data": {
                                "name": session.title,
                                "description": "Reserve a spot for this session",
                            },
                        },
                        "quantity": 1,
                    }
                ],
                success_url=request.success_url,
                cancel_url=request.cancel_url,
                client_reference_id=request.participant_id.value,
                metadata=metadata,
                payment_intent_data={"metadata": metadata},
                api_key=self._api_key,
            )
        except stripe.StripeError as e:
            logger.error("Checkout creation failed", extra={"error": str(e)})
            raise GatewayError("checkout") from e
        return checkout.url
