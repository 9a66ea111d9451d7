"""Unit tests for payment reconciliation.

Run with: pytest tests/test_reconciliation.py -v
"""

import json
from datetime import timedelta

import pytest

from bookings.domain import Capacity, ParticipantId
from bookings.domain.errors import GatewayError, InvalidPayloadError, InvalidSignatureError
from bookings.domain.outcomes import ReconciliationOutcome
from bookings.domain.payments import parse_event
from bookings.services.follow_up import BookingFollowUp
from bookings.services.ledger import ReservationLedger
from bookings.services.reconciliation import PaymentReconciler, refund_idempotency_key

from fakes import NOW, VALID_SIGNATURE, checkout_event, make_reservation, make_session


@pytest.fixture
def reconciler(store, gateway, mailer, directory, clock):
    return PaymentReconciler(
        ledger=ReservationLedger(store, clock),
        sessions=store,
        reservations=store,
        gateway=gateway,
        follow_up=BookingFollowUp(store, mailer, directory, clock),
        clock=clock,
    )


class TestReconcile:
    """Tests for PaymentReconciler.reconcile."""

    def test_paid_checkout_books_and_confirms(self, reconciler, store, mailer):
        """A paid checkout reserves a seat and sends one confirmation."""
        session = store.add(make_session())
        result = reconciler.reconcile(parse_event(checkout_event(session, "writer-1")))
        assert result.outcome is ReconciliationOutcome.BOOKED
        reservation = store.find_reservation(session.id, ParticipantId("writer-1"))
        assert reservation.participant_email == "writer@example.com"
        assert reservation.confirmation_sent
        assert reservation.reminder_24h_at == session.starts_at - timedelta(hours=24)
        assert [to for to, _ in mailer.confirmations] == ["writer@example.com"]

    def test_replay_is_idempotent(self, reconciler, store, mailer, gateway):
        """Delivering the same event twice books once and confirms once."""
        session = store.add(make_session())
        event = parse_event(checkout_event(session, "writer-1"))
        reconciler.reconcile(event)
        result = reconciler.reconcile(event)
        assert result.outcome is ReconciliationOutcome.ALREADY_BOOKED
        assert store.count_reservations(session.id) == 1
        assert len(mailer.confirmations) == 1
        assert gateway.refund_calls == []

    def test_unpaid_checkout_is_ignored(self, reconciler, store):
        """A checkout that is not paid takes no action."""
        session = store.add(make_session())
        event = parse_event(checkout_event(session, "writer-1", payment_status="unpaid"))
        result = reconciler.reconcile(event)
        assert result.outcome is ReconciliationOutcome.IGNORED
        assert store.count_reservations(session.id) == 0

    def test_other_event_types_are_ignored(self, reconciler):
        """Unhandled event kinds are acknowledged without action."""
        result = reconciler.reconcile(parse_event({"id": "evt_9", "type": "charge.refunded"}))
        assert result.outcome is ReconciliationOutcome.IGNORED

    def test_missing_metadata_is_ignored(self, reconciler):
        """Without session and participant metadata nothing can be booked."""
        event = parse_event(
            {
                "id": "evt_1",
                "type": "checkout.session.completed",
                "data": {"object": {"payment_status": "paid", "payment_intent": "pi_1"}},
            }
        )
        result = reconciler.reconcile(event)
        assert result.outcome is ReconciliationOutcome.IGNORED
        assert result.reason == "missing_metadata"

    def test_malformed_session_id_is_ignored(self, reconciler, gateway):
        """Metadata that is not a session ID is ignored, not refunded."""
        payload = checkout_event(make_session(), "writer-1")
        payload["data"]["object"]["metadata"]["session_id"] = "garbage"
        result = reconciler.reconcile(parse_event(payload))
        assert result.outcome is ReconciliationOutcome.IGNORED
        assert gateway.refund_calls == []

    def test_full_session_is_refunded(self, reconciler, store, gateway):
        """Payment for a full session is refunded with a keyed request."""
        session = store.add(
            make_session(seat_cap=Capacity(1), room_link="https://meet.test/one")
        )
        store.add_reservation(make_reservation(session, "someone-else"))
        result = reconciler.reconcile(
            parse_event(checkout_event(session, "writer-1", event_id="evt_full"))
        )
        assert result.outcome is ReconciliationOutcome.REFUNDED
        assert result.reason == "capacity_exceeded"
        assert gateway.refund_calls == [("pi_1", refund_idempotency_key("evt_full"))]

    def test_refund_replay_refunds_once(self, reconciler, store, gateway):
        """Replaying a refunded event reuses the idempotency key."""
        session = store.add(
            make_session(seat_cap=Capacity(1), room_link="https://meet.test/one")
        )
        store.add_reservation(make_reservation(session, "someone-else"))
        event = parse_event(checkout_event(session, "writer-1"))
        reconciler.reconcile(event)
        reconciler.reconcile(event)
        assert len(gateway.refund_calls) == 2
        assert len(gateway.refunds) == 1

    def test_late_payment_is_refunded(self, reconciler, store, gateway, clock):
        """Payment landing after the reservation window closed is refunded."""
        session = store.add(make_session(starts_at=NOW - timedelta(minutes=10)))
        result = reconciler.reconcile(parse_event(checkout_event(session, "writer-1")))
        assert result.outcome is ReconciliationOutcome.REFUNDED
        assert result.reason == "late_payment"
        assert store.count_reservations(session.id) == 0

    def test_late_replay_of_booked_event_is_not_refunded(self, reconciler, store, gateway):
        """A seat holder's replayed event after start is ALREADY_BOOKED."""
        session = store.add(make_session(starts_at=NOW - timedelta(minutes=10)))
        store.add_reservation(make_reservation(session, "writer-1"))
        result = reconciler.reconcile(parse_event(checkout_event(session, "writer-1")))
        assert result.outcome is ReconciliationOutcome.ALREADY_BOOKED
        assert gateway.refund_calls == []

    def test_deleted_session_is_refunded(self, reconciler, gateway):
        """Payment for a session that no longer exists is refunded."""
        result = reconciler.reconcile(parse_event(checkout_event(make_session(), "writer-1")))
        assert result.outcome is ReconciliationOutcome.REFUNDED
        assert result.reason == "session_not_found"

    def test_refund_without_payment_reference_is_skipped(self, reconciler, gateway):
        """Without a payment reference the refund is skipped, not failed."""
        event = parse_event(checkout_event(make_session(), "writer-1", payment_intent=None))
        result = reconciler.reconcile(event)
        assert result.outcome is ReconciliationOutcome.REFUND_SKIPPED
        assert gateway.refund_calls == []

    def test_refund_failure_escapes(self, reconciler, gateway):
        """A gateway failure propagates so the delivery is retried."""
        gateway.fail_refunds = True
        with pytest.raises(GatewayError):
            reconciler.reconcile(parse_event(checkout_event(make_session(), "writer-1")))

    def test_mail_failure_keeps_reservation(self, reconciler, store, mailer):
        """A broken mailer does not undo the booking or block a later retry."""
        mailer.broken_addresses.add("writer@example.com")
        session = store.add(make_session())
        event = parse_event(checkout_event(session, "writer-1"))
        result = reconciler.reconcile(event)
        assert result.outcome is ReconciliationOutcome.BOOKED
        assert not store.find_reservation(session.id, ParticipantId("writer-1")).confirmation_sent

        mailer.broken_addresses.clear()
        reconciler.reconcile(event)
        assert store.find_reservation(session.id, ParticipantId("writer-1")).confirmation_sent


class TestHandle:
    """Tests for signature handling in PaymentReconciler.handle."""

    def test_bad_signature_is_rejected(self, reconciler):
        """A wrong signature raises InvalidSignatureError."""
        with pytest.raises(InvalidSignatureError):
            reconciler.handle(b"{}", "forged")

    def test_malformed_body_is_rejected(self, reconciler):
        """A correctly signed non-JSON body raises InvalidPayloadError."""
        with pytest.raises(InvalidPayloadError):
            reconciler.handle(b"not json", VALID_SIGNATURE)

    def test_signed_event_is_reconciled(self, reconciler, store):
        """A verified body flows through to a booking."""
        session = store.add(make_session())
        payload = json.dumps(checkout_event(session, "writer-1")).encode()
        result = reconciler.handle(payload, VALID_SIGNATURE)
        assert result.outcome is ReconciliationOutcome.BOOKED
