"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError
from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings import wiring
from bookings.cache import SESSION_LIST_KEY, session_detail_key
from bookings.conf import get_bookings_settings
from bookings.domain import ParticipantId, SessionId
from bookings.domain.errors import (
    DomainError,
    ErrorCode,
    GatewayError,
    InvalidPayloadError,
    InvalidSignatureError,
    NotAuthenticatedError,
)
from bookings.domain.outcomes import ReserveOutcome
from bookings.handlers.serializers import (
    AdminSessionSerializer,
    ReservationSerializer,
    SessionInputSerializer,
    SessionListingSerializer,
)
from bookings.services.access import (
    is_admin,
    provided_cron_secret,
    require_admin,
    require_cron_secret,
)
from bookings.services.catalog import parse_session_id

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.INVALID_SESSION_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_SESSION_DATA: status.HTTP_400_BAD_REQUEST,
    ErrorCode.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SESSION_NOT_OPEN: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_ADMIN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_RESERVED: status.HTTP_403_FORBIDDEN,
    ErrorCode.ALREADY_RESERVED: status.HTTP_409_CONFLICT,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCode.JOIN_WINDOW_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.ROOM_NOT_CONFIGURED: status.HTTP_409_CONFLICT,
    ErrorCode.PAYMENT_REQUIRED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.FREE_SESSION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_SIGNATURE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PAYLOAD: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.GATEWAY_UNAVAILABLE: status.HTTP_502_BAD_GATEWAY,
}

STATUS_BY_OUTCOME = {
    ReserveOutcome.BOOKED: status.HTTP_201_CREATED,
    ReserveOutcome.ALREADY_BOOKED: status.HTTP_200_OK,
    ReserveOutcome.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ReserveOutcome.WINDOW_CLOSED: status.HTTP_409_CONFLICT,
    ReserveOutcome.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def error_response(error: DomainError) -> Response:
    return Response(
        {"error": {"code": error.code.value, "message": error.message}},
        status=STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


def optional_participant(request: Request) -> ParticipantId | None:
    user = request.user
    if user is None or not user.is_authenticated:
        return None
    return ParticipantId(user.get_username())


def current_participant(request: Request) -> ParticipantId:
    participant = optional_participant(request)
    if participant is None:
        raise NotAuthenticatedError()
    return participant


class BookingsView(APIView):
    """Base view that renders domain errors with their mapped status."""

    permission_classes = [AllowAny]

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, DomainError):
            return error_response(exc)
        return super().handle_exception(exc)


def _with_reserved_flags(items: list[dict], reserved: set[SessionId]) -> list[dict]:
    reserved_ids = {str(s) for s in reserved}
    return [{**item, "reserved": item["id"] in reserved_ids} for item in items]


class SessionListView(BookingsView):
    """Handler for GET /api/sessions"""

    def get(self, request: Request) -> Response:
        items = cache.get(SESSION_LIST_KEY)
        if items is None:
            listings = wiring.catalog().list_upcoming()
            items = list(SessionListingSerializer(listings, many=True).data)
            cache.set(SESSION_LIST_KEY, items, get_bookings_settings().list_cache_seconds)

        reserved = wiring.catalog().reserved_session_ids(
            optional_participant(request),
            [SessionId.from_string(item["id"]) for item in items],
        )
        return Response(_with_reserved_flags(items, reserved))


class SessionDetailView(BookingsView):
    """Handler for GET /api/sessions/{session_id}"""

    def get(self, request: Request, session_id: str) -> Response:
        sid = parse_session_id(session_id)
        key = session_detail_key(sid)
        item = cache.get(key)
        if item is None:
            item = dict(SessionListingSerializer(wiring.catalog().get_listing(session_id)).data)
            cache.set(key, item, get_bookings_settings().list_cache_seconds)

        reserved = wiring.catalog().reserved_session_ids(optional_participant(request), [sid])
        return Response(_with_reserved_flags([item], reserved)[0])


class ReservationView(BookingsView):
    """Handler for POST /api/sessions/{session_id}/reservations

    Direct reservation: free sessions for anyone, paid ones for admins.
    """

    admin_ids: frozenset[str] = frozenset()

    def post(self, request: Request, session_id: str) -> Response:
        participant = current_participant(request)
        result = wiring.signup().reserve(
            session_id,
            participant,
            is_admin=is_admin(participant.value, self.admin_ids),
        )
        body = {
            "outcome": result.outcome.value,
            "reservation": (
                ReservationSerializer(result.reservation).data
                if result.reservation is not None
                else None
            ),
        }
        return Response(body, status=STATUS_BY_OUTCOME[result.outcome])


class CheckoutView(BookingsView):
    """Handler for POST /api/sessions/{session_id}/checkout"""

    def post(self, request: Request, session_id: str) -> Response:
        participant = current_participant(request)
        url = wiring.signup().start_checkout(session_id, participant)
        return Response({"url": url})


class JoinView(BookingsView):
    """Handler for GET /api/sessions/{session_id}/join

    Redirects a reserved participant to their sub-room. An optional ``tz``
    query parameter updates the timezone used for their emails.
    """

    def get(self, request: Request, session_id: str) -> HttpResponseRedirect:
        participant = current_participant(request)
        link = wiring.room_join().join(
            parse_session_id(session_id),
            participant,
            timezone_hint=request.query_params.get("tz"),
        )
        return HttpResponseRedirect(link)


class StripeWebhookView(APIView):
    """Handler for POST /api/webhooks/stripe

    Anything other than a 2xx makes the processor redeliver, so only
    infrastructure failures answer 500.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        try:
            result = wiring.reconciler().handle(
                request.body, request.headers.get("Stripe-Signature")
            )
        except (InvalidSignatureError, InvalidPayloadError) as exc:
            logger.warning("Rejected payment event", extra={"code": exc.code.value})
            return error_response(exc)
        except (GatewayError, DatabaseError):
            logger.exception("Payment event processing failed")
            return Response(
                {"error": {"code": "TEMPORARY_FAILURE", "message": "Try again later"}},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(
            {"received": True, "outcome": result.outcome.value, "reason": result.reason}
        )


class ReminderSweepView(BookingsView):
    """Handler for GET/POST /api/cron/reminders"""

    authentication_classes: list = []
    cron_secret: str = ""

    def get(self, request: Request) -> Response:
        return self._sweep(request)

    def post(self, request: Request) -> Response:
        return self._sweep(request)

    def _sweep(self, request: Request) -> Response:
        require_cron_secret(provided_cron_secret(request.headers), self.cron_secret)
        summary = wiring.reminder_sweep().run()
        return Response(
            {
                "ok": True,
                "sent": summary.sent,
                "skippedLate": summary.skipped_late,
                "invalidEmail": summary.invalid_email,
                "failures": [
                    {"reservationId": f.reservation_id, "reason": f.reason}
                    for f in summary.failures
                ],
            }
        )


class AdminView(BookingsView):
    admin_ids: frozenset[str] = frozenset()

    def initial(self, request: Request, *args, **kwargs) -> None:
        super().initial(request, *args, **kwargs)
        require_admin(current_participant(request).value, self.admin_ids)

    def serializer_context(self) -> dict:
        return {"reference_timezone": get_bookings_settings().reference_timezone}

    def room_link(self, serializer: SessionInputSerializer) -> str | None:
        room_number = serializer.validated_data.get("room_number")
        if room_number:
            return wiring.catalog().room_link_for(room_number)
        return serializer.validated_data.get("room_link") or None


class AdminSessionListView(AdminView):
    """Handler for POST /api/admin/sessions"""

    def post(self, request: Request) -> Response:
        serializer = SessionInputSerializer(data=request.data, context=self.serializer_context())
        serializer.is_valid(raise_exception=True)
        created = wiring.catalog().create_sessions(
            serializer.to_draft(self.room_link(serializer)),
            repeat_weeks=serializer.validated_data["repeat_weeks"],
        )
        logger.info(
            "Sessions created",
            extra={"count": len(created), "admin": current_participant(request).value},
        )
        data = AdminSessionSerializer(created, many=True, context=self.serializer_context()).data
        return Response(data, status=status.HTTP_201_CREATED)


class AdminSessionDetailView(AdminView):
    """Handler for GET/PUT/DELETE /api/admin/sessions/{session_id}"""

    def get(self, request: Request, session_id: str) -> Response:
        session = wiring.catalog().get_session(session_id)
        return Response(AdminSessionSerializer(session, context=self.serializer_context()).data)

    def put(self, request: Request, session_id: str) -> Response:
        serializer = SessionInputSerializer(data=request.data, context=self.serializer_context())
        serializer.is_valid(raise_exception=True)
        session = wiring.catalog().update_session(
            session_id, serializer.to_draft(self.room_link(serializer))
        )
        return Response(AdminSessionSerializer(session, context=self.serializer_context()).data)

    def delete(self, request: Request, session_id: str) -> Response:
        wiring.catalog().delete_session(session_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
