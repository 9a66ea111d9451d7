"""Domain error codes for the bookings module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_SESSION_ID = "INVALID_SESSION_ID"
    INVALID_SESSION_DATA = "INVALID_SESSION_DATA"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_NOT_OPEN = "SESSION_NOT_OPEN"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NOT_ADMIN = "NOT_ADMIN"
    NOT_RESERVED = "NOT_RESERVED"
    ALREADY_RESERVED = "ALREADY_RESERVED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    JOIN_WINDOW_CLOSED = "JOIN_WINDOW_CLOSED"
    ROOM_NOT_CONFIGURED = "ROOM_NOT_CONFIGURED"
    PAYMENT_REQUIRED = "PAYMENT_REQUIRED"
    FREE_SESSION = "FREE_SESSION"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    GATEWAY_UNAVAILABLE = "GATEWAY_UNAVAILABLE"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidSessionIdError(DomainError):
    """Raised when a session ID is not a valid UUID."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_SESSION_ID,
            message="Invalid session ID format",
        )


class InvalidSessionDataError(DomainError):
    """Raised when admin input for a session breaks a session invariant."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_SESSION_DATA, message=message)


class SessionNotFoundError(DomainError):
    """Raised when a session does not exist."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_NOT_FOUND,
            message="Session not found",
        )
        self.session_id = session_id


class SessionNotOpenError(DomainError):
    """Raised when a session can no longer take reservations."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.SESSION_NOT_OPEN, message=reason)


class NotAuthenticatedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_AUTHENTICATED,
            message="Sign in required",
        )


class NotAdminError(DomainError):
    """Raised when a participant is not on the admin allowlist."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_ADMIN,
            message="Admin access required",
        )


class NotReservedError(DomainError):
    """Raised when a participant has no reservation for the session."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_RESERVED,
            message="Reserve a seat before joining the room",
        )
        self.session_id = session_id


class AlreadyReservedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_RESERVED,
            message="You already hold a seat in this session",
        )


class CapacityExceededError(DomainError):
    """Raised when no seat or sub-room has space left."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message="Session is full",
        )


class JoinWindowClosedError(DomainError):
    """Raised when the room is joined outside its open window."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.JOIN_WINDOW_CLOSED,
            message="Rooms open 5 minutes before start and close 10 minutes after the end",
        )


class RoomNotConfiguredError(DomainError):
    """Raised when a sub-room number has no meeting link configured."""

    def __init__(self, room_number: int) -> None:
        super().__init__(
            code=ErrorCode.ROOM_NOT_CONFIGURED,
            message=f"Room #{room_number} is not configured yet",
        )
        self.room_number = room_number


class PaymentRequiredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_REQUIRED,
            message="This session requires payment at checkout",
        )


class FreeSessionError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.FREE_SESSION,
            message="This session is free; reserve it directly",
        )


class InvalidSignatureError(DomainError):
    """Raised when a payment event signature does not verify."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_SIGNATURE,
            message="Webhook signature verification failed",
        )


class InvalidPayloadError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_PAYLOAD,
            message="Malformed webhook payload",
        )


class InvalidCredentialError(DomainError):
    """Raised when a scheduled-job caller presents a bad shared secret."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CREDENTIAL,
            message="Unauthorized",
        )


class GatewayError(DomainError):
    """Raised when the payment gateway cannot complete a call.

    Always retryable from the webhook sender's point of view.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ErrorCode.GATEWAY_UNAVAILABLE,
            message=f"Payment gateway unavailable during {operation}",
        )
        self.operation = operation
