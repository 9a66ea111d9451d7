"""Authorization checks. Every allowlist and secret is passed in explicitly."""

import hmac
import re
from collections.abc import Collection, Mapping

from bookings.domain.errors import InvalidCredentialError, NotAdminError

_BEARER = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def is_admin(participant_id: str | None, admin_ids: Collection[str]) -> bool:
    return bool(participant_id) and participant_id in admin_ids


def require_admin(participant_id: str | None, admin_ids: Collection[str]) -> None:
    """Raises NotAdminError unless the participant is on the allowlist."""
    if not is_admin(participant_id, admin_ids):
        raise NotAdminError()


def provided_cron_secret(headers: Mapping[str, str]) -> str | None:
    """Read the secret from ``X-Cron-Secret`` or an ``Authorization: Bearer`` header."""
    if secret := headers.get("X-Cron-Secret"):
        return secret
    match = _BEARER.match(headers.get("Authorization", ""))
    return match.group(1) if match else None


def require_cron_secret(provided: str | None, expected: str) -> None:
    """Raises InvalidCredentialError unless the secrets match.

    An unset expected secret rejects every caller.
    """
    if not expected or not provided:
        raise InvalidCredentialError()
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise InvalidCredentialError()
