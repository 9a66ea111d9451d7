"""Conversions between stored UTC instants and wall-clock times."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

LOCAL_INPUT_FORMAT = "%Y-%m-%dT%H:%M"
DISPLAY_FORMAT = "%a, %b %d, %I:%M %p %Z"


def get_zone(name: str | None) -> ZoneInfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def is_valid_zone(name: str | None) -> bool:
    return get_zone(name) is not None


def local_to_utc(value: str, zone_name: str) -> datetime:
    """Interpret ``YYYY-MM-DDTHH:MM`` as wall time in ``zone_name``.

    DST-aware: the zone's offset on that date is used.

    Raises:
        ValueError: If the value is malformed or the zone is unknown.
    """
    zone = get_zone(zone_name)
    if zone is None:
        raise ValueError(f"Unknown timezone {zone_name!r}")
    naive = datetime.strptime(value.strip(), LOCAL_INPUT_FORMAT)
    return naive.replace(tzinfo=zone).astimezone(UTC)


def utc_to_local_input(value: datetime, zone_name: str) -> str:
    zone = get_zone(zone_name) or UTC
    return value.astimezone(zone).strftime(LOCAL_INPUT_FORMAT)


def format_for_participant(value: datetime, zone_name: str | None) -> str:
    """Format an instant in the participant's zone, falling back to UTC."""
    zone = get_zone(zone_name) or UTC
    return value.astimezone(zone).strftime(DISPLAY_FORMAT)
