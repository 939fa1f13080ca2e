"""
Timezone and date-time utilities for the calendar core.

All occurrence times are naive wall-clock datetimes interpreted in the
zone of the calendar that owns them. Conversion between zones keeps the
absolute instant and recomputes the wall-clock reading.
"""

from datetime import date, datetime, time, tzinfo
from typing import Union

import pytz

from .errors import InvalidArgumentError


ZoneLike = Union[str, tzinfo]

# Bounds used for "whole day" queries and copies
DAY_START = time(0, 0, 0)
DAY_END = time(23, 59, 59)


def resolve_zone(zone: ZoneLike) -> tzinfo:
    """
    Resolve an IANA zone id to a pytz timezone.

    Args:
        zone: Zone id such as "America/New_York", or an already resolved tzinfo.

    Returns:
        The pytz timezone object.

    Raises:
        InvalidArgumentError: If the id does not name a known zone.
    """
    if isinstance(zone, tzinfo):
        return zone
    if not isinstance(zone, str) or not zone.strip():
        raise InvalidArgumentError(f"Invalid timezone specified: {zone!r}")
    try:
        return pytz.timezone(zone.strip())
    except pytz.UnknownTimeZoneError:
        raise InvalidArgumentError(f"Invalid timezone specified: {zone!r}") from None


def zone_name(zone: ZoneLike) -> str:
    """Get the canonical id of a zone."""
    tz = resolve_zone(zone)
    return getattr(tz, 'zone', None) or str(tz)


def is_valid_zone(zone: str) -> bool:
    """Check whether a string names a known IANA zone."""
    try:
        resolve_zone(zone)
    except InvalidArgumentError:
        return False
    return True


def convert_wall_clock(dt: datetime, from_zone: ZoneLike, to_zone: ZoneLike) -> datetime:
    """
    Convert a naive wall-clock datetime from one zone to another.

    The instant is preserved; only its local reading changes.

    Args:
        dt: Naive datetime read in from_zone.
        from_zone: Zone the datetime is currently expressed in.
        to_zone: Zone to express the same instant in.

    Returns:
        A naive datetime read in to_zone.
    """
    source = resolve_zone(from_zone)
    target = resolve_zone(to_zone)
    if dt.tzinfo is not None:
        aware = dt.astimezone(source)
    else:
        aware = source.localize(dt)
    return aware.astimezone(target).replace(tzinfo=None)


def to_utc(dt: datetime, zone: ZoneLike) -> datetime:
    """Convert a naive wall-clock datetime in zone to an aware UTC datetime."""
    return resolve_zone(zone).localize(dt).astimezone(pytz.UTC)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Get the first and last second of a calendar day."""
    return datetime.combine(day, DAY_START), datetime.combine(day, DAY_END)


def parse_iso_datetime(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 local date-time such as "2025-06-05T10:00".

    Datetime objects pass through unchanged. Strings carrying a UTC offset
    are rejected because the core only handles calendar-local wall-clock time.

    Raises:
        InvalidArgumentError: If the value is not a local ISO date-time.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or 'T' not in value.strip().upper():
        raise InvalidArgumentError(f"Not an ISO-8601 date-time: {value!r}")
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise InvalidArgumentError(f"Not an ISO-8601 date-time: {value!r}") from None
    if parsed.tzinfo is not None:
        raise InvalidArgumentError(f"Expected a local date-time without offset: {value!r}")
    return parsed


def parse_iso_date(value: Union[str, date]) -> date:
    """
    Parse an ISO-8601 calendar date such as "2025-06-05".

    Raises:
        InvalidArgumentError: If the value is not an ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidArgumentError(f"Not an ISO-8601 date: {value!r}") from None


def parse_iso_date_or_datetime(value: Union[str, date]) -> Union[date, datetime]:
    """Parse a value that may be either a local date or a local date-time."""
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str) and 'T' in value.strip().upper():
        return parse_iso_datetime(value)
    return parse_iso_date(value)
