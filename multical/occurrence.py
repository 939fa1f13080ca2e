"""
Immutable value type for one concrete calendar event instance.

An Occurrence is identified by (subject, start, end). Description, location
and status are metadata: they travel with the occurrence but are ignored
by equality, hashing and conflict detection.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from .errors import InvalidArgumentError
from .timezone_utils import ZoneLike, convert_wall_clock


# Default span of an occurrence created from a date only
ALL_DAY_START = time(8, 0)
ALL_DAY_END = time(17, 0)


class Location(Enum):
    """Where an event takes place."""
    PHYSICAL = "Physical"
    ONLINE = "Online"
    UNSET = ""

    @classmethod
    def parse(cls, value: str) -> 'Location':
        """
        Parse a location literal, case-insensitively.

        Raises:
            InvalidArgumentError: Unless value is "online" or "physical".
        """
        lowered = str(value).strip().lower()
        if lowered == "online":
            return cls.ONLINE
        if lowered == "physical":
            return cls.PHYSICAL
        raise InvalidArgumentError(
            f"Invalid location value: {value!r} (must be 'Online' or 'Physical')"
        )

    def __str__(self) -> str:
        return self.value


class Status(Enum):
    """Visibility of an event."""
    PUBLIC = "Public"
    PRIVATE = "Private"
    UNSET = ""

    @classmethod
    def parse(cls, value: str) -> 'Status':
        """
        Parse a status literal, case-insensitively.

        Raises:
            InvalidArgumentError: Unless value is "public" or "private".
        """
        lowered = str(value).strip().lower()
        if lowered == "public":
            return cls.PUBLIC
        if lowered == "private":
            return cls.PRIVATE
        raise InvalidArgumentError(
            f"Invalid status value: {value!r} (must be 'Public' or 'Private')"
        )

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Occurrence:
    """
    One concrete event instance.

    Occurrences are never mutated: every with_* method returns a new value
    with all other fields copied.
    """
    subject: str
    start: datetime
    end: datetime
    description: Optional[str] = field(default=None, compare=False)
    location: Location = field(default=Location.UNSET, compare=False)
    status: Status = field(default=Status.UNSET, compare=False)

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidArgumentError(
                f"Event end {self.end.isoformat()} cannot be before start {self.start.isoformat()}"
            )

    @classmethod
    def all_day(
        cls,
        subject: str,
        day: date,
        day_start: time = ALL_DAY_START,
        day_end: time = ALL_DAY_END,
        **metadata
    ) -> 'Occurrence':
        """
        Create an all-day occurrence on the given date.

        Args:
            subject: Event subject
            day: The calendar date
            day_start: Time the all-day block begins
            day_end: Time the all-day block ends
            **metadata: Optional description, location and status

        Returns:
            A new Occurrence spanning day_start to day_end on day
        """
        return cls(
            subject,
            datetime.combine(day, day_start),
            datetime.combine(day, day_end),
            **metadata
        )

    # ==================== Derived Properties ====================

    @property
    def key(self) -> tuple[str, datetime, datetime]:
        """The identity triple, also used as the conflict key."""
        return (self.subject, self.start, self.end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_single_day(self) -> bool:
        """Check whether start and end fall on the same calendar day."""
        return self.start.date() == self.end.date()

    def contains_instant(self, instant: datetime) -> bool:
        """Check whether instant lies strictly inside (start, end)."""
        return self.start < instant < self.end

    def within(self, start: datetime, end: datetime) -> bool:
        """Check whether [self.start, self.end] lies fully inside [start, end]."""
        return self.start >= start and self.end <= end

    def matches(self, subject: str, start: datetime, end: Optional[datetime] = None) -> bool:
        """Check subject and start, plus end when given."""
        if self.subject != subject or self.start != start:
            return False
        return end is None or self.end == end

    # ==================== Transforms ====================

    def with_subject(self, subject: str) -> 'Occurrence':
        return replace(self, subject=subject)

    def with_start(self, start: datetime) -> 'Occurrence':
        """
        Move the occurrence to a new start, keeping its length.

        The end shifts by the same delta as the start.
        """
        return replace(self, start=start, end=self.end + (start - self.start))

    def with_end(self, end: datetime) -> 'Occurrence':
        """
        Change the end, keeping the start.

        Raises:
            InvalidArgumentError: If end precedes the start.
        """
        if end < self.start:
            raise InvalidArgumentError("End date/time cannot be before start date/time.")
        return replace(self, end=end)

    def with_start_and_end(self, start: datetime, end: datetime) -> 'Occurrence':
        return replace(self, start=start, end=end)

    def with_description(self, description: Optional[str]) -> 'Occurrence':
        return replace(self, description=description)

    def with_location(self, location: Location) -> 'Occurrence':
        return replace(self, location=location)

    def with_status(self, status: Status) -> 'Occurrence':
        return replace(self, status=status)

    def convert_zone(self, from_zone: ZoneLike, to_zone: ZoneLike) -> 'Occurrence':
        """
        Re-express start and end in another zone, preserving the instants.

        Args:
            from_zone: Zone the current wall-clock times are read in
            to_zone: Zone to express the times in

        Returns:
            A new Occurrence with converted wall-clock start and end
        """
        return self.with_start_and_end(
            convert_wall_clock(self.start, from_zone, to_zone),
            convert_wall_clock(self.end, from_zone, to_zone),
        )

    def __str__(self) -> str:
        return (
            f"[Subject: {self.subject}, Start: {self.start.isoformat()}, "
            f"End: {self.end.isoformat()}, Description: {self.description or 'N/A'}, "
            f"Location: {str(self.location) or 'N/A'}, Status: {str(self.status) or 'N/A'}]"
        )
