"""
Recurring event series built from a weekday pattern.

A Series is an ordered, immutable group of single-day Occurrences whose
start dates fall on the series' occurring weekdays. Series are either
generated from a seed occurrence (count or end date) or assembled from an
explicit member list by the edit and copy engines, which trust their input.
"""

from datetime import date, datetime, time
from enum import IntEnum
from typing import Iterable, Iterator, Optional

from dateutil.rrule import WEEKLY, rrule

from .errors import InvalidArgumentError
from .occurrence import Location, Occurrence, Status
from .timezone_utils import ZoneLike


class Weekday(IntEnum):
    """Day of week, numbered like date.weekday()."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def code(self) -> str:
        return WEEKDAY_CODES[self.value]


# Single-letter codes as used in "repeats MWF"; R is Thursday, U is Sunday
WEEKDAY_CODES = "MTWRFSU"

_DAY_NAMES = {
    "monday": Weekday.MONDAY, "mon": Weekday.MONDAY,
    "tuesday": Weekday.TUESDAY, "tue": Weekday.TUESDAY, "tues": Weekday.TUESDAY,
    "wednesday": Weekday.WEDNESDAY, "wed": Weekday.WEDNESDAY,
    "thursday": Weekday.THURSDAY, "thu": Weekday.THURSDAY, "thurs": Weekday.THURSDAY,
    "friday": Weekday.FRIDAY, "fri": Weekday.FRIDAY,
    "saturday": Weekday.SATURDAY, "sat": Weekday.SATURDAY,
    "sunday": Weekday.SUNDAY, "sun": Weekday.SUNDAY,
}


def parse_weekdays(pattern) -> frozenset[Weekday]:
    """
    Parse a weekday pattern.

    Accepts a string of single-letter codes ("MWF", "TR"), a comma or space
    separated list of day names ("Mon, Wed"), or an iterable of Weekday /
    int values.

    Raises:
        InvalidArgumentError: If the pattern is empty or contains unknown days.
    """
    if isinstance(pattern, str):
        text = pattern.strip()
        tokens = [t for t in text.replace(",", " ").split() if t]
        days: set[Weekday] = set()
        if len(tokens) == 1 and all(c in WEEKDAY_CODES for c in tokens[0]):
            days = {Weekday(WEEKDAY_CODES.index(c)) for c in tokens[0]}
        else:
            for token in tokens:
                day = _DAY_NAMES.get(token.lower())
                if day is None:
                    raise InvalidArgumentError(f"Unknown weekday: {token!r}")
                days.add(day)
    else:
        try:
            days = {Weekday(int(d)) for d in pattern}
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"Invalid weekday pattern: {pattern!r}") from None
    if not days:
        raise InvalidArgumentError("A series needs at least one weekday")
    return frozenset(days)


def weekday_rule(
    dtstart: datetime,
    weekdays: Iterable[int],
    count: Optional[int] = None,
    until: Optional[datetime] = None
) -> rrule:
    """
    Build a weekly rule firing on every occurring weekday from dtstart on.

    The first instance is dtstart itself when its weekday matches, otherwise
    the first matching day after it, at dtstart's time of day.
    """
    wanted = sorted({int(d) for d in weekdays})
    if not wanted:
        raise InvalidArgumentError("A series needs at least one weekday")
    return rrule(WEEKLY, dtstart=dtstart, byweekday=wanted, count=count, until=until)


class Series:
    """
    An ordered group of occurrences following a weekday pattern.

    Series-level subject, description, location and status delegate to
    the first member.
    """

    def __init__(self, members: Iterable[Occurrence], weekdays: Iterable[int]):
        """
        Assemble a series from explicit members.

        The weekday pattern is not checked against the members; callers that
        need the invariants verified use is_coherent().

        Raises:
            InvalidArgumentError: If there are no members or no weekdays.
        """
        self._members: list[Occurrence] = sorted(members, key=lambda o: o.start)
        if not self._members:
            raise InvalidArgumentError("A series must contain at least one occurrence")
        self._weekdays: frozenset[Weekday] = parse_weekdays(weekdays)

    @classmethod
    def repeating(
        cls,
        seed: Occurrence,
        weekdays,
        count: Optional[int] = None,
        until: Optional[date] = None
    ) -> 'Series':
        """
        Generate a series from a seed occurrence.

        If the seed's weekday is not in the pattern, generation starts on the
        first matching day after it. Each generated member keeps the seed's
        times of day and metadata.

        Args:
            seed: Occurrence giving subject, times of day and metadata
            weekdays: Occurring weekdays (see parse_weekdays)
            count: Number of occurrences to generate
            until: Last date (inclusive) an occurrence may start on

        Returns:
            The generated Series

        Raises:
            InvalidArgumentError: For a multi-day seed, a bad count, an end
                date before the seed, or a pattern yielding no occurrence.
        """
        pattern = parse_weekdays(weekdays)
        if not seed.is_single_day:
            raise InvalidArgumentError("Event must start and end on the same day.")
        if (count is None) == (until is None):
            raise InvalidArgumentError("Give either an occurrence count or an end date")
        if count is not None and count < 1:
            raise InvalidArgumentError("Number of occurrences must be at least 1.")
        if until is not None and until < seed.end.date():
            raise InvalidArgumentError("Event series cannot end before the current event ends.")

        rule = weekday_rule(
            seed.start, pattern,
            count=count,
            until=datetime.combine(until, time.max) if until is not None else None
        )
        members = [seed.with_start_and_end(start, start + seed.duration) for start in rule]

        if not members:
            raise InvalidArgumentError("The weekday pattern yields no occurrence before the end date")
        return cls(members, pattern)

    # ==================== Accessors ====================

    @property
    def members(self) -> list[Occurrence]:
        """Chronological member list (a copy)."""
        return list(self._members)

    @property
    def weekdays(self) -> frozenset[Weekday]:
        return self._weekdays

    @property
    def start(self) -> datetime:
        return self._members[0].start

    @property
    def end(self) -> datetime:
        return self._members[-1].end

    @property
    def end_date(self) -> date:
        """Date of the final occurrence's end."""
        return self._members[-1].end.date()

    @property
    def subject(self) -> str:
        return self._members[0].subject

    @property
    def description(self) -> Optional[str]:
        return self._members[0].description

    @property
    def location(self) -> Location:
        return self._members[0].location

    @property
    def status(self) -> Status:
        return self._members[0].status

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Occurrence]:
        return iter(list(self._members))

    def __contains__(self, occurrence: object) -> bool:
        return occurrence in self._members

    def __repr__(self) -> str:
        codes = "".join(d.code for d in sorted(self._weekdays))
        return f"Series(subject={self.subject!r}, start={self.start}, members={len(self)}, weekdays={codes!r})"

    def __str__(self) -> str:
        return "\n".join(str(m) for m in self._members)

    # ==================== Queries ====================

    def occurrences_in_range(self, start: datetime, end: datetime) -> list[Occurrence]:
        return [m for m in self._members if m.within(start, end)]

    def contains_instant(self, instant: datetime) -> bool:
        return any(m.contains_instant(instant) for m in self._members)

    def index_of(self, occurrence: Occurrence) -> int:
        """
        Get the position of a member.

        Raises:
            InvalidArgumentError: If occurrence is not a member.
        """
        try:
            return self._members.index(occurrence)
        except ValueError:
            raise InvalidArgumentError(f"{occurrence.subject!r} is not part of this series") from None

    def is_coherent(self) -> bool:
        """
        Check the series invariants.

        Every member is single-day, starts on an occurring weekday, and
        members have strictly increasing start dates.
        """
        previous: Optional[date] = None
        for member in self._members:
            if not member.is_single_day:
                return False
            if member.start.weekday() not in self._weekdays:
                return False
            if previous is not None and member.start.date() <= previous:
                return False
            previous = member.start.date()
        return True

    # ==================== Rebuilding ====================

    def with_members(self, members: Iterable[Occurrence]) -> 'Series':
        """Build a series with the same weekday pattern and new members."""
        return Series(members, self._weekdays)

    def replace_member(self, old: Occurrence, new: Occurrence) -> 'Series':
        """Rebuild the series with one member swapped in place."""
        members = list(self._members)
        members[self.index_of(old)] = new
        return Series(members, self._weekdays)

    def without_member(self, occurrence: Occurrence) -> Optional['Series']:
        """Rebuild the series without one member, or None if it was the last."""
        position = self.index_of(occurrence)
        remaining = self._members[:position] + self._members[position + 1:]
        return Series(remaining, self._weekdays) if remaining else None

    def convert_zone(self, from_zone: ZoneLike, to_zone: ZoneLike) -> 'Series':
        """
        Convert every member to another zone, preserving instants.

        When all members move by the same number of calendar days, the weekday
        pattern is rotated by that shift so the series stays coherent.
        Otherwise the pattern is kept as is; check is_coherent() on the result.
        """
        converted = [m.convert_zone(from_zone, to_zone) for m in self._members]
        shifts = {
            (new.start.date() - old.start.date()).days
            for old, new in zip(self._members, converted)
        }
        weekdays = self._weekdays
        if len(shifts) == 1:
            shift = shifts.pop()
            weekdays = frozenset(Weekday((d + shift) % 7) for d in self._weekdays)
        return Series(converted, weekdays)
