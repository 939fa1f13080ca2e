"""
Scoped editing of calendar events.

Three scopes are supported:

- event: one occurrence. Inside a series it stays merged when the edit keeps
  it on its own day, otherwise it is detached as a standalone occurrence.
- series: every member of the occurrence's series, uniformly.
- events: the occurrence and every later member of its series. Start edits
  split the series in two.

Every edit computes the replacement events first and hands them to
CalendarStore.replace, which commits them only if none conflicts.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Union

from .calendar_store import CalendarStore, Event
from .errors import InvalidArgumentError
from .occurrence import Location, Occurrence, Status
from .series import Series, weekday_rule
from .timezone_utils import parse_iso_datetime


logger = logging.getLogger(__name__)

EDITABLE_PROPERTIES = ("subject", "start", "end", "description", "location", "status")

# Properties that never move an occurrence in time
_METADATA_PROPERTIES = ("subject", "description", "location", "status")


class EditScope(str, Enum):
    EVENT = "event"
    SERIES = "series"
    EVENTS = "events"

    @classmethod
    def parse(cls, value: Union[str, 'EditScope']) -> 'EditScope':
        try:
            return cls(str(value.value if isinstance(value, EditScope) else value).strip().lower())
        except ValueError:
            raise InvalidArgumentError(f"Invalid edit scope: {value!r}") from None


def coerce_value(prop: str, value: Any) -> Any:
    """
    Validate a property name and convert its new value.

    Args:
        prop: One of EDITABLE_PROPERTIES
        value: New value; start/end accept ISO-8601 strings or datetimes,
            location/status accept their literals case-insensitively

    Returns:
        The value in the type the occurrence stores

    Raises:
        InvalidArgumentError: For unknown properties or malformed values.
    """
    if prop in ("start", "end"):
        return parse_iso_datetime(value)
    if prop == "location":
        return value if isinstance(value, Location) and value is not Location.UNSET else Location.parse(value)
    if prop == "status":
        return value if isinstance(value, Status) and value is not Status.UNSET else Status.parse(value)
    if prop in ("subject", "description"):
        return value
    raise InvalidArgumentError(f"Invalid input: unsupported property {prop!r}")


def apply_property(occurrence: Occurrence, prop: str, value: Any) -> Occurrence:
    """Apply an already coerced property value to one occurrence."""
    if prop == "subject":
        return occurrence.with_subject(value)
    if prop == "start":
        return occurrence.with_start(value)
    if prop == "end":
        return occurrence.with_end(value)
    if prop == "description":
        return occurrence.with_description(value)
    if prop == "location":
        return occurrence.with_location(value)
    if prop == "status":
        return occurrence.with_status(value)
    raise InvalidArgumentError(f"Invalid input: unsupported property {prop!r}")


def _at_time_of(day_source: datetime, time_source: datetime) -> datetime:
    return datetime.combine(day_source.date(), time_source.time())


class EditEngine:
    """Applies scoped edits to the events of one CalendarStore."""

    def __init__(self, store: CalendarStore):
        self.store = store

    # ==================== Single Occurrence ====================

    def edit_event(
        self,
        prop: str,
        subject: str,
        start: datetime,
        end: datetime,
        new_value: Any
    ) -> None:
        """
        Edit exactly one occurrence, identified by (subject, start, end).

        Raises:
            NotFoundError: If the occurrence does not exist.
            InvalidArgumentError: For bad properties or values, or if the result
                conflicts with another event.
        """
        occurrence = self.store.find_occurrence(subject, start, end)
        value = coerce_value(prop, new_value)
        series = self.store.series_containing(occurrence)

        if series is None:
            self.store.replace(occurrence, [apply_property(occurrence, prop, value)])
        else:
            self.store.replace(series, self._edit_member(series, occurrence, prop, value))
        logger.debug("Edited %s of event %r at %s", prop, subject, start.isoformat())

    def _edit_member(self, series: Series, occurrence: Occurrence, prop: str, value: Any) -> list[Event]:
        updated = apply_property(occurrence, prop, value)
        if prop in _METADATA_PROPERTIES:
            return [series.replace_member(occurrence, updated)]

        # start or end: stays merged only while it keeps to its own day
        original_day = occurrence.start.date() if prop == "start" else occurrence.end.date()
        if value.date() == original_day and updated.is_single_day:
            return [series.replace_member(occurrence, updated)]

        rest = series.without_member(occurrence)
        logger.debug("Detaching %r at %s from its series", occurrence.subject, occurrence.start.isoformat())
        return [rest, updated] if rest is not None else [updated]

    # ==================== Series Scopes ====================

    def edit_events(
        self,
        prop: str,
        subject: str,
        start: datetime,
        scope: Union[str, EditScope],
        new_value: Any
    ) -> None:
        """
        Edit a whole series, or an occurrence and every later member.

        The occurrence is identified by subject and start only. A lone
        occurrence is edited as a series of one.

        Args:
            prop: Property to edit
            subject: Subject of the identifying occurrence
            start: Start of the identifying occurrence
            scope: "series" for every member, "events" for this and later members
            new_value: New property value

        Raises:
            InvalidArgumentError: If no or several occurrences match, for bad
                properties, values or scope, and on conflicts.
        """
        scope = EditScope.parse(scope)
        if scope is EditScope.EVENT:
            raise InvalidArgumentError("Use edit_event to edit a single occurrence")

        matches = self.store.occurrences_with_start(subject, start)
        if not matches:
            raise InvalidArgumentError(f"No matching events found for {subject!r} at {start.isoformat()}")
        if len(matches) > 1:
            raise InvalidArgumentError(
                f"Multiple events named {subject!r} start at {start.isoformat()}, cannot edit"
            )
        occurrence = matches[0]
        value = coerce_value(prop, new_value)
        series = self.store.series_containing(occurrence)

        if series is None:
            self.store.replace(occurrence, [apply_property(occurrence, prop, value)])
        elif scope is EditScope.SERIES:
            self.store.replace(series, [self._edit_whole_series(series, occurrence, prop, value)])
        else:
            self.store.replace(series, self._edit_from(series, occurrence, prop, value))
        logger.debug("Edited %s of %s scope from %r at %s", prop, scope.value, subject, start.isoformat())

    def _edit_whole_series(self, series: Series, occurrence: Occurrence, prop: str, value: Any) -> Series:
        if prop in _METADATA_PROPERTIES:
            return series.with_members(apply_property(m, prop, value) for m in series)

        if value.date() != occurrence.start.date():
            raise InvalidArgumentError(
                f"Cannot change {prop} to a different day for a whole series, use the 'events' scope instead!"
            )
        if prop == "start":
            return series.with_members(m.with_start(_at_time_of(m.start, value)) for m in series)
        return series.with_members(m.with_end(_at_time_of(m.end, value)) for m in series)

    def _edit_from(self, series: Series, occurrence: Occurrence, prop: str, value: Any) -> list[Event]:
        def affected(member: Occurrence) -> bool:
            return member.start >= occurrence.start

        if prop in _METADATA_PROPERTIES:
            return [series.with_members(
                apply_property(m, prop, value) if affected(m) else m for m in series
            )]

        if prop == "end":
            if value.date() != occurrence.start.date():
                raise InvalidArgumentError("End date must be on the same day as the event's start date!")
            return [series.with_members(
                m.with_end(_at_time_of(m.end, value)) if affected(m) else m for m in series
            )]

        if value.date() == occurrence.start.date():
            return self._shift_time_from(series, occurrence, value)
        return self._move_day_from(series, occurrence, value)

    def _shift_time_from(self, series: Series, occurrence: Occurrence, new_start: datetime) -> list[Event]:
        """Same-day start change: later members move by the same delta in a new series."""
        delta = new_start - occurrence.start
        earlier = [m for m in series if m.start < occurrence.start]
        later = [m.with_start(m.start + delta) for m in series if m.start >= occurrence.start]

        result: list[Event] = []
        if earlier:
            result.append(series.with_members(earlier))
        result.append(series.with_members(later))
        return result

    def _move_day_from(self, series: Series, occurrence: Occurrence, new_start: datetime) -> list[Event]:
        """
        Different-day start change.

        The target date is pushed forward to the next occurring weekday, then
        each later member is placed on the next occurring weekday after its
        predecessor. Re-dated members take the new time of day and keep the
        target occurrence's duration. Earlier members dated before the
        adjusted date stay as they are; earlier members on or after it are
        dropped.
        """
        duration = occurrence.duration
        later = [m for m in series if m.start > occurrence.start]
        starts = list(weekday_rule(new_start, series.weekdays, count=len(later) + 1))
        first_start = starts[0]

        moved = [occurrence.with_start_and_end(first_start, first_start + duration)]
        for member, member_start in zip(later, starts[1:]):
            moved.append(member.with_start_and_end(member_start, member_start + duration))

        earlier = [
            m for m in series
            if m.start < occurrence.start and m.start.date() < first_start.date()
        ]
        result: list[Event] = []
        if earlier:
            result.append(series.with_members(earlier))
        result.append(series.with_members(moved))
        return result
