"""
Thread-safe facade over the calendar core.

CalendarService is what adapters (a command line, a GUI, a web handler)
talk to. Date and date-time arguments may be given as ISO-8601 local
strings ("2025-06-05", "2025-06-05T10:00") or as date/datetime objects.
Calls that take an optional calendar name act on the current calendar when
it is omitted.
"""

import logging
import threading
from datetime import date, datetime
from typing import Any, Optional, Union

from .calendar_store import Event
from .config import Config, ScheduleConfig
from .edit_engine import EditScope
from .errors import InvalidArgumentError
from .occurrence import Location, Occurrence, Status
from .registry import CalendarRegistry
from .series import Series
from .timed_calendar import TimedCalendar
from .timezone_utils import (
    DAY_END, DAY_START, parse_iso_date, parse_iso_date_or_datetime, parse_iso_datetime,
)


logger = logging.getLogger(__name__)

DateTimeLike = Union[str, datetime]
DateLike = Union[str, date]

STATUS_BUSY = "busy"
STATUS_AVAILABLE = "available"


class CalendarService:
    """
    Serialises every call on one re-entrant lock.

    Mutations inside the core are remove, validate, then commit; holding the
    lock for the whole call keeps concurrent readers from seeing the
    intermediate state.
    """

    def __init__(self, registry: Optional[CalendarRegistry] = None,
                 schedule: Optional[ScheduleConfig] = None):
        self.registry = registry if registry is not None else CalendarRegistry()
        self.schedule = schedule if schedule is not None else ScheduleConfig()
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Config) -> 'CalendarService':
        """Build a service with the calendars and schedule of a configuration."""
        return cls(CalendarRegistry.from_config(config), config.schedule)

    def _calendar(self, name: Optional[str]) -> TimedCalendar:
        if name is None:
            return self.registry.current_calendar()
        return self.registry.get(name)

    # ==================== Calendars ====================

    def create_calendar(self, name: str, zone: str) -> None:
        with self._lock:
            self.registry.create_calendar(name, zone)

    def rename_calendar(self, old_name: str, new_name: str) -> None:
        with self._lock:
            self.registry.rename_calendar(old_name, new_name)

    def set_zone(self, name: str, zone: str) -> None:
        with self._lock:
            self.registry.set_zone(name, zone)

    def set_current(self, name: str) -> None:
        with self._lock:
            self.registry.set_current(name)

    def current_calendar_name(self) -> Optional[str]:
        with self._lock:
            return self.registry.current_calendar_name()

    def current_calendar(self) -> TimedCalendar:
        with self._lock:
            return self.registry.current_calendar()

    def calendar_names(self) -> list[str]:
        with self._lock:
            return self.registry.names()

    # ==================== Events ====================

    def add_event(self, calendar: Optional[str], event: Event) -> None:
        """
        Add a prebuilt Occurrence or Series to a calendar.

        Raises:
            NotFoundError: If the calendar does not exist.
            ConflictError: If any occurrence already exists.
        """
        with self._lock:
            self._calendar(calendar).add_event(event)

    def create_event(
        self,
        subject: str,
        start: DateLike,
        end: Optional[DateTimeLike] = None,
        calendar: Optional[str] = None,
        repeats: Optional[str] = None,
        count: Optional[int] = None,
        until: Optional[DateLike] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        status: Optional[str] = None
    ) -> Event:
        """
        Build an event from boundary values and add it to a calendar.

        A date-only start creates an all-day event spanning the configured
        all-day hours; otherwise end is required. With repeats (weekday codes
        such as "MWF") a series is generated, bounded by count or until.

        Args:
            subject: Event subject
            start: Start date-time, or a date for an all-day event
            end: End date-time; must be omitted for all-day events
            calendar: Target calendar name, current calendar if None
            repeats: Weekday pattern of a series
            count: Number of occurrences of a series
            until: Last date of a series
            description: Optional description
            location: "online" or "physical"
            status: "public" or "private"

        Returns:
            The Occurrence or Series that was added

        Raises:
            InvalidArgumentError: For malformed values or a conflict.
            NotFoundError: If the calendar does not exist.
        """
        metadata = {
            "description": description,
            "location": Location.parse(location) if location else Location.UNSET,
            "status": Status.parse(status) if status else Status.UNSET,
        }

        parsed_start = parse_iso_date_or_datetime(start)
        if isinstance(parsed_start, datetime):
            if end is None:
                raise InvalidArgumentError(f"Event {subject!r} needs an end date-time")
            seed = Occurrence(subject, parsed_start, parse_iso_datetime(end), **metadata)
        else:
            if end is not None:
                raise InvalidArgumentError("An all-day event takes a date only, without an end")
            seed = Occurrence.all_day(
                subject, parsed_start,
                self.schedule.all_day_start, self.schedule.all_day_end,
                **metadata
            )

        event: Event = seed
        if repeats is not None:
            event = Series.repeating(
                seed, repeats,
                count=count,
                until=parse_iso_date(until) if until is not None else None
            )
        elif count is not None or until is not None:
            raise InvalidArgumentError("count and until only apply to repeating events")

        with self._lock:
            self._calendar(calendar).add_event(event)
        logger.debug("Created %s in %r", type(event).__name__, calendar or self.current_calendar_name())
        return event

    def edit_event(self, prop: str, subject: str, start: DateTimeLike, end: DateTimeLike,
                   new_value: Any, calendar: Optional[str] = None) -> None:
        """Edit exactly one occurrence (the 'event' scope)."""
        start, end = parse_iso_datetime(start), parse_iso_datetime(end)
        with self._lock:
            self._calendar(calendar).edit_event(prop, subject, start, end, new_value)

    def edit_events(self, prop: str, subject: str, start: DateTimeLike,
                    scope: Union[str, EditScope], new_value: Any,
                    calendar: Optional[str] = None) -> None:
        """Edit with the 'series' or 'events' scope."""
        start = parse_iso_datetime(start)
        with self._lock:
            self._calendar(calendar).edit_events(prop, subject, start, scope, new_value)

    # ==================== Queries ====================

    def query(self, start: DateTimeLike, end: DateTimeLike,
              calendar: Optional[str] = None) -> list[Occurrence]:
        start, end = parse_iso_datetime(start), parse_iso_datetime(end)
        with self._lock:
            return self._calendar(calendar).query(start, end)

    def events_on(self, day: DateLike, calendar: Optional[str] = None) -> list[Occurrence]:
        day = parse_iso_date(day)
        with self._lock:
            return self._calendar(calendar).events_on(day)

    def find_occurrence(self, subject: str, start: DateTimeLike, end: DateTimeLike,
                        calendar: Optional[str] = None) -> Occurrence:
        start, end = parse_iso_datetime(start), parse_iso_datetime(end)
        with self._lock:
            return self._calendar(calendar).find_occurrence(subject, start, end)

    def occurrences_with_start(self, subject: str, start: DateTimeLike,
                               calendar: Optional[str] = None) -> list[Occurrence]:
        start = parse_iso_datetime(start)
        with self._lock:
            return self._calendar(calendar).occurrences_with_start(subject, start)

    def series_containing(self, occurrence: Occurrence,
                          calendar: Optional[str] = None) -> Optional[Series]:
        with self._lock:
            return self._calendar(calendar).series_containing(occurrence)

    def contains_instant(self, instant: DateTimeLike, calendar: Optional[str] = None) -> bool:
        instant = parse_iso_datetime(instant)
        with self._lock:
            return self._calendar(calendar).contains_instant(instant)

    def status_at(self, instant: DateTimeLike, calendar: Optional[str] = None) -> str:
        """Get "busy" if an event is in progress at instant, else "available"."""
        return STATUS_BUSY if self.contains_instant(instant, calendar) else STATUS_AVAILABLE

    # ==================== Copying ====================

    def copy_one(self, subject: str, source_start: DateTimeLike, target: str,
                 new_start: DateTimeLike) -> Occurrence:
        source_start, new_start = parse_iso_datetime(source_start), parse_iso_datetime(new_start)
        with self._lock:
            return self.registry.copy_one(subject, source_start, target, new_start)

    def copy_range(self, start: DateTimeLike, end: DateTimeLike, target: str,
                   new_start_date: DateLike) -> list[Event]:
        start, end = parse_iso_datetime(start), parse_iso_datetime(end)
        new_start_date = parse_iso_date(new_start_date)
        with self._lock:
            return self.registry.copy_range(start, end, target, new_start_date)

    def copy_day(self, day: DateLike, target: str, new_date: DateLike) -> list[Event]:
        """Copy every event of one day of the current calendar."""
        return self.copy_between(day, day, target, new_date)

    def copy_between(self, first_day: DateLike, last_day: DateLike, target: str,
                     new_date: DateLike) -> list[Event]:
        """Copy every event lying between two days (inclusive) of the current calendar."""
        first_day, last_day = parse_iso_date(first_day), parse_iso_date(last_day)
        start = datetime.combine(first_day, DAY_START)
        end = datetime.combine(last_day, DAY_END)
        return self.copy_range(start, end, target, new_date)
