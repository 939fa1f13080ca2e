"""
Named calendars, the current-calendar pointer, and copying between them.
"""

import logging
from datetime import date, datetime
from typing import Iterator, Optional

from . import copy_engine
from .calendar_store import Event
from .config import Config
from .errors import InvalidArgumentError, NotFoundError
from .occurrence import Occurrence
from .timed_calendar import TimedCalendar


logger = logging.getLogger(__name__)


class CalendarRegistry:
    """
    Owns every TimedCalendar by unique name.

    At most one calendar is current; copies always read from it.
    """

    def __init__(self):
        self._calendars: dict[str, TimedCalendar] = {}
        self._current: Optional[str] = None

    @classmethod
    def from_config(cls, config: Config) -> 'CalendarRegistry':
        """
        Create the calendars declared in configuration.

        The configured current calendar is selected; without one, the first
        declared calendar becomes current.

        Raises:
            InvalidArgumentError: For duplicate names, bad zones or an unknown
                current calendar.
        """
        registry = cls()
        for calendar in config.calendars:
            registry.create_calendar(calendar.name, calendar.timezone)
        if config.current_calendar:
            registry.set_current(config.current_calendar)
        elif config.calendars:
            registry.set_current(config.calendars[0].name)
        return registry

    # ==================== Lookup ====================

    def __contains__(self, name: object) -> bool:
        return name in self._calendars

    def __len__(self) -> int:
        return len(self._calendars)

    def __iter__(self) -> Iterator[TimedCalendar]:
        return iter(list(self._calendars.values()))

    def names(self) -> list[str]:
        """Calendar names in creation order."""
        return list(self._calendars)

    def get(self, name: str) -> TimedCalendar:
        """
        Raises:
            NotFoundError: If no calendar has this name.
        """
        try:
            return self._calendars[name]
        except KeyError:
            raise NotFoundError(f"Calendar {name!r} does not exist.") from None

    def _require(self, name: str, message: str) -> TimedCalendar:
        calendar = self._calendars.get(name)
        if calendar is None:
            raise InvalidArgumentError(message)
        return calendar

    # ==================== Calendar Management ====================

    def create_calendar(self, name: str, zone: str) -> TimedCalendar:
        """
        Raises:
            InvalidArgumentError: If the name is taken or zone is invalid.
        """
        if name in self._calendars:
            raise InvalidArgumentError(f"Calendar with this name already exists: {name!r}")
        calendar = TimedCalendar(name, zone)
        self._calendars[name] = calendar
        logger.debug("Created calendar %r in %s", name, calendar.zone_id)
        return calendar

    def rename_calendar(self, old_name: str, new_name: str) -> None:
        """
        Rename a calendar, keeping it current if it was.

        Raises:
            InvalidArgumentError: If old_name is absent or new_name is taken.
        """
        calendar = self._require(old_name, f"Could not find calendar to rename: {old_name!r}")
        if new_name in self._calendars:
            raise InvalidArgumentError(f"Calendar with this name already exists: {new_name!r}")

        # Rebuild the dict to keep creation order
        self._calendars = {
            (new_name if name == old_name else name): cal
            for name, cal in self._calendars.items()
        }
        calendar.name = new_name
        if self._current == old_name:
            self._current = new_name
        logger.debug("Renamed calendar %r to %r", old_name, new_name)

    def set_zone(self, name: str, zone: str) -> TimedCalendar:
        """
        Replace a calendar by its conversion to another zone.

        Raises:
            InvalidArgumentError: If the calendar is absent or zone is invalid.
        """
        calendar = self._require(name, f"The calendar to be edited does not exist: {name!r}")
        converted = calendar.convert(zone)
        self._calendars[name] = converted
        return converted

    def set_current(self, name: str) -> None:
        """
        Raises:
            InvalidArgumentError: If no calendar has this name.
        """
        self._require(name, f"The calendar to be set in use does not exist: {name!r}")
        self._current = name
        logger.debug("Current calendar is now %r", name)

    def current_calendar_name(self) -> Optional[str]:
        return self._current

    def current_calendar(self) -> TimedCalendar:
        """
        Raises:
            NotFoundError: If no calendar is current.
        """
        if self._current is None:
            raise NotFoundError("No calendar is in use.")
        return self._calendars[self._current]

    # ==================== Copying ====================

    def copy_one(self, subject: str, source_start: datetime, target_name: str,
                 new_start: datetime) -> Occurrence:
        """
        Copy one occurrence of the current calendar to another calendar.

        Raises:
            InvalidArgumentError: If the target is absent or the copy conflicts.
            NotFoundError: If there is no current calendar or no such occurrence.
        """
        target = self._require(target_name, f"Could not find target calendar to copy event to: {target_name!r}")
        return copy_engine.copy_occurrence(self.current_calendar(), target, subject, source_start, new_start)

    def copy_range(self, start: datetime, end: datetime, target_name: str,
                   new_start_date: date) -> list[Event]:
        """
        Copy every occurrence of the current calendar inside [start, end].

        Raises:
            InvalidArgumentError: If the target is absent, end is before start,
                or any copy conflicts. Nothing is inserted then.
            NotFoundError: If there is no current calendar.
        """
        target = self._require(target_name, f"Could not find target calendar to copy event to: {target_name!r}")
        return copy_engine.copy_range(self.current_calendar(), target, start, end, new_start_date)
