"""
A calendar store bound to an IANA timezone.
"""

import logging
from datetime import date, datetime
from typing import Any, Optional, Union

from .calendar_store import CalendarStore, Event, members_of
from .edit_engine import EditEngine, EditScope
from .errors import ConflictError, InvalidArgumentError
from .occurrence import Occurrence
from .series import Series
from .timezone_utils import day_bounds, resolve_zone, zone_name


logger = logging.getLogger(__name__)


class TimedCalendar:
    """
    A named calendar whose wall-clock times are read in one timezone.

    The zone is fixed for the lifetime of the object; convert() produces a
    new TimedCalendar in another zone.
    """

    def __init__(self, name: str, zone: str, store: Optional[CalendarStore] = None):
        """
        Args:
            name: Calendar name
            zone: IANA zone id

        Raises:
            InvalidArgumentError: If zone is not a valid IANA zone.
        """
        self.name = name
        self._tz = resolve_zone(zone)
        self._zone_id = zone_name(self._tz)
        self.store = store if store is not None else CalendarStore()
        self.editor = EditEngine(self.store)

    @property
    def zone_id(self) -> str:
        return self._zone_id

    @property
    def tz(self):
        """The pytz timezone object."""
        return self._tz

    def __repr__(self) -> str:
        return f"TimedCalendar(name={self.name!r}, zone={self._zone_id!r}, events={len(self.store)})"

    # ==================== Store Delegation ====================

    def add_event(self, event: Event) -> None:
        self.store.add(event)

    def query(self, start: datetime, end: datetime, secondary=None) -> list[Occurrence]:
        return self.store.query(start, end, secondary)

    def events_on(self, day: date) -> list[Occurrence]:
        """Get the occurrences lying within one calendar day."""
        first, last = day_bounds(day)
        return self.store.query(first, last)

    def find_occurrence(self, subject: str, start: datetime, end: datetime) -> Occurrence:
        return self.store.find_occurrence(subject, start, end)

    def occurrences_with_start(self, subject: str, start: datetime) -> list[Occurrence]:
        return self.store.occurrences_with_start(subject, start)

    def series_containing(self, occurrence: Occurrence) -> Optional[Series]:
        return self.store.series_containing(occurrence)

    def contains_instant(self, instant: datetime) -> bool:
        return self.store.contains_instant(instant)

    def edit_event(self, prop: str, subject: str, start: datetime, end: datetime, new_value: Any) -> None:
        self.editor.edit_event(prop, subject, start, end, new_value)

    def edit_events(
        self,
        prop: str,
        subject: str,
        start: datetime,
        scope: Union[str, EditScope],
        new_value: Any
    ) -> None:
        self.editor.edit_events(prop, subject, start, scope, new_value)

    # ==================== Zone Conversion ====================

    def convert(self, new_zone: str) -> 'TimedCalendar':
        """
        Build a copy of this calendar in another zone.

        Every occurrence keeps its instant and gets the wall-clock reading of
        new_zone. A series whose converted members no longer satisfy its
        weekday pattern (e.g. a member now crosses midnight) is broken up into
        standalone occurrences.

        Raises:
            InvalidArgumentError: If new_zone is not a valid IANA zone, or if
                two distinct events would get identical wall-clock times (a
                fall-back transition repeats an hour of new_zone).
        """
        target = resolve_zone(new_zone)
        converted: list[Event] = []
        for event in self.store:
            if isinstance(event, Series):
                series = event.convert_zone(self._tz, target)
                if series.is_coherent():
                    converted.append(series)
                else:
                    logger.debug("Series %r no longer fits its weekday pattern in %s, splitting",
                                 series.subject, new_zone)
                    converted.extend(members_of(series))
            else:
                converted.append(event.convert_zone(self._tz, target))

        try:
            store = CalendarStore(converted)
        except ConflictError as exc:
            raise InvalidArgumentError(
                f"Calendar {self.name!r} cannot be converted to {zone_name(target)}: "
                f"two events would share the same wall-clock time ({exc})"
            ) from exc

        logger.debug("Converted calendar %r from %s to %s", self.name, self._zone_id, zone_name(target))
        return TimedCalendar(self.name, zone_name(target), store)
