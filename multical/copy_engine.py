"""
Copying events between timed calendars.

A range copy re-anchors dates on a new start date, converts wall-clock
times from the source zone to the target zone, and regroups the copies of
each source series into a new series when the copy keeps the series on its
original weekdays.
"""

import logging
from datetime import date, datetime, timedelta

from .calendar_store import Event
from .errors import NotFoundError
from .occurrence import Occurrence
from .series import Series
from .timed_calendar import TimedCalendar
from .timezone_utils import convert_wall_clock


logger = logging.getLogger(__name__)


def copy_occurrence(
    source: TimedCalendar,
    target: TimedCalendar,
    subject: str,
    source_start: datetime,
    new_start: datetime
) -> Occurrence:
    """
    Copy one occurrence to a new start in the target calendar.

    The copy keeps the original's duration and metadata and is inserted as
    a standalone occurrence. new_start is read in the target's zone.

    Returns:
        The inserted copy

    Raises:
        NotFoundError: If no occurrence of subject starts at source_start.
        ConflictError: If the copy conflicts with an existing event.
    """
    matches = source.occurrences_with_start(subject, source_start)
    if not matches:
        raise NotFoundError(
            f"Event {subject!r} starting {source_start.isoformat()} not found in calendar {source.name!r}"
        )
    original = matches[0]
    copy = original.with_start_and_end(new_start, new_start + original.duration)
    target.add_event(copy)
    logger.debug("Copied %r to %r at %s", subject, target.name, new_start.isoformat())
    return copy


def _relocate(occurrence: Occurrence, source: TimedCalendar, target: TimedCalendar,
              offset: timedelta) -> Occurrence:
    start = convert_wall_clock(occurrence.start, source.tz, target.tz) + offset
    return occurrence.with_start_and_end(start, start + occurrence.duration)


def plan_range_copy(
    source: TimedCalendar,
    target: TimedCalendar,
    start: datetime,
    end: datetime,
    new_start_date: date
) -> list[Event]:
    """
    Compute the events a range copy would insert, without inserting them.

    The date offset is the distance from the earliest matched occurrence's
    date to new_start_date. For each source series, the first copied member
    decides: if it still falls on its original weekday, all copied members
    form one new series with the original weekday pattern; otherwise they are
    all copied as standalone occurrences.
    """
    matched = source.query(start, end)
    if not matched:
        return []

    offset = timedelta(days=(new_start_date - matched[0].start.date()).days)
    standalone: list[Occurrence] = []
    keeps_pattern: dict[Series, bool] = {}
    regrouped: dict[Series, list[Occurrence]] = {}

    for occurrence in matched:
        copy = _relocate(occurrence, source, target, offset)
        series = source.series_containing(occurrence)
        if series is None:
            standalone.append(copy)
            continue
        if series not in keeps_pattern:
            keeps_pattern[series] = copy.start.weekday() == occurrence.start.weekday()
        if keeps_pattern[series]:
            regrouped.setdefault(series, []).append(copy)
        else:
            standalone.append(copy)

    planned: list[Event] = list(standalone)
    planned.extend(series.with_members(copies) for series, copies in regrouped.items())
    return planned


def copy_range(
    source: TimedCalendar,
    target: TimedCalendar,
    start: datetime,
    end: datetime,
    new_start_date: date
) -> list[Event]:
    """
    Copy every occurrence inside [start, end] to the target calendar.

    The copy is all or nothing: if any copied event conflicts with the
    target, nothing is inserted.

    Returns:
        The inserted events; empty when the range holds no occurrence

    Raises:
        InvalidArgumentError: If end is before start.
        ConflictError: If a copied event conflicts with the target calendar.
    """
    planned = plan_range_copy(source, target, start, end, new_start_date)
    if planned:
        target.store.add_all(planned)
        logger.debug("Copied %d event(s) from %r to %r starting %s",
                     len(planned), source.name, target.name, new_start_date.isoformat())
    return planned
