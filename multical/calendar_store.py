"""
In-memory store of top-level calendar events.

A top-level Event is either a lone Occurrence or a Series. The store keeps
an index from occurrence identity (subject, start, end) to the owning Event,
so conflict checks and exact lookups are key lookups rather than scans.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, Optional, Union

from .errors import ConflictError, InvalidArgumentError, NotFoundError
from .occurrence import Occurrence
from .series import Series


logger = logging.getLogger(__name__)

Event = Union[Occurrence, Series]

OccurrenceKey = tuple[str, datetime, datetime]


def members_of(event: Event) -> list[Occurrence]:
    """Expand a top-level event into its occurrences."""
    if isinstance(event, Series):
        return event.members
    return [event]


def describe(event: Event) -> str:
    if isinstance(event, Series):
        return f"series {event.subject!r} ({len(event)} occurrences from {event.start.isoformat()})"
    return f"event {event.subject!r} at {event.start.isoformat()}"


class CalendarStore:
    """
    Conflict-free collection of top-level events.

    No two occurrences in the store, top-level or series members, share the
    same (subject, start, end).
    """

    def __init__(self, events: Optional[Iterable[Event]] = None):
        # Top-level events in insertion order
        self._events: list[Event] = []
        # Occurrence identity -> owning top-level event
        self._index: dict[OccurrenceKey, Event] = {}
        if events is not None:
            self.add_all(events)

    # ==================== Insertion ====================

    def can_add(self, event: Event) -> bool:
        """Check that no occurrence of event conflicts with the store."""
        return not self._conflicts(members_of(event))

    def add(self, event: Event) -> None:
        """
        Insert a lone occurrence or a series, all or nothing.

        Raises:
            ConflictError: If any occurrence of event already exists.
        """
        self.add_all([event])

    def add_all(self, events: Iterable[Event]) -> None:
        """
        Insert several events, all or nothing.

        Raises:
            ConflictError: If any occurrence conflicts with the store or with
                another occurrence of the batch. Nothing is inserted then.
        """
        events = list(events)
        self._check_insertable(events)
        for event in events:
            self._insert(event)
            logger.debug("Added %s", describe(event))

    def _conflicts(self, occurrences: Iterable[Occurrence]) -> list[Occurrence]:
        return [o for o in occurrences if o.key in self._index]

    def _check_insertable(self, events: list[Event]) -> None:
        seen: set[OccurrenceKey] = set()
        for event in events:
            for occurrence in members_of(event):
                if occurrence.key in self._index:
                    raise ConflictError(
                        f"Event cannot be added: {occurrence.subject!r} from "
                        f"{occurrence.start.isoformat()} to {occurrence.end.isoformat()} already exists"
                    )
                if occurrence.key in seen:
                    raise ConflictError(
                        f"Duplicate event {occurrence.subject!r} at {occurrence.start.isoformat()}"
                    )
                seen.add(occurrence.key)

    def _insert(self, event: Event) -> None:
        self._events.append(event)
        for occurrence in members_of(event):
            self._index[occurrence.key] = event

    # ==================== Removal and Replacement ====================

    def remove(self, event: Event) -> None:
        """
        Remove a top-level event.

        Raises:
            InvalidArgumentError: If event is not a top-level event of this store.
        """
        for position, existing in enumerate(self._events):
            if existing is event:
                del self._events[position]
                for occurrence in members_of(event):
                    self._index.pop(occurrence.key, None)
                logger.debug("Removed %s", describe(event))
                return
        raise InvalidArgumentError("Event does not exist in the calendar.")

    def replace(self, old: Event, new_events: Iterable[Event]) -> None:
        """
        Swap one top-level event for a set of replacements, atomically.

        The old event is removed first, so replacements may reuse its
        occurrences. If any replacement conflicts with the remaining store or
        with another replacement, the old event is restored.

        Raises:
            InvalidArgumentError: If old is absent or a replacement conflicts.
        """
        new_events = list(new_events)
        position = next((i for i, e in enumerate(self._events) if e is old), None)
        self.remove(old)
        try:
            self._check_insertable(new_events)
        except ConflictError as exc:
            self._events.insert(position, old)
            for occurrence in members_of(old):
                self._index[occurrence.key] = old
            raise InvalidArgumentError(
                f"New event cannot be added to the calendar, due to a time or name conflict: {exc}"
            ) from exc
        for event in new_events:
            self._insert(event)
        logger.debug("Replaced %s with %d event(s)", describe(old), len(new_events))

    # ==================== Queries ====================

    @property
    def events(self) -> list[Event]:
        """Top-level events (a copy)."""
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def occurrences(self) -> list[Occurrence]:
        """Every occurrence in the store, series members included."""
        return [o for event in self._events for o in members_of(event)]

    def query(
        self,
        start: datetime,
        end: datetime,
        secondary: Optional[Callable[[Occurrence], Any]] = None
    ) -> list[Occurrence]:
        """
        Get the occurrences lying fully inside [start, end].

        Args:
            start: Start of the query interval
            end: End of the query interval
            secondary: Optional sort key applied after start and subject

        Returns:
            Matching occurrences sorted by start, then subject

        Raises:
            InvalidArgumentError: If end is before start.
        """
        if start is None or end is None:
            raise InvalidArgumentError("Start and end dates cannot be empty.")
        if end < start:
            raise InvalidArgumentError("End date cannot be before the starting date.")

        found = [o for o in self.occurrences() if o.within(start, end)]
        if secondary is None:
            found.sort(key=lambda o: (o.start, o.subject))
        else:
            found.sort(key=lambda o: (o.start, o.subject, secondary(o)))
        return found

    def find_occurrence(self, subject: str, start: datetime, end: datetime) -> Occurrence:
        """
        Look up an occurrence by exact identity.

        Raises:
            NotFoundError: If no occurrence matches.
        """
        owner = self._index.get((subject, start, end))
        if owner is None:
            raise NotFoundError(
                f"Event {subject!r} from {start.isoformat()} to {end.isoformat()} does not exist in the calendar."
            )
        for occurrence in members_of(owner):
            if occurrence.key == (subject, start, end):
                return occurrence
        raise NotFoundError(f"Event {subject!r} does not exist in the calendar.")

    def occurrences_with_start(self, subject: str, start: datetime) -> list[Occurrence]:
        """Get all occurrences with this subject and start; empty if none."""
        return [o for o in self.occurrences() if o.matches(subject, start)]

    def series_containing(self, occurrence: Occurrence) -> Optional[Series]:
        """Get the series owning occurrence, or None for lone or unknown occurrences."""
        owner = self._index.get(occurrence.key)
        return owner if isinstance(owner, Series) else None

    def owner_of(self, occurrence: Occurrence) -> Event:
        """
        Get the top-level event holding occurrence.

        Raises:
            NotFoundError: If occurrence is not stored.
        """
        owner = self._index.get(occurrence.key)
        if owner is None:
            raise NotFoundError(f"Event {occurrence.subject!r} does not exist in the calendar.")
        return owner

    def contains_instant(self, instant: datetime) -> bool:
        """Check whether any occurrence is in progress at instant (boundaries excluded)."""
        return any(o.contains_instant(instant) for o in self.occurrences())
