"""Shared fixtures for the multical test suite."""

from datetime import datetime

import pytest

from multical.calendar_store import CalendarStore
from multical.edit_engine import EditEngine
from multical.occurrence import Occurrence
from multical.registry import CalendarRegistry
from multical.series import Series
from multical.service import CalendarService
from multical.timed_calendar import TimedCalendar


@pytest.fixture
def store() -> CalendarStore:
    """An empty event store."""
    return CalendarStore()


@pytest.fixture
def editor(store: CalendarStore) -> EditEngine:
    return EditEngine(store)


@pytest.fixture
def yoga_seed() -> Occurrence:
    """Sunday 2023-10-01, 10:00 to 11:00."""
    return Occurrence("Yoga", datetime(2023, 10, 1, 10, 0), datetime(2023, 10, 1, 11, 0))


@pytest.fixture
def sunday_yoga(yoga_seed: Occurrence) -> Series:
    """Five weekly Sunday sessions, 2023-10-01 through 2023-10-29."""
    return Series.repeating(yoga_seed, "U", count=5)


@pytest.fixture
def work_calendar() -> TimedCalendar:
    return TimedCalendar("Work", "America/New_York")


@pytest.fixture
def registry() -> CalendarRegistry:
    """Two calendars in different zones, Work being current."""
    registry = CalendarRegistry()
    registry.create_calendar("Work", "America/New_York")
    registry.create_calendar("Travel", "Europe/London")
    registry.set_current("Work")
    return registry


@pytest.fixture
def service(registry: CalendarRegistry) -> CalendarService:
    return CalendarService(registry)
