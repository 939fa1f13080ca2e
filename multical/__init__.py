"""
multical core module

This module provides the calendar model and its operations:
- Exception hierarchy (errors.py)
- Zone resolution and ISO-8601 parsing (timezone_utils.py)
- Occurrence value type (occurrence.py)
- Weekday series (series.py)
- Conflict-free event store (calendar_store.py)
- Scoped editing (edit_engine.py)
- Zone-bound calendars (timed_calendar.py)
- Copying between calendars (copy_engine.py)
- Named calendars and the current calendar (registry.py)
- Thread-safe facade taking ISO strings (service.py)
- Configuration parsing (config.py)
"""

from .errors import CalendarError, InvalidArgumentError, ConflictError, NotFoundError
from .occurrence import Occurrence, Location, Status
from .series import Series, Weekday, parse_weekdays
from .calendar_store import CalendarStore, Event
from .edit_engine import EditEngine, EditScope
from .timed_calendar import TimedCalendar
from .registry import CalendarRegistry
from .service import CalendarService
from .config import Config
from .logging_config import configure_logging

__version__ = "0.1.0"

__all__ = [
    'CalendarError',
    'InvalidArgumentError',
    'ConflictError',
    'NotFoundError',
    'Occurrence',
    'Location',
    'Status',
    'Series',
    'Weekday',
    'parse_weekdays',
    'CalendarStore',
    'Event',
    'EditEngine',
    'EditScope',
    'TimedCalendar',
    'CalendarRegistry',
    'CalendarService',
    'Config',
    'configure_logging',
]
