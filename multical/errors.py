"""
Exception hierarchy for the calendar core.

Every failure raised by the core derives from CalendarError so adapters can
catch one type. The concrete classes also derive from the matching builtin
(ValueError, LookupError) so callers that only know the builtins still work.
"""


class CalendarError(Exception):
    """Base class for all calendar core errors."""


class InvalidArgumentError(CalendarError, ValueError):
    """
    Malformed or out-of-domain input.

    Raised for bad zone ids, end-before-start, duplicate calendar names,
    unknown properties, bad enum literals and ambiguous lookups.
    """


class ConflictError(InvalidArgumentError):
    """An occurrence with the same (subject, start, end) already exists."""


class NotFoundError(CalendarError, LookupError):
    """A referenced calendar, occurrence or series does not exist."""
