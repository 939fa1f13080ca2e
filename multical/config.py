"""
Configuration parser for multical.

Handles TOML file parsing into the calendars to create at startup, the
default timezone and the hours used for all-day events.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path
from typing import Optional

from .occurrence import ALL_DAY_END, ALL_DAY_START


logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/New_York"


def parse_clock_time(value: str) -> time:
    """
    Parse an "HH:MM" or "HH:MM:SS" time of day.

    Raises:
        ValueError: If value is not a valid time of day.
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected a time string like '08:00', got {value!r}")
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid time of day: {value!r}") from None


@dataclass
class CalendarConfig:
    """Configuration for one calendar created at startup."""
    name: str
    timezone: str


@dataclass
class ScheduleConfig:
    """Time span given to events created from a date only."""
    all_day_start: time = ALL_DAY_START
    all_day_end: time = ALL_DAY_END

    def __post_init__(self):
        if self.all_day_end <= self.all_day_start:
            raise ValueError(
                f"all_day_end ({self.all_day_end}) must be after all_day_start ({self.all_day_start})"
            )


@dataclass
class Config:
    """Main configuration container for multical."""

    default_timezone: str = DEFAULT_TIMEZONE
    log_level: str = "INFO"
    current_calendar: Optional[str] = None
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    calendars: list[CalendarConfig] = field(default_factory=list)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'multical' / 'multical.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        logger.debug("Loaded %s, sections: %s", config_path, list(data.keys()))
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a configuration from already parsed TOML data."""
        # Parse General section
        general = data.get('General', {})
        default_timezone = general.get('default_timezone', DEFAULT_TIMEZONE)
        log_level = str(general.get('log_level', 'INFO')).upper()
        current_calendar = general.get('current_calendar') or None

        # Parse Schedule section
        schedule_data = data.get('Schedule', {})
        schedule = ScheduleConfig(
            all_day_start=parse_clock_time(schedule_data.get('all_day_start', '08:00')),
            all_day_end=parse_clock_time(schedule_data.get('all_day_end', '17:00')),
        )

        # Parse calendars
        # Supports both [Calendar.Name] and [Calendar] with nested sub-tables
        calendars = []
        for key, value in data.items():
            if not isinstance(value, dict):
                continue

            # Format 1: a literal "Calendar.Name" key
            if key.startswith('Calendar.'):
                calendar_name = key.split('.', 1)[1]
                logger.debug("Found calendar (dot format): %s", calendar_name)
                calendars.append(CalendarConfig(
                    name=calendar_name,
                    timezone=value.get('timezone', default_timezone)
                ))

            # Format 2: [Calendar] with nested [Calendar.Name] sub-tables
            elif key == 'Calendar':
                for sub_key, sub_value in value.items():
                    if isinstance(sub_value, dict):
                        logger.debug("Found calendar (nested format): %s", sub_key)
                        calendars.append(CalendarConfig(
                            name=sub_key,
                            timezone=sub_value.get('timezone', default_timezone)
                        ))

        logger.debug("Total calendars found: %d", len(calendars))

        return cls(
            default_timezone=default_timezone,
            log_level=log_level,
            current_calendar=current_calendar,
            schedule=schedule,
            calendars=calendars
        )
