"""Tests for calendar management and copying through the registry."""

from datetime import date, datetime

import pytest

from multical.config import CalendarConfig, Config
from multical.errors import InvalidArgumentError, NotFoundError
from multical.occurrence import Occurrence
from multical.registry import CalendarRegistry


class TestCalendarManagement:

    def test_create(self, registry):
        assert registry.names() == ["Work", "Travel"]
        assert "Travel" in registry
        assert registry.get("Travel").zone_id == "Europe/London"

    def test_duplicate_name(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.create_calendar("Work", "UTC")

    def test_invalid_zone(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.create_calendar("Moon", "Luna/Tranquility")
        assert "Moon" not in registry

    def test_get_missing(self, registry):
        with pytest.raises(NotFoundError):
            registry.get("Nope")

    def test_rename_keeps_current_pointer(self, registry):
        registry.rename_calendar("Work", "Office")
        assert registry.current_calendar_name() == "Office"
        assert registry.current_calendar().name == "Office"
        assert registry.names() == ["Office", "Travel"]

    def test_rename_errors(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.rename_calendar("Nope", "Other")
        with pytest.raises(InvalidArgumentError):
            registry.rename_calendar("Work", "Travel")

    def test_set_current(self, registry):
        registry.set_current("Travel")
        assert registry.current_calendar().name == "Travel"
        with pytest.raises(InvalidArgumentError):
            registry.set_current("Nope")

    def test_no_current_calendar(self):
        with pytest.raises(NotFoundError):
            CalendarRegistry().current_calendar()

    def test_set_zone_converts_events(self, registry):
        registry.get("Work").add_event(
            Occurrence("Call", datetime(2025, 1, 15, 10), datetime(2025, 1, 15, 11))
        )
        registry.set_zone("Work", "Europe/Berlin")
        work = registry.get("Work")
        assert work.zone_id == "Europe/Berlin"
        assert work.find_occurrence("Call", datetime(2025, 1, 15, 16), datetime(2025, 1, 15, 17))
        assert registry.current_calendar() is work

    def test_set_zone_errors(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.set_zone("Nope", "UTC")
        with pytest.raises(InvalidArgumentError):
            registry.set_zone("Work", "Bad/Zone")
        assert registry.get("Work").zone_id == "America/New_York"

    def test_set_zone_collision_keeps_calendar(self, registry):
        registry.create_calendar("Ops", "UTC")
        ops = registry.get("Ops")
        ops.add_event(Occurrence("Check", datetime(2025, 11, 2, 5, 30), datetime(2025, 11, 2, 5, 45)))
        ops.add_event(Occurrence("Check", datetime(2025, 11, 2, 6, 30), datetime(2025, 11, 2, 6, 45)))
        with pytest.raises(InvalidArgumentError):
            registry.set_zone("Ops", "America/New_York")
        assert registry.get("Ops") is ops
        assert ops.zone_id == "UTC"


class TestCopy:

    @pytest.fixture
    def review(self, registry) -> Occurrence:
        occ = Occurrence("Review", datetime(2025, 3, 3, 14), datetime(2025, 3, 3, 15))
        registry.get("Work").add_event(occ)
        return occ

    def test_copy_one(self, registry, review):
        registry.copy_one("Review", review.start, "Travel", datetime(2025, 3, 10, 9))
        assert registry.get("Travel").find_occurrence(
            "Review", datetime(2025, 3, 10, 9), datetime(2025, 3, 10, 10)
        )

    def test_copy_one_missing_target(self, registry, review):
        with pytest.raises(InvalidArgumentError):
            registry.copy_one("Review", review.start, "Nope", datetime(2025, 3, 10, 9))

    def test_copy_range_missing_target_inserts_nothing(self, registry, review):
        with pytest.raises(InvalidArgumentError):
            registry.copy_range(datetime(2025, 3, 1), datetime(2025, 3, 31), "Nope", date(2025, 4, 1))
        assert [len(c.store) for c in registry] == [1, 0]

    def test_copy_range_converts_to_target_zone(self, registry, review):
        registry.copy_range(datetime(2025, 3, 1), datetime(2025, 3, 31), "Travel", date(2025, 3, 3))
        # 14:00 EST is 19:00 GMT
        (copy,) = registry.get("Travel").store.occurrences()
        assert copy.start == datetime(2025, 3, 3, 19)

    def test_copy_reads_from_current_calendar(self, registry, review):
        registry.set_current("Travel")
        assert registry.copy_range(datetime(2025, 3, 1), datetime(2025, 3, 31), "Work", date(2025, 4, 1)) == []

    def test_copy_without_current_calendar(self):
        registry = CalendarRegistry()
        registry.create_calendar("Only", "UTC")
        with pytest.raises(NotFoundError):
            registry.copy_range(datetime(2025, 3, 1), datetime(2025, 3, 31), "Only", date(2025, 4, 1))


class TestFromConfig:

    def test_calendars_and_current(self):
        config = Config(
            current_calendar="Home",
            calendars=[CalendarConfig("Work", "America/Chicago"), CalendarConfig("Home", "Europe/Rome")],
        )
        registry = CalendarRegistry.from_config(config)
        assert registry.names() == ["Work", "Home"]
        assert registry.current_calendar_name() == "Home"

    def test_first_calendar_is_current_by_default(self):
        config = Config(calendars=[CalendarConfig("Work", "UTC")])
        assert CalendarRegistry.from_config(config).current_calendar_name() == "Work"

    def test_unknown_current_calendar(self):
        config = Config(current_calendar="Missing", calendars=[CalendarConfig("Work", "UTC")])
        with pytest.raises(InvalidArgumentError):
            CalendarRegistry.from_config(config)
