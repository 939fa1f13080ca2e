"""Tests for scoped editing."""

from datetime import datetime

import pytest

from multical.edit_engine import EditScope, coerce_value
from multical.errors import InvalidArgumentError, NotFoundError
from multical.occurrence import Location, Occurrence, Status
from multical.series import Series


def _yoga(day: int, hour: int = 10, month: int = 10) -> tuple[str, datetime, datetime]:
    return "Yoga", datetime(2023, month, day, hour), datetime(2023, month, day, hour + 1)


@pytest.fixture
def loaded(store, sunday_yoga):
    store.add(sunday_yoga)
    return store


def _series_starts(store) -> list[list[datetime]]:
    return sorted(
        [m.start for m in event] for event in store if isinstance(event, Series)
    )


class TestCoerceValue:

    def test_iso_strings_for_times(self):
        assert coerce_value("start", "2023-10-08T09:30") == datetime(2023, 10, 8, 9, 30)

    def test_enums(self):
        assert coerce_value("location", "online") is Location.ONLINE
        assert coerce_value("status", Status.PRIVATE) is Status.PRIVATE

    @pytest.mark.parametrize("prop, value", [
        ("colour", "red"),
        ("start", "yesterday"),
        ("location", "moon"),
        ("status", "secret"),
    ])
    def test_invalid(self, prop, value):
        with pytest.raises(InvalidArgumentError):
            coerce_value(prop, value)

    def test_scope_parse(self):
        assert EditScope.parse("EVENTS") is EditScope.EVENTS
        with pytest.raises(InvalidArgumentError):
            EditScope.parse("everything")


class TestEditEvent:
    """Single-occurrence edits."""

    def test_lone_occurrence(self, store, editor):
        occ = Occurrence("Dentist", datetime(2025, 2, 3, 9), datetime(2025, 2, 3, 10))
        store.add(occ)
        editor.edit_event("description", "Dentist", occ.start, occ.end, "bring forms")
        assert store.find_occurrence("Dentist", occ.start, occ.end).description == "bring forms"

    def test_metadata_edit_stays_in_series(self, loaded, editor):
        editor.edit_event("subject", *_yoga(8), "Pilates")
        renamed = loaded.find_occurrence("Pilates", datetime(2023, 10, 8, 10), datetime(2023, 10, 8, 11))
        series = loaded.series_containing(renamed)
        assert series is not None
        assert len(series) == 5
        assert len(loaded) == 1

    def test_same_day_start_stays_in_series(self, loaded, editor):
        editor.edit_event("start", *_yoga(8), "2023-10-08T09:00")
        moved = loaded.find_occurrence("Yoga", datetime(2023, 10, 8, 9), datetime(2023, 10, 8, 10))
        assert len(loaded.series_containing(moved)) == 5

    def test_different_day_start_detaches(self, loaded, editor):
        editor.edit_event("start", *_yoga(8), datetime(2023, 10, 9, 10))
        moved = loaded.find_occurrence("Yoga", datetime(2023, 10, 9, 10), datetime(2023, 10, 9, 11))
        assert loaded.series_containing(moved) is None
        assert _series_starts(loaded) == [[datetime(2023, 10, d, 10) for d in (1, 15, 22, 29)]]
        assert len(loaded) == 2

    def test_end_past_midnight_detaches(self, loaded, editor):
        editor.edit_event("end", *_yoga(15), "2023-10-16T01:00")
        moved = loaded.find_occurrence("Yoga", datetime(2023, 10, 15, 10), datetime(2023, 10, 16, 1))
        assert loaded.series_containing(moved) is None
        assert len(_series_starts(loaded)[0]) == 4

    def test_detaching_the_only_member(self, store, editor, yoga_seed):
        store.add(Series([yoga_seed], "U"))
        editor.edit_event("start", *_yoga(1), "2023-10-02T10:00")
        assert store.events == [
            Occurrence("Yoga", datetime(2023, 10, 2, 10), datetime(2023, 10, 2, 11))
        ]

    def test_missing_occurrence(self, loaded, editor):
        with pytest.raises(NotFoundError):
            editor.edit_event("subject", *_yoga(2), "Pilates")

    def test_unknown_property(self, loaded, editor):
        with pytest.raises(InvalidArgumentError):
            editor.edit_event("priority", *_yoga(8), "high")

    def test_conflicting_edit_leaves_store_unchanged(self, store, editor):
        meeting = Occurrence("Meeting", datetime(2025, 2, 3, 9), datetime(2025, 2, 3, 10))
        standup = Occurrence("Standup", datetime(2025, 2, 3, 9), datetime(2025, 2, 3, 10))
        store.add_all([meeting, standup])
        with pytest.raises(InvalidArgumentError):
            editor.edit_event("subject", "Standup", standup.start, standup.end, "Meeting")
        assert store.events == [meeting, standup]


class TestEditWholeSeries:

    def test_subject(self, loaded, editor):
        editor.edit_events("subject", "Yoga", datetime(2023, 10, 15, 10), "series", "Stretch")
        assert {o.subject for o in loaded.occurrences()} == {"Stretch"}
        assert len(loaded) == 1

    def test_same_day_start_applies_time_to_all(self, loaded, editor):
        editor.edit_events("start", "Yoga", datetime(2023, 10, 8, 10), "series", "2023-10-08T09:30")
        occurrences = loaded.occurrences()
        assert {(o.start.hour, o.start.minute) for o in occurrences} == {(9, 30)}
        assert {(o.end.hour, o.end.minute) for o in occurrences} == {(10, 30)}
        assert [o.start.day for o in occurrences] == [1, 8, 15, 22, 29]

    def test_end_time(self, loaded, editor):
        editor.edit_events("end", "Yoga", datetime(2023, 10, 8, 10), "series", "2023-10-08T12:00")
        assert {o.end.hour for o in loaded.occurrences()} == {12}

    def test_different_day_rejected(self, loaded, editor):
        with pytest.raises(InvalidArgumentError):
            editor.edit_events("start", "Yoga", datetime(2023, 10, 8, 10), "series", "2023-10-09T10:00")
        assert len(loaded.occurrences()) == 5

    def test_event_scope_rejected(self, loaded, editor):
        with pytest.raises(InvalidArgumentError):
            editor.edit_events("subject", "Yoga", datetime(2023, 10, 8, 10), "event", "X")

    def test_no_match(self, loaded, editor):
        with pytest.raises(InvalidArgumentError):
            editor.edit_events("subject", "Yoga", datetime(2023, 10, 8, 11), "series", "X")

    def test_ambiguous_match(self, store, editor):
        store.add_all([
            Occurrence("Talk", datetime(2025, 2, 3, 9), datetime(2025, 2, 3, 10)),
            Occurrence("Talk", datetime(2025, 2, 3, 9), datetime(2025, 2, 3, 11)),
        ])
        with pytest.raises(InvalidArgumentError):
            editor.edit_events("subject", "Talk", datetime(2025, 2, 3, 9), "series", "X")

    def test_lone_occurrence_moves_freely(self, store, editor):
        occ = Occurrence("Dentist", datetime(2025, 2, 3, 9), datetime(2025, 2, 3, 10))
        store.add(occ)
        editor.edit_events("start", "Dentist", occ.start, "series", "2025-02-05T14:00")
        assert store.events == [
            Occurrence("Dentist", datetime(2025, 2, 5, 14), datetime(2025, 2, 5, 15))
        ]


class TestEditThisAndLater:

    @pytest.fixture
    def three_weeks(self, store, yoga_seed):
        series = Series.repeating(yoga_seed, "U", count=3)
        store.add(series)
        return series

    def test_metadata_only_changes_later_members(self, store, editor, three_weeks):
        first = three_weeks.members[0]
        editor.edit_events("description", "Yoga", datetime(2023, 10, 8, 10), "events", "bring mat")
        occurrences = store.occurrences()
        assert occurrences[0] == first
        assert occurrences[0].description is None
        assert [o.description for o in occurrences[1:]] == ["bring mat", "bring mat"]
        assert len(store) == 1

    def test_same_day_start_splits_series(self, store, editor, three_weeks):
        editor.edit_events("start", "Yoga", datetime(2023, 10, 8, 10), "events", "2023-10-08T09:00")
        assert _series_starts(store) == [
            [datetime(2023, 10, 1, 10)],
            [datetime(2023, 10, 8, 9), datetime(2023, 10, 15, 9)],
        ]

    def test_same_day_start_of_first_member_keeps_one_series(self, store, editor, three_weeks):
        editor.edit_events("start", "Yoga", datetime(2023, 10, 1, 10), "events", "2023-10-01T08:00")
        assert _series_starts(store) == [[datetime(2023, 10, d, 8) for d in (1, 8, 15)]]

    def test_different_day_start_redates_later_members(self, loaded, editor):
        editor.edit_events("start", "Yoga", datetime(2023, 10, 8, 10), "events", "2023-10-09T11:00")
        assert _series_starts(loaded) == [
            [datetime(2023, 10, 1, 10)],
            [datetime(2023, 10, 15, 11), datetime(2023, 10, 22, 11),
             datetime(2023, 10, 29, 11), datetime(2023, 11, 5, 11)],
        ]
        moved = loaded.find_occurrence("Yoga", datetime(2023, 11, 5, 11), datetime(2023, 11, 5, 12))
        assert moved.duration == datetime(2023, 1, 1, 11) - datetime(2023, 1, 1, 10)

    def test_backward_start_drops_earlier_members_on_or_after_new_date(self, loaded, editor):
        editor.edit_events("start", "Yoga", datetime(2023, 10, 22, 10), "events", "2023-10-09T10:00")
        assert _series_starts(loaded) == [
            [datetime(2023, 10, 1, 10), datetime(2023, 10, 8, 10)],
            [datetime(2023, 10, 15, 10), datetime(2023, 10, 22, 10)],
        ]

    def test_backward_start_with_new_time_keeps_one_occurrence_per_day(self, loaded, editor):
        editor.edit_events("start", "Yoga", datetime(2023, 10, 22, 10), "events", "2023-10-09T10:30")
        assert _series_starts(loaded) == [
            [datetime(2023, 10, 1, 10), datetime(2023, 10, 8, 10)],
            [datetime(2023, 10, 15, 10, 30), datetime(2023, 10, 22, 10, 30)],
        ]
        starts = [o.start for o in loaded.occurrences()]
        assert len(starts) == 4
        assert len({s.date() for s in starts}) == 4
        assert all(e.is_coherent() for e in loaded if isinstance(e, Series))

    def test_end_same_day(self, store, editor, three_weeks):
        editor.edit_events("end", "Yoga", datetime(2023, 10, 8, 10), "events", "2023-10-08T10:30")
        assert [(o.end.hour, o.end.minute) for o in store.occurrences()] == [(11, 0), (10, 30), (10, 30)]

    def test_end_different_day_rejected(self, store, editor, three_weeks):
        with pytest.raises(InvalidArgumentError):
            editor.edit_events("end", "Yoga", datetime(2023, 10, 8, 10), "events", "2023-10-09T10:30")
        assert store.events == [three_weeks]
