"""Tests for the saved-quote calendar layout."""

from datetime import date
from uuid import uuid4

import pytest

from core.calendar import (
    CalendarEvent,
    build_month,
    date_range_label,
    event_layers,
    events_from_quotes,
    events_on_day,
    month_grid,
    overlaps_in_week,
    week_rows,
)


def event(start: str, end: str | None = None, title: str = "Shoot") -> CalendarEvent:
    return CalendarEvent(
        id=uuid4(),
        title=title,
        start=date.fromisoformat(start),
        end=date.fromisoformat(end or start),
    )


def week_of(first_day: str) -> list[date]:
    """The Sunday-first week starting at first_day."""
    grid = month_grid(2024, 6)
    start = grid.index(date.fromisoformat(first_day))
    return grid[start:start + 7]


class TestEventsFromQuotes:

    def test_span_is_earliest_to_latest_dated_day(self, saved_quote_factory):
        saved = saved_quote_factory(
            "Smith Wedding", ["2024-06-01", "2024-06-03"], client_name="Smith", total=2400
        )
        [e] = events_from_quotes([saved])

        assert e.start == date(2024, 6, 1)
        assert e.end == date(2024, 6, 3)
        assert e.title == "Smith Wedding"
        assert e.client_name == "Smith"
        assert e.total == 2400

    def test_title_preferred_over_name(self, saved_quote_factory):
        saved = saved_quote_factory("q-17", ["2024-06-01"], title="Corporate Gala")
        assert events_from_quotes([saved])[0].title == "Corporate Gala"

    def test_undated_and_archived_skipped(self, saved_quote_factory):
        quotes = [
            saved_quote_factory("Undated"),
            saved_quote_factory("Old", ["2024-06-01"], archived=True),
            saved_quote_factory("Live", ["2024-06-01"]),
        ]
        assert [e.title for e in events_from_quotes(quotes)] == ["Live"]

    def test_duplicates_by_id_dropped(self, saved_quote_factory):
        saved = saved_quote_factory("Live", ["2024-06-01"])
        assert len(events_from_quotes([saved, saved])) == 1


class TestMonthGrid:

    def test_whole_sunday_first_weeks(self):
        grid = month_grid(2024, 6)

        assert grid[0] == date(2024, 5, 26)
        assert grid[-1] == date(2024, 7, 6)
        assert len(grid) == 42
        assert all(len(week) == 7 for week in week_rows(grid))

    def test_month_starting_on_sunday(self):
        grid = month_grid(2024, 9)
        assert grid[0] == date(2024, 9, 1)
        assert grid[-1] == date(2024, 10, 5)

    def test_leap_february(self):
        grid = month_grid(2024, 2)
        assert date(2024, 2, 29) in grid
        assert len(grid) == 35


class TestLayers:

    def test_overlap_is_judged_within_the_week(self):
        week = week_of("2024-06-02")
        spills_in = event("2024-05-30", "2024-06-03")
        later = event("2024-06-04", "2024-06-06")
        assert not overlaps_in_week(spills_in, later, week)
        assert overlaps_in_week(spills_in, event("2024-06-03"), week)

    def test_first_fit_stacking(self):
        week = week_of("2024-06-02")
        long = event("2024-06-03", "2024-06-05", "long")
        inside = event("2024-06-04", title="inside")
        after = event("2024-06-06", title="after")

        layers = event_layers([long, inside, after], week)

        assert [[e.title for e in layer] for layer in layers] == [["long", "after"], ["inside"]]

    def test_segments(self):
        multi = event("2024-06-01", "2024-06-03")
        assert multi.segment_on(date(2024, 6, 1)) == "start"
        assert multi.segment_on(date(2024, 6, 2)) == "middle"
        assert multi.segment_on(date(2024, 6, 3)) == "end"
        assert event("2024-06-01").segment_on(date(2024, 6, 1)) == "single"


class TestDayCells:

    def test_more_label_after_max_visible(self):
        events = [event("2024-06-10", title=f"e{i}") for i in range(5)]
        cell = events_on_day(events, date(2024, 6, 10), max_visible=3)

        assert [e.title for e in cell.visible] == ["e0", "e1", "e2"]
        assert cell.hidden_count == 2
        assert cell.more_label == "+2 more"

    def test_no_label_when_everything_fits(self):
        cell = events_on_day([event("2024-06-10")], date(2024, 6, 10))
        assert cell.more_label is None


class TestBuildMonth:

    def test_layout(self):
        layout = build_month(2024, 6, [event("2024-06-01", "2024-06-03")])

        assert layout.title == "June 2024"
        assert len(layout.weeks) == 6
        assert len(layout.days) == 42
        assert len(layout.weeks[0].layers) == 1
        assert len(layout.weeks[1].layers) == 1
        assert layout.weeks[2].layers == []

    def test_invalid_month(self):
        with pytest.raises(ValueError, match="Invalid month"):
            build_month(2024, 13, [])


class TestDateRangeLabel:

    def test_single_and_range(self):
        assert date_range_label(date(2024, 6, 1), date(2024, 6, 1)) == "Sat, Jun 1, 2024"
        assert date_range_label(date(2024, 6, 1), date(2024, 6, 3)) == (
            "Sat, Jun 1, 2024 - Mon, Jun 3, 2024"
        )

    def test_undated(self):
        assert date_range_label(None, None) == ""
