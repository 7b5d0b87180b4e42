"""
Month calendar of saved quotes.

Each saved quote with at least one dated day becomes one event spanning
its earliest to latest dated day. The month grid runs from the Sunday on
or before the 1st to the Saturday on or after the last day, split into
week rows of seven. Within a week, events are stacked first-fit into
layers so that no two events in a layer overlap once both are clamped to
that week.
"""

import calendar as _calendar
from datetime import date, timedelta
from typing import Iterable
from uuid import UUID

from pydantic import BaseModel, Field

from core.models import SavedQuote
from utils.timezone import format_display_date


class CalendarEvent(BaseModel):
    """A saved quote placed on the calendar."""

    id: UUID
    title: str
    start: date
    end: date
    client_name: str | None = None
    location: str | None = None
    total: float = 0
    booked: bool = False

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end

    def segment_on(self, day: date) -> str:
        """Which part of the bar falls on day: single, start, end or middle."""
        if self.start == self.end:
            return "single"
        if day == self.start:
            return "start"
        if day == self.end:
            return "end"
        return "middle"

    @property
    def date_range_label(self) -> str:
        return date_range_label(self.start, self.end)


class DayEvents(BaseModel):
    """Events shown in one grid cell, truncated with a '+N more' count."""

    day: date
    visible: list[CalendarEvent] = Field(default_factory=list)
    hidden_count: int = 0

    @property
    def more_label(self) -> str | None:
        return f"+{self.hidden_count} more" if self.hidden_count else None


class WeekLayout(BaseModel):
    dates: list[date]
    layers: list[list[CalendarEvent]]


class MonthLayout(BaseModel):
    """Everything needed to draw one month."""

    year: int
    month: int
    title: str
    weeks: list[WeekLayout]
    days: list[DayEvents]


def event_from_quote(saved: SavedQuote) -> CalendarEvent | None:
    """Calendar event for a saved quote, or None when no day is dated."""
    dated = saved.quote.dated_days
    if not dated:
        return None
    return CalendarEvent(
        id=saved.id,
        title=saved.display_title,
        start=min(dated),
        end=max(dated),
        client_name=saved.client_name,
        location=saved.location,
        total=saved.total,
        booked=saved.booked,
    )


def events_from_quotes(saved_quotes: Iterable[SavedQuote]) -> list[CalendarEvent]:
    """Events for active (non-archived) dated quotes, de-duplicated by id."""
    events = []
    seen = set()
    for saved in saved_quotes:
        if saved.archived or saved.id in seen:
            continue
        event = event_from_quote(saved)
        if event is None:
            continue
        seen.add(saved.id)
        events.append(event)
    return events


def month_grid(year: int, month: int) -> list[date]:
    """Every date shown for a month, Sunday-first, whole weeks."""
    first = date(year, month, 1)
    last = date(year, month, _calendar.monthrange(year, month)[1])

    # date.weekday(): Monday=0 .. Sunday=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def week_rows(dates: list[date]) -> list[list[date]]:
    return [dates[i:i + 7] for i in range(0, len(dates), 7)]


def events_in_week(events: Iterable[CalendarEvent], week: list[date]) -> list[CalendarEvent]:
    return [e for e in events if e.start <= week[-1] and e.end >= week[0]]


def overlaps_in_week(a: CalendarEvent, b: CalendarEvent, week: list[date]) -> bool:
    """Whether two events share a date once both are clamped to week."""
    week_start, week_end = week[0], week[-1]
    a_start, a_end = max(a.start, week_start), min(a.end, week_end)
    b_start, b_end = max(b.start, week_start), min(b.end, week_end)
    return a_start <= b_end and b_start <= a_end


def event_layers(events: Iterable[CalendarEvent], week: list[date]) -> list[list[CalendarEvent]]:
    """First-fit stacking: each event goes to the first layer it doesn't overlap."""
    layers: list[list[CalendarEvent]] = []
    for event in events:
        for layer in layers:
            if not any(overlaps_in_week(event, other, week) for other in layer):
                layer.append(event)
                break
        else:
            layers.append([event])
    return layers


def events_on_day(events: Iterable[CalendarEvent], day: date, max_visible: int = 3) -> DayEvents:
    covering = [e for e in events if e.covers(day)]
    return DayEvents(
        day=day,
        visible=covering[:max_visible],
        hidden_count=max(0, len(covering) - max_visible),
    )


def build_month(
    year: int,
    month: int,
    events: list[CalendarEvent],
    max_visible: int = 3,
) -> MonthLayout:
    """
    Lay out a month: week rows with stacked event layers, plus per-day lists.

    Raises:
        ValueError: If month is not 1..12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")

    dates = month_grid(year, month)
    weeks = [
        WeekLayout(dates=week, layers=event_layers(events_in_week(events, week), week))
        for week in week_rows(dates)
    ]
    return MonthLayout(
        year=year,
        month=month,
        title=f"{_calendar.month_name[month]} {year}",
        weeks=weeks,
        days=[events_on_day(events, d, max_visible) for d in dates],
    )


def date_range_label(start: date | None, end: date | None) -> str:
    """'Sat, Jun 1, 2024' or 'Sat, Jun 1, 2024 - Mon, Jun 3, 2024'; empty when undated."""
    if start is None:
        return ""
    if end is None or end == start:
        return format_display_date(start)
    return f"{format_display_date(start)} - {format_display_date(end)}"
