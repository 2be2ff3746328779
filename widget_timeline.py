"""Timeline entries a widget host displays between refreshes."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from calendar_logic import MONDAY, DayCell, build_grid, weekday_symbols
from clock import CalendarClock
from refresh_schedule import compute_refresh_times


@dataclass(frozen=True)
class TimelineEntry:
    instant: dt.datetime
    month_name: str
    day_name: str
    time_text: str
    cells: list[DayCell]
    weekday_symbols: list[str]

    @property
    def today(self) -> int:
        return self.instant.day


def build_entry(instant: dt.datetime, clock: CalendarClock,
                week_start: int = MONDAY) -> TimelineEntry:
    """Snapshot of what the widget shows at `instant`, in the clock's zone."""
    local = clock.localize(instant)
    return TimelineEntry(
        instant=local,
        month_name=local.strftime("%B"),
        day_name=local.strftime("%A"),
        time_text=local.strftime("%H:%M"),
        cells=build_grid(local.date(), week_start),
        weekday_symbols=weekday_symbols(week_start),
    )


def build_timeline(now: dt.datetime, clock: CalendarClock,
                   week_start: int = MONDAY) -> list[TimelineEntry]:
    """Return an entry for `now` followed by one per refresh instant.

    The host shows each entry from its instant until the next one and asks
    for a new timeline once the last entry is reached.
    """
    entries = [build_entry(now, clock, week_start)]
    for instant in compute_refresh_times(now, clock):
        entries.append(build_entry(instant, clock, week_start))
    return entries
