"""Pure calendar calculations, no UI dependencies."""

import calendar
import enum
from dataclasses import dataclass
from datetime import date

DAY_ABBR = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

MONDAY = calendar.MONDAY
SUNDAY = calendar.SUNDAY

_WEEKDAY_NAMES = {name.lower(): i for i, name in enumerate(calendar.day_name)}
_WEEKDAY_NAMES.update({abbr.lower(): i for i, abbr in enumerate(DAY_ABBR)})


class InvalidDateError(ValueError):
    """Raised when date components or text do not describe a real date."""


class MonthRelation(enum.Enum):
    PREVIOUS = "previous"
    CURRENT = "current"
    NEXT = "next"


@dataclass(frozen=True)
class DayCell:
    """One slot of a month grid: a day number and the month it belongs to."""

    day: int
    relation: MonthRelation

    @property
    def is_current_month(self) -> bool:
        return self.relation is MonthRelation.CURRENT


def make_date(year: int, month: int, day: int) -> date:
    """Build a date, raising InvalidDateError for out-of-range components."""
    try:
        return date(year, month, day)
    except (TypeError, ValueError) as ex:
        raise InvalidDateError(f"Invalid date: {year!r}-{month!r}-{day!r}") from ex


def parse_date(text: str) -> date:
    """Parse a YYYY-MM-DD string, raising InvalidDateError if malformed."""
    try:
        return date.fromisoformat(str(text).strip())
    except ValueError as ex:
        raise InvalidDateError(f"Invalid ISO date: {text!r}") from ex


def parse_weekday(value: int | str) -> int:
    """Return a weekday index (0=Monday .. 6=Sunday) from an int or English name."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid weekday: {value!r}")
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        raise ValueError(f"Weekday index out of range: {value!r}")
    key = str(value).strip().lower()
    if key in _WEEKDAY_NAMES:
        return _WEEKDAY_NAMES[key]
    raise ValueError(f"Unknown weekday name: {value!r}")


def is_leap_year(year: int) -> bool:
    """Gregorian rule: divisible by 4, except centuries not divisible by 400."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in the given month."""
    if month == 2 and is_leap_year(year):
        return 29
    return calendar.mdays[month]


def prev_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) for one month earlier."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def weekday_offset(weekday: int, week_start: int = MONDAY) -> int:
    """Column of `weekday` in a week whose first column is `week_start`."""
    return (weekday - week_start + 7) % 7


def build_grid(reference_date: date, week_start: int = MONDAY) -> list[DayCell]:
    """Return the day cells of the week-aligned grid for a month.

    The grid covers the month containing `reference_date`, preceded by the
    tail of the previous month and followed by the head of the next month
    so that every row holds exactly 7 cells. The result has 28 to 42 cells.
    """
    year, month = reference_date.year, reference_date.month
    first_weekday = calendar.weekday(year, month, 1)
    offset = weekday_offset(first_weekday, week_start)
    month_len = days_in_month(year, month)

    cells: list[DayCell] = []
    if offset > 0:
        prev_len = days_in_month(*prev_month(year, month))
        for d in range(prev_len - offset + 1, prev_len + 1):
            cells.append(DayCell(d, MonthRelation.PREVIOUS))

    for d in range(1, month_len + 1):
        cells.append(DayCell(d, MonthRelation.CURRENT))

    total = offset + month_len
    weeks_needed = -(-total // 7)
    trailing = weeks_needed * 7 - total
    for d in range(1, trailing + 1):
        cells.append(DayCell(d, MonthRelation.NEXT))
    return cells


def grid_weeks(cells: list[DayCell]) -> list[list[DayCell]]:
    """Split a grid into rows of 7 cells."""
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


def weekday_symbols(week_start: int = MONDAY) -> list[str]:
    """Header labels for the grid columns, starting at `week_start`."""
    return DAY_ABBR[week_start:] + DAY_ABBR[:week_start]


def iso_week_numbers(reference_date: date, week_start: int = MONDAY) -> list[int]:
    """Return the ISO week number for each row of the month's grid.

    Each row is numbered after its first day of the displayed month, so
    rows that start in the previous month still get the week of the 1st.
    """
    year, month = reference_date.year, reference_date.month
    weeks: list[int] = []
    for row in grid_weeks(build_grid(reference_date, week_start)):
        # Every row holds at least one day of the displayed month
        day = next(c.day for c in row if c.is_current_month)
        weeks.append(date(year, month, day).isocalendar()[1])
    return weeks
