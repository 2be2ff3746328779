"""Calendar clock: the time zone and "now" used for calendar-aware arithmetic."""

from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tzlocal import get_localzone

from calendar_logic import days_in_month

logger = logging.getLogger(__name__)

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Europe/Berlin"
      - Fixed offsets: "+02:00", "+0200", "-05:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system"}:
        return "local"
    if low in {"utc", "z", "gmt"}:
        return "UTC"
    return s


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        return _local_tz()

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def _local_tz() -> dt.tzinfo:
    """The machine's IANA zone, or its current fixed offset if none can be found."""
    try:
        return get_localzone()
    except (LookupError, ValueError, OSError) as ex:
        logger.warning("Local time zone is unknown, using the current UTC offset: %s", ex)
        tz = dt.datetime.now().astimezone().tzinfo
        return tz or dt.timezone.utc


@dataclass(frozen=True)
class CalendarClock:
    """A time zone plus a source of "now".

    All arithmetic is done on local wall-clock fields and the result is
    normalized through UTC, so day, week and month additions land on the
    same local time of day across DST changes. Pass `now_fn` to pin the
    current time in tests.
    """

    tz: dt.tzinfo
    now_fn: Optional[Callable[[], dt.datetime]] = None

    @classmethod
    def from_name(cls, name: Optional[str],
                  now_fn: Optional[Callable[[], dt.datetime]] = None) -> CalendarClock:
        return cls(resolve_tz(name), now_fn)

    def now(self) -> dt.datetime:
        if self.now_fn is not None:
            return self.localize(self.now_fn())
        return dt.datetime.now(tz=self.tz)

    def localize(self, instant: dt.datetime) -> dt.datetime:
        """Express `instant` in this clock's zone; naive values are taken as local."""
        if instant.tzinfo is None:
            return self._normalize(instant.replace(tzinfo=self.tz))
        return instant.astimezone(self.tz)

    def start_of_day(self, instant: dt.datetime) -> dt.datetime:
        local = self.localize(instant)
        return self._normalize(local.replace(hour=0, minute=0, second=0, microsecond=0))

    def next_day_start(self, instant: dt.datetime) -> dt.datetime:
        """First instant of the local day after `instant`.

        Built from the next date rather than from today's start, which is
        01:00 on days whose DST change happens at midnight.
        """
        tomorrow = self.localize(instant).date() + dt.timedelta(days=1)
        return self._normalize(dt.datetime.combine(tomorrow, dt.time(), tzinfo=self.tz))

    def add(self, instant: dt.datetime, months: int = 0, weeks: int = 0,
            days: int = 0, hours: int = 0) -> dt.datetime:
        """Calendar-aware addition.

        Months are added first, clamping the day to the target month's
        length (Jan 31 + 1 month -> Feb 28/29). Raises OverflowError or
        ValueError past the representable date range.
        """
        local = self.localize(instant).replace(fold=0)
        if months:
            index = local.year * 12 + (local.month - 1) + months
            year, month = divmod(index, 12)
            month += 1
            if not dt.MINYEAR <= year <= dt.MAXYEAR:
                raise OverflowError(f"year {year} is out of range")
            local = local.replace(year=year, month=month,
                                  day=min(local.day, days_in_month(year, month)))
        local = local + dt.timedelta(weeks=weeks, days=days, hours=hours)
        return self._normalize(local)

    def _normalize(self, local: dt.datetime) -> dt.datetime:
        # Round-trip through UTC so wall times inside a DST gap become real instants
        return local.astimezone(dt.timezone.utc).astimezone(self.tz)
