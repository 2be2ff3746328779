"""Refresh instants that keep a displayed date and time current."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Optional

from clock import CalendarClock

logger = logging.getLogger(__name__)

# Hours after the next local midnight at which the display is refreshed again
_AFTER_MIDNIGHT_HOURS = (1, 6)


def _candidates(now: dt.datetime, clock: CalendarClock) -> list[tuple[str, Callable[[], dt.datetime]]]:
    def next_midnight() -> dt.datetime:
        return clock.next_day_start(now)

    out: list[tuple[str, Callable[[], dt.datetime]]] = [("midnight", next_midnight)]
    for h in _AFTER_MIDNIGHT_HOURS:
        out.append((f"midnight+{h}h", lambda h=h: clock.add(next_midnight(), hours=h)))
    out.append(("next week", lambda: clock.add(now, weeks=1)))
    out.append(("next month", lambda: clock.add(now, months=1)))
    return out


def compute_refresh_times(now: dt.datetime, clock: CalendarClock) -> list[dt.datetime]:
    """Return the future instants at which a date display should refresh.

    Candidates are the next local midnight, one and six hours after it,
    one week from `now` and one month from `now`. Only instants strictly
    after `now` are kept; the result is deduplicated and ascending. A
    candidate that falls outside the representable date range is skipped.
    """
    now = clock.localize(now)
    now_utc = now.astimezone(dt.timezone.utc)
    # Keyed by UTC: same-zone comparisons ignore fold during a DST overlap
    times: dict[dt.datetime, dt.datetime] = {}
    for label, compute in _candidates(now, clock):
        try:
            instant = compute()
            key = instant.astimezone(dt.timezone.utc)
        except (OverflowError, ValueError) as ex:
            logger.debug("Skipping %s refresh candidate for %s: %s", label, now.isoformat(), ex)
            continue
        if key > now_utc:
            times.setdefault(key, instant)

    schedule = [times[k] for k in sorted(times)]
    logger.debug("Refresh schedule for %s: %s", now.isoformat(),
                 [t.isoformat() for t in schedule])
    return schedule


def next_refresh(now: dt.datetime, clock: CalendarClock) -> Optional[dt.datetime]:
    """Return the earliest refresh instant, or None if none can be computed."""
    schedule = compute_refresh_times(now, clock)
    return schedule[0] if schedule else None
