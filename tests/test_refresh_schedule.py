from __future__ import annotations

import datetime as dt
import sys
import unittest
from pathlib import Path
from zoneinfo import ZoneInfo

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from clock import CalendarClock
from refresh_schedule import compute_refresh_times, next_refresh

BERLIN = ZoneInfo("Europe/Berlin")
NEW_YORK = ZoneInfo("America/New_York")


class RefreshScheduleTests(unittest.TestCase):
    def assertWellFormed(self, now: dt.datetime, schedule: list[dt.datetime]) -> None:
        self.assertTrue(schedule)
        self.assertTrue(all(t > now for t in schedule))
        as_utc = [t.astimezone(dt.timezone.utc) for t in schedule]
        self.assertEqual(as_utc, sorted(set(as_utc)))

    def test_ordinary_day(self) -> None:
        clock = CalendarClock(dt.timezone.utc)
        now = dt.datetime(2024, 8, 18, 14, 30, tzinfo=dt.timezone.utc)
        schedule = compute_refresh_times(now, clock)
        self.assertWellFormed(now, schedule)
        self.assertEqual(schedule, [
            dt.datetime(2024, 8, 19, 0, 0, tzinfo=dt.timezone.utc),
            dt.datetime(2024, 8, 19, 1, 0, tzinfo=dt.timezone.utc),
            dt.datetime(2024, 8, 19, 6, 0, tzinfo=dt.timezone.utc),
            dt.datetime(2024, 8, 25, 14, 30, tzinfo=dt.timezone.utc),
            dt.datetime(2024, 9, 18, 14, 30, tzinfo=dt.timezone.utc),
        ])

    def test_now_exactly_at_midnight(self) -> None:
        clock = CalendarClock(BERLIN)
        now = dt.datetime(2024, 5, 1, 0, 0, tzinfo=BERLIN)
        schedule = compute_refresh_times(now, clock)
        self.assertWellFormed(now, schedule)
        self.assertEqual(schedule[0], dt.datetime(2024, 5, 2, 0, 0, tzinfo=BERLIN))

    def test_month_addition_clamps_day(self) -> None:
        clock = CalendarClock(dt.timezone.utc)
        now = dt.datetime(2024, 1, 31, 10, 0, tzinfo=dt.timezone.utc)
        schedule = compute_refresh_times(now, clock)
        self.assertEqual(schedule[-1], dt.datetime(2024, 2, 29, 10, 0, tzinfo=dt.timezone.utc))

    def test_spring_forward(self) -> None:
        clock = CalendarClock(BERLIN)
        now = dt.datetime(2024, 3, 30, 15, 0, tzinfo=BERLIN)
        schedule = compute_refresh_times(now, clock)
        self.assertWellFormed(now, schedule)

        midnight, one_am, six_am = schedule[:3]
        self.assertEqual((midnight.hour, midnight.minute, midnight.second), (0, 0, 0))
        self.assertEqual(midnight.date(), dt.date(2024, 3, 31))
        self.assertEqual(midnight.utcoffset(), dt.timedelta(hours=1))
        self.assertEqual(one_am.hour, 1)
        self.assertEqual(six_am.hour, 6)
        self.assertEqual(six_am.utcoffset(), dt.timedelta(hours=2))
        # Only five real hours pass between local midnight and 06:00
        self.assertEqual(six_am.astimezone(dt.timezone.utc) - midnight.astimezone(dt.timezone.utc),
                         dt.timedelta(hours=5))
        # A week later is still 15:00 on the wall clock
        self.assertEqual(schedule[3].hour, 15)

    def test_fall_back(self) -> None:
        clock = CalendarClock(BERLIN)
        now = dt.datetime(2024, 10, 26, 20, 0, tzinfo=BERLIN)
        schedule = compute_refresh_times(now, clock)
        self.assertWellFormed(now, schedule)

        midnight, _, six_am = schedule[:3]
        self.assertEqual((midnight.hour, midnight.minute, midnight.second), (0, 0, 0))
        self.assertEqual(midnight.utcoffset(), dt.timedelta(hours=2))
        self.assertEqual(six_am.hour, 6)
        self.assertEqual(six_am.utcoffset(), dt.timedelta(hours=1))

    def test_new_york_transition_night(self) -> None:
        clock = CalendarClock(NEW_YORK)
        now = dt.datetime(2024, 3, 9, 23, 59, 59, tzinfo=NEW_YORK)
        schedule = compute_refresh_times(now, clock)
        self.assertWellFormed(now, schedule)
        midnight = schedule[0]
        self.assertEqual(midnight, dt.datetime(2024, 3, 10, 0, 0, tzinfo=NEW_YORK))
        self.assertEqual((midnight.hour, midnight.minute, midnight.second), (0, 0, 0))

    def test_midnight_after_a_day_that_starts_at_one(self) -> None:
        # DST begins at 00:00 in these zones, so the transition day starts at 01:00
        for zone, day in (("Asia/Beirut", dt.date(2024, 3, 31)),
                          ("America/Santiago", dt.date(2024, 9, 8)),
                          ("America/Havana", dt.date(2024, 3, 10))):
            tz = ZoneInfo(zone)
            clock = CalendarClock(tz)
            now = dt.datetime.combine(day, dt.time(12, 0), tzinfo=tz)
            schedule = compute_refresh_times(now, clock)
            with self.subTest(zone=zone):
                self.assertWellFormed(now, schedule)
                midnight, one_am, six_am = schedule[:3]
                self.assertEqual(midnight.date(), day + dt.timedelta(days=1))
                self.assertEqual((midnight.hour, midnight.minute, midnight.second), (0, 0, 0))
                self.assertEqual(one_am.hour, 1)
                self.assertEqual(six_am.hour, 6)

    def test_now_in_another_zone(self) -> None:
        clock = CalendarClock(BERLIN)
        # 23:30 UTC is already the next day in Berlin
        now = dt.datetime(2024, 8, 18, 23, 30, tzinfo=dt.timezone.utc)
        schedule = compute_refresh_times(now, clock)
        self.assertEqual(schedule[0], dt.datetime(2024, 8, 20, 0, 0, tzinfo=BERLIN))
        self.assertEqual(schedule[0].tzinfo, BERLIN)

    def test_naive_now_is_local_to_clock(self) -> None:
        clock = CalendarClock(BERLIN)
        schedule = compute_refresh_times(dt.datetime(2024, 8, 18, 12, 0), clock)
        self.assertEqual(schedule[0], dt.datetime(2024, 8, 19, 0, 0, tzinfo=BERLIN))

    def test_candidates_past_range_are_skipped(self) -> None:
        clock = CalendarClock(dt.timezone.utc)
        now = dt.datetime(9999, 12, 30, 12, 0, tzinfo=dt.timezone.utc)
        schedule = compute_refresh_times(now, clock)
        self.assertEqual([t.hour for t in schedule], [0, 1, 6])
        self.assertEqual(compute_refresh_times(now.replace(day=31), clock), [])
        self.assertIsNone(next_refresh(now.replace(day=31), clock))

    def test_next_refresh_is_earliest(self) -> None:
        clock = CalendarClock(dt.timezone.utc)
        now = dt.datetime(2024, 8, 18, 14, 30, tzinfo=dt.timezone.utc)
        self.assertEqual(next_refresh(now, clock), compute_refresh_times(now, clock)[0])

    def test_every_hour_of_a_year(self) -> None:
        clock = CalendarClock(BERLIN)
        start = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)
        for hours in range(0, 366 * 24, 7):
            now = (start + dt.timedelta(hours=hours)).astimezone(BERLIN)
            schedule = compute_refresh_times(now, clock)
            with self.subTest(now=now.isoformat()):
                self.assertWellFormed(now, schedule)
                self.assertEqual(len(schedule), 5)
                self.assertEqual(schedule[0].hour, 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
