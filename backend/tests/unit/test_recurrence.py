"""
Unit tests for recurrence expansion and shift windows.

Tests the pure date expansion used by recurring shift generation:
- Weekday patterns
- Day and interval restrictions
- Shift window resolution, including windows crossing midnight
"""

import pytest
from datetime import date, datetime, time, timedelta

from backend.src.config.settings import AppSettings
from backend.src.services.recurrence import (
    DayRestriction,
    IntervalRestriction,
    RecurrencePattern,
    ShiftPolicy,
    ShiftWindow,
    expand_recurrence,
)


MONDAY = date(2024, 6, 3)
SUNDAY = date(2024, 6, 9)


class TestExpandRecurrence:
    """Tests for expand_recurrence."""

    def test_weekdays_with_excluded_day(self):
        """A week of weekdays minus one excluded Wednesday."""
        days = expand_recurrence(
            MONDAY,
            SUNDAY,
            RecurrencePattern.WEEKDAYS,
            [DayRestriction(date(2024, 6, 5))],
        )

        assert days == [
            date(2024, 6, 3),
            date(2024, 6, 4),
            date(2024, 6, 6),
            date(2024, 6, 7),
        ]

    def test_weekends(self):
        days = expand_recurrence(MONDAY, date(2024, 6, 16), RecurrencePattern.WEEKENDS)

        assert days == [
            date(2024, 6, 8),
            date(2024, 6, 9),
            date(2024, 6, 15),
            date(2024, 6, 16),
        ]

    def test_all_days(self):
        days = expand_recurrence(MONDAY, SUNDAY, RecurrencePattern.ALL)
        assert len(days) == 7
        assert days[0] == MONDAY
        assert days[-1] == SUNDAY

    def test_end_before_start_is_empty(self):
        assert expand_recurrence(SUNDAY, MONDAY, RecurrencePattern.ALL) == []

    def test_single_day_range(self):
        assert expand_recurrence(MONDAY, MONDAY, RecurrencePattern.WEEKDAYS) == [MONDAY]
        assert expand_recurrence(MONDAY, MONDAY, RecurrencePattern.WEEKENDS) == []

    def test_interval_restriction_is_inclusive(self):
        days = expand_recurrence(
            MONDAY,
            SUNDAY,
            RecurrencePattern.ALL,
            [IntervalRestriction(date(2024, 6, 4), date(2024, 6, 6))],
        )

        assert days == [
            date(2024, 6, 3),
            date(2024, 6, 7),
            date(2024, 6, 8),
            date(2024, 6, 9),
        ]

    def test_inverted_interval_excludes_nothing(self):
        days = expand_recurrence(
            MONDAY,
            SUNDAY,
            RecurrencePattern.ALL,
            [IntervalRestriction(date(2024, 6, 6), date(2024, 6, 4))],
        )
        assert len(days) == 7

    def test_overlapping_restrictions(self):
        """A day covered by several rules is excluded once, others kept."""
        days = expand_recurrence(
            MONDAY,
            SUNDAY,
            RecurrencePattern.WEEKDAYS,
            [
                IntervalRestriction(date(2024, 6, 3), date(2024, 6, 4)),
                DayRestriction(date(2024, 6, 4)),
                DayRestriction(date(2024, 6, 8)),  # weekend, already excluded
            ],
        )
        assert days == [date(2024, 6, 5), date(2024, 6, 6), date(2024, 6, 7)]

    def test_every_candidate_day_appears_exactly_once(self):
        """Output is exactly the matching, unrestricted days, in ascending order."""
        start = date(2024, 1, 1)
        end = date(2024, 3, 31)
        restrictions = [
            DayRestriction(date(2024, 1, 15)),
            IntervalRestriction(date(2024, 2, 10), date(2024, 2, 20)),
        ]

        days = expand_recurrence(start, end, RecurrencePattern.WEEKDAYS, restrictions)

        expected = []
        current = start
        while current <= end:
            if current.weekday() < 5 and not any(r.covers(current) for r in restrictions):
                expected.append(current)
            current += timedelta(days=1)

        assert days == expected
        assert days == sorted(set(days))

    def test_deterministic(self):
        args = (MONDAY, SUNDAY, RecurrencePattern.WEEKDAYS, [DayRestriction(date(2024, 6, 5))])
        assert expand_recurrence(*args) == expand_recurrence(*args)

    def test_last_representable_day(self):
        assert expand_recurrence(date.max, date.max, RecurrencePattern.ALL) == [date.max]

    def test_range_ending_on_last_representable_day(self):
        days = expand_recurrence(
            date.max - timedelta(days=2), date.max, RecurrencePattern.ALL
        )
        assert days[-1] == date.max
        assert len(days) == 3


class TestRecurrencePattern:
    """Tests for weekday pattern matching."""

    @pytest.mark.parametrize("day,weekdays,weekends", [
        (date(2024, 6, 3), True, False),   # Monday
        (date(2024, 6, 7), True, False),   # Friday
        (date(2024, 6, 8), False, True),   # Saturday
        (date(2024, 6, 9), False, True),   # Sunday
    ])
    def test_matches(self, day, weekdays, weekends):
        assert RecurrencePattern.WEEKDAYS.matches(day) is weekdays
        assert RecurrencePattern.WEEKENDS.matches(day) is weekends
        assert RecurrencePattern.ALL.matches(day) is True

    def test_parse_from_value(self):
        assert RecurrencePattern("weekends") is RecurrencePattern.WEEKENDS


class TestShiftPolicy:
    """Tests for shift window resolution."""

    def test_default_windows(self):
        policy = ShiftPolicy()
        assert policy.windows == (
            ShiftWindow(time(20, 0), time(22, 30)),
            ShiftWindow(time(22, 30), time(1, 0)),
        )
        assert policy.timezone == "Europe/Lisbon"

    def test_late_shift_ends_next_day(self, utc_policy):
        slots = utc_policy.slots_for([MONDAY])

        assert slots == [
            (datetime(2024, 6, 3, 20, 0), datetime(2024, 6, 3, 22, 30)),
            (datetime(2024, 6, 3, 22, 30), datetime(2024, 6, 4, 1, 0)),
        ]

    def test_local_time_converted_to_utc(self):
        """Lisbon is UTC+1 in June and UTC+0 in January."""
        policy = ShiftPolicy(timezone="Europe/Lisbon")

        summer = policy.slots_for([date(2024, 6, 3)])
        winter = policy.slots_for([date(2024, 1, 8)])

        assert summer[0] == (datetime(2024, 6, 3, 19, 0), datetime(2024, 6, 3, 21, 30))
        assert winter[0] == (datetime(2024, 1, 8, 20, 0), datetime(2024, 1, 8, 22, 30))

    def test_window_crosses_midnight(self):
        assert ShiftWindow(time(22, 30), time(1, 0)).crosses_midnight is True
        assert ShiftWindow(time(20, 0), time(22, 30)).crosses_midnight is False

    def test_every_slot_ends_after_it_starts(self, utc_policy):
        days = expand_recurrence(MONDAY, date(2024, 6, 30), RecurrencePattern.ALL)
        for start, end in utc_policy.slots_for(days):
            assert end > start

    def test_from_settings(self):
        settings = AppSettings(
            CRISISLINE_TIMEZONE="UTC",
            CRISISLINE_SHIFT_WINDOWS="09:00-13:00, 14:00-18:00, 18:00-23:00",
        )

        policy = ShiftPolicy.from_settings(settings)

        assert policy.timezone == "UTC"
        assert len(policy.windows) == 3
        assert policy.windows[1] == ShiftWindow(time(14, 0), time(18, 0))
        assert len(policy.slots_for([MONDAY, date(2024, 6, 4)])) == 6

    def test_iter_slots_is_lazy(self, utc_policy):
        slots = utc_policy.iter_slots([MONDAY, date(2024, 6, 4)])

        assert next(slots) == (datetime(2024, 6, 3, 20, 0), datetime(2024, 6, 3, 22, 30))
        assert len(list(slots)) == 3

    def test_late_shift_on_last_day_overflows(self, utc_policy):
        with pytest.raises(OverflowError):
            utc_policy.slots_for([date.max])

    def test_same_day_window_on_last_day(self):
        policy = ShiftPolicy(windows=(ShiftWindow(time(10, 0), time(12, 0)),), timezone="UTC")

        assert policy.slots_for([date.max]) == [
            (datetime(9999, 12, 31, 10, 0), datetime(9999, 12, 31, 12, 0)),
        ]
