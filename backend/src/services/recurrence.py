"""
Recurrence expansion for bulk shift scheduling.

Turns a date range, a weekday pattern and a list of exclusion rules into
the concrete days a schedule covers, and turns each day into shift windows.

Design:
- expand_recurrence is pure: same inputs, same output, no I/O
- Restrictions use OR semantics: a day covered by any rule is excluded
- Shift windows are clock times in the helpline's timezone; a window that
  ends at or before its start time ends on the following day
- Instants leave this module as naive UTC datetimes, matching storage
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union
from zoneinfo import ZoneInfo

from backend.src.config.settings import AppSettings, get_settings


class RecurrencePattern(str, enum.Enum):
    """Which weekdays a recurring schedule covers."""
    WEEKDAYS = "weekdays"  # Monday-Friday
    WEEKENDS = "weekends"  # Saturday-Sunday
    ALL = "all"

    def matches(self, day: date) -> bool:
        """Check whether a calendar day falls under this pattern."""
        weekday = day.weekday()  # Monday == 0
        if self is RecurrencePattern.WEEKDAYS:
            return weekday < 5
        if self is RecurrencePattern.WEEKENDS:
            return weekday >= 5
        return True


@dataclass(frozen=True)
class DayRestriction:
    """Excludes exactly one calendar day."""
    day: date

    def covers(self, candidate: date) -> bool:
        return candidate == self.day


@dataclass(frozen=True)
class IntervalRestriction:
    """Excludes every day from start to end, both inclusive."""
    start: date
    end: date

    def covers(self, candidate: date) -> bool:
        return self.start <= candidate <= self.end


RestrictionRule = Union[DayRestriction, IntervalRestriction]


def expand_recurrence(
    start: date,
    end: date,
    pattern: RecurrencePattern,
    restrictions: Optional[Iterable[RestrictionRule]] = None,
) -> List[date]:
    """
    Compute the days of a recurring schedule.

    Args:
        start: First candidate day (inclusive)
        end: Last candidate day (inclusive)
        pattern: Weekday pattern days must match
        restrictions: Day or interval exclusions

    Returns:
        Ascending list of days in [start, end] that match the pattern and
        are not covered by any restriction. Empty when end < start.

    Example:
        >>> expand_recurrence(
        ...     date(2024, 6, 3), date(2024, 6, 9),
        ...     RecurrencePattern.WEEKDAYS,
        ...     [DayRestriction(date(2024, 6, 5))],
        ... )
        [datetime.date(2024, 6, 3), datetime.date(2024, 6, 4),
         datetime.date(2024, 6, 6), datetime.date(2024, 6, 7)]
    """
    rules = list(restrictions or [])
    days = []

    current = start
    while current <= end:
        if pattern.matches(current) and not any(rule.covers(current) for rule in rules):
            days.append(current)
        if current == end:
            break
        current += timedelta(days=1)

    return days


@dataclass(frozen=True)
class ShiftWindow:
    """A daily clock window, e.g. 22:30-01:00."""
    start: time
    end: time

    @property
    def crosses_midnight(self) -> bool:
        return self.end <= self.start

    def instants(self, day: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
        """
        Resolve the window on a given day to UTC instants.

        Returns:
            (start, end) as naive UTC datetimes
        """
        end_day = day + timedelta(days=1) if self.crosses_midnight else day
        local_start = datetime.combine(day, self.start, tzinfo=tz)
        local_end = datetime.combine(end_day, self.end, tzinfo=tz)
        return _to_utc_naive(local_start), _to_utc_naive(local_end)


@dataclass(frozen=True)
class ShiftPolicy:
    """
    Daily shift layout used when generating recurring shifts.

    The default mirrors the helpline's evening roster: two shifts per day,
    20:00-22:30 and 22:30-01:00 local time.
    """
    windows: Tuple[ShiftWindow, ...] = field(default_factory=lambda: (
        ShiftWindow(time(20, 0), time(22, 30)),
        ShiftWindow(time(22, 30), time(1, 0)),
    ))
    timezone: str = "Europe/Lisbon"

    @classmethod
    def from_settings(cls, settings: Optional[AppSettings] = None) -> "ShiftPolicy":
        """Build the policy from CRISISLINE_SHIFT_WINDOWS / CRISISLINE_TIMEZONE."""
        settings = settings or get_settings()
        return cls(
            windows=tuple(ShiftWindow(s, e) for s, e in settings.shift_window_times),
            timezone=settings.timezone,
        )

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def iter_slots(self, days: Iterable[date]) -> Iterator[Tuple[datetime, datetime]]:
        """
        Yield (start, end) UTC instants for each day, window order within a day.

        Raises:
            OverflowError: If a slot falls outside the datetime range
        """
        tz = self.tzinfo
        for day in days:
            for window in self.windows:
                yield window.instants(day, tz)

    def slots_for(self, days: Sequence[date]) -> List[Tuple[datetime, datetime]]:
        return list(self.iter_slots(days))


def _to_utc_naive(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)
