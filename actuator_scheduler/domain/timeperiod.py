from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date, time
from enum import Enum
from typing import Iterable, Optional


class Weekday(str, Enum):
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @classmethod
    def of(cls, d: date) -> "Weekday":
        return _WEEK[d.weekday()]

    @property
    def position(self) -> int:
        return _WEEK.index(self)


_WEEK = tuple(Weekday)
ALL_DAYS = frozenset(Weekday)
WEEKDAYS = frozenset(_WEEK[:5])
WEEKEND = frozenset(_WEEK[5:])


@dataclass(frozen=True)
class TimeInterval:
    """Half-open time-of-day interval [start, end). None means unset."""

    start: Optional[time] = None
    end: Optional[time] = None

    def valid(self) -> bool:
        return self.start is not None and self.end is not None and self.start < self.end

    def overlaps(self, other: TimeInterval) -> bool:
        assert self.valid() and other.valid()
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range. None means unset."""

    start: Optional[date] = None
    end: Optional[date] = None

    def valid(self) -> bool:
        return self.start is not None and self.end is not None and self.start <= self.end

    def contains(self, d: date) -> bool:
        return self.valid() and self.start <= d <= self.end

    def overlaps(self, other: DateRange) -> bool:
        assert self.valid() and other.valid()
        return self.start <= other.end and other.start <= self.end


@dataclass(frozen=True)
class TimePeriod:
    """Active during `time_interval`, on `days`, within `date_range`.

    An empty `days` set places no weekday restriction on the period, so it
    behaves exactly like the full week.
    """

    time_interval: TimeInterval = field(default_factory=TimeInterval)
    date_range: DateRange = field(default_factory=DateRange)
    days: frozenset[Weekday] = frozenset()

    @classmethod
    def build(
        cls,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        days: Iterable[Weekday] = (),
    ) -> "TimePeriod":
        return cls(
            time_interval=TimeInterval(start_time, end_time),
            date_range=DateRange(start_date, end_date),
            days=frozenset(days),
        )

    def valid(self) -> bool:
        return self.time_interval.valid() and self.date_range.valid()

    def effective_days(self) -> frozenset[Weekday]:
        return self.days or ALL_DAYS

    def applies_on(self, d: date) -> bool:
        return self.date_range.contains(d) and Weekday.of(d) in self.effective_days()

    def overlaps_dates(self, other: TimePeriod) -> bool:
        """True when both periods can apply on a common day, regardless of time of day."""
        return (
            self.date_range.overlaps(other.date_range)
            and bool(self.effective_days() & other.effective_days())
        )

    def overlaps(self, other: TimePeriod) -> bool:
        return self.overlaps_dates(other) and self.time_interval.overlaps(other.time_interval)

    def merged(self, partial: TimePeriod) -> TimePeriod:
        """Copy of this period with every field set in `partial` replaced."""
        ti, dr = self.time_interval, self.date_range
        if partial.time_interval.start is not None:
            ti = replace(ti, start=partial.time_interval.start)
        if partial.time_interval.end is not None:
            ti = replace(ti, end=partial.time_interval.end)
        if partial.date_range.start is not None:
            dr = replace(dr, start=partial.date_range.start)
        if partial.date_range.end is not None:
            dr = replace(dr, end=partial.date_range.end)
        days = partial.days if partial.days else self.days
        return TimePeriod(time_interval=ti, date_range=dr, days=days)

    def sorted_days(self) -> list[Weekday]:
        return sorted(self.days, key=lambda d: d.position)
