from datetime import date, time
from typing import Iterable

from actuator_scheduler.domain.timeperiod import TimePeriod, Weekday


def january(
    start: str,
    end: str,
    days: Iterable[Weekday] = (),
    first: int = 1,
    last: int = 31,
) -> TimePeriod:
    """Period between two HH:MM times within January 2026 (the 1st is a Thursday)."""
    h1, m1 = start.split(":")
    h2, m2 = end.split(":")
    return TimePeriod.build(
        start_time=time(int(h1), int(m1)),
        end_time=time(int(h2), int(m2)),
        start_date=date(2026, 1, first),
        end_date=date(2026, 1, last),
        days=days,
    )
