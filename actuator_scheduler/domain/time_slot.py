from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .models import ActuatorState
from .timeperiod import TimeInterval, TimePeriod


@dataclass
class TimeSlot:
    enabled: bool
    actuator_state: ActuatorState
    time_period: TimePeriod
    time_override: dict[int, TimePeriod] = field(default_factory=dict)

    def overlaps(self, time_period: TimePeriod) -> bool:
        return self.time_period.overlaps(time_period)

    def time_interval_on(self, day: date) -> Optional[tuple[TimeInterval, Optional[int]]]:
        """Interval this slot is active on `day`, with the override id that produced it."""
        if not self.enabled:
            return None

        # Overrides on a slot never share a day, so at most one matches.
        for override_id in sorted(self.time_override):
            period = self.time_override[override_id]
            if period.applies_on(day):
                return period.time_interval, override_id

        if self.time_period.applies_on(day):
            return self.time_period.time_interval, None
        return None
