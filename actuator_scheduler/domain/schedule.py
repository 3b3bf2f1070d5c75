from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping, Optional

from .models import ActuatorState
from .time_slot import TimeSlot
from .timeperiod import TimeInterval


@dataclass(frozen=True)
class ScheduleSlot:
    time_interval: TimeInterval
    actuator_state: ActuatorState
    timeslot_id: int
    override_id: Optional[int] = None


@dataclass(frozen=True)
class Schedule:
    days: dict[date, list[ScheduleSlot]]

    @classmethod
    def compute(cls, timeslots: Mapping[int, TimeSlot], start_date: date, nb_days: int) -> "Schedule":
        days: dict[date, list[ScheduleSlot]] = {}

        day = start_date
        for _ in range(max(0, nb_days)):
            slots: list[ScheduleSlot] = []
            for ts_id in sorted(timeslots):
                ts = timeslots[ts_id]
                hit = ts.time_interval_on(day)
                if hit is None:
                    continue
                interval, override_id = hit
                slots.append(ScheduleSlot(
                    time_interval=interval,
                    actuator_state=ts.actuator_state,
                    timeslot_id=ts_id,
                    override_id=override_id,
                ))

            # Stable: equal start times keep slot id order
            slots.sort(key=lambda s: s.time_interval.start)
            days[day] = slots
            if day == date.max:
                break
            day += timedelta(days=1)

        return cls(days=days)

    def slots_on(self, day: date) -> list[ScheduleSlot]:
        return list(self.days.get(day, []))
