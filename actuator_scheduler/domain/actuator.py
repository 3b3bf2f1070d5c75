from __future__ import annotations
import copy
import logging
from dataclasses import dataclass
from datetime import date

from ..core.locks import ReadWriteLock
from .errors import (
    InvalidActuatorState,
    InvalidTimePeriod,
    TimeOverrideOverlap,
    TimeSlotOverlap,
    UnknownOverrideId,
    UnknownTimeSlotId,
)
from .models import ActuatorInfo, ActuatorState, accepts
from .schedule import Schedule
from .time_slot import TimeSlot
from .timeperiod import TimePeriod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActuatorSnapshot:
    info: ActuatorInfo
    default_state: ActuatorState
    timeslots: dict[int, TimeSlot]


class Actuator:
    """An actuator and its time slots, guarded by a reader/writer lock.

    Queries take the shared side of the lock, mutators the exclusive side.
    Every mutator validates its input completely before touching state, so a
    failed call leaves the actuator exactly as it was.
    """

    def __init__(self, info: ActuatorInfo, default_state: ActuatorState) -> None:
        self.info = info
        self._default_state = default_state
        self._timeslots: dict[int, TimeSlot] = {}

        # Never reused, even after removal. Override ids are shared by all slots.
        self._next_timeslot_id = 0
        self._next_override_id = 0

        self._lock = ReadWriteLock()

    # --- Queries ---

    @property
    def default_state(self) -> ActuatorState:
        with self._lock.read():
            return self._default_state

    def timeslots(self) -> dict[int, TimeSlot]:
        with self._lock.read():
            return copy.deepcopy(self._timeslots)

    def snapshot(self) -> ActuatorSnapshot:
        with self._lock.read():
            return ActuatorSnapshot(
                info=self.info,
                default_state=self._default_state,
                timeslots=copy.deepcopy(self._timeslots),
            )

    def compute_schedule(self, start_date: date, nb_days: int) -> Schedule:
        with self._lock.read():
            return Schedule.compute(self._timeslots, start_date, nb_days)

    def valid(self) -> bool:
        with self._lock.read():
            return self.info.valid() and self.valid_state(self._default_state)

    def valid_state(self, state: ActuatorState) -> bool:
        return accepts(self.info.actuator_type, state)

    # --- Mutators ---

    def set_default_state(self, default_state: ActuatorState) -> None:
        self._check_state(default_state)
        with self._lock.write():
            self._default_state = default_state
        logger.info("actuator=%s default_state=%s", self.info.name, default_state)

    def add_time_slot(self, time_period: TimePeriod, actuator_state: ActuatorState, enabled: bool) -> int:
        self._check_period(time_period)
        self._check_state(actuator_state)

        with self._lock.write():
            for ts_id, ts in self._timeslots.items():
                if ts.overlaps(time_period):
                    raise TimeSlotOverlap(ts_id)

            ts_id = self._next_timeslot_id
            self._timeslots[ts_id] = TimeSlot(enabled, actuator_state, time_period)
            self._next_timeslot_id += 1
            count = len(self._timeslots)

        logger.info("actuator=%s added time slot %s (count=%s)", self.info.name, ts_id, count)
        return ts_id

    def remove_time_slot(self, time_slot_id: int) -> None:
        with self._lock.write():
            if self._timeslots.pop(time_slot_id, None) is None:
                raise UnknownTimeSlotId(time_slot_id)
        logger.info("actuator=%s removed time slot %s", self.info.name, time_slot_id)

    def time_slot_set_time_period(self, time_slot_id: int, time_period: TimePeriod) -> None:
        """Replace the fields of the slot's period that are set in `time_period`.

        Unset bounds (None) and an empty day set keep their current values.
        """
        with self._lock.write():
            ts = self._get(time_slot_id)

            new_time_period = ts.time_period.merged(time_period)
            if not new_time_period.valid():
                raise InvalidTimePeriod()

            for ts_id, other in self._timeslots.items():
                if ts_id != time_slot_id and other.overlaps(new_time_period):
                    raise TimeSlotOverlap(ts_id)

            ts.time_period = new_time_period
        logger.info("actuator=%s time slot %s period updated", self.info.name, time_slot_id)

    def time_slot_set_enabled(self, time_slot_id: int, enabled: bool) -> None:
        with self._lock.write():
            self._get(time_slot_id).enabled = enabled
        logger.info("actuator=%s time slot %s enabled=%s", self.info.name, time_slot_id, enabled)

    def time_slot_set_actuator_state(self, time_slot_id: int, actuator_state: ActuatorState) -> None:
        self._check_state(actuator_state)
        with self._lock.write():
            self._get(time_slot_id).actuator_state = actuator_state
        logger.info("actuator=%s time slot %s state=%s", self.info.name, time_slot_id, actuator_state)

    def time_slot_add_time_override(self, time_slot_id: int, time_period: TimePeriod) -> int:
        self._check_period(time_period)

        with self._lock.write():
            target = self._get(time_slot_id)

            # An override still competes with the base periods of the other slots.
            for ts_id, ts in self._timeslots.items():
                if ts_id != time_slot_id and ts.overlaps(time_period):
                    raise TimeSlotOverlap(ts_id)

            # Two overrides of one slot may not share a day, even at disjoint times.
            for override_id, period in target.time_override.items():
                if period.overlaps_dates(time_period):
                    raise TimeOverrideOverlap(override_id)

            override_id = self._next_override_id
            target.time_override[override_id] = time_period
            self._next_override_id += 1

        logger.info(
            "actuator=%s time slot %s added override %s", self.info.name, time_slot_id, override_id
        )
        return override_id

    def time_slot_remove_time_override(self, time_slot_id: int, time_override_id: int) -> None:
        with self._lock.write():
            ts = self._get(time_slot_id)
            if ts.time_override.pop(time_override_id, None) is None:
                raise UnknownOverrideId(time_override_id)
        logger.info(
            "actuator=%s time slot %s removed override %s", self.info.name, time_slot_id, time_override_id
        )

    # --- Helpers ---

    def _get(self, time_slot_id: int) -> TimeSlot:
        try:
            return self._timeslots[time_slot_id]
        except KeyError:
            raise UnknownTimeSlotId(time_slot_id) from None

    def _check_state(self, state: ActuatorState) -> None:
        if not self.valid_state(state):
            raise InvalidActuatorState()

    @staticmethod
    def _check_period(time_period: TimePeriod) -> None:
        if not time_period.valid():
            raise InvalidTimePeriod()
