from __future__ import annotations
from typing import Any, Optional


class SchedulerError(Exception):
    """Base class for every caller input error raised by the engine."""

    code = "scheduler_error"
    message = "Scheduler error"

    def __init__(self, entity_id: Optional[int] = None) -> None:
        self.entity_id = entity_id
        if entity_id is None:
            super().__init__(self.message)
        else:
            super().__init__(f"{self.message}: {entity_id}")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"error": self.code, "message": str(self)}
        if self.entity_id is not None:
            out["id"] = self.entity_id
        return out


class InvalidActuatorState(SchedulerError):
    code = "invalid_actuator_state"
    message = "Actuator state does not match the actuator type"


class InvalidActuatorType(SchedulerError):
    code = "invalid_actuator_type"
    message = "Invalid actuator type"


class InvalidTimePeriod(SchedulerError):
    code = "invalid_time_period"
    message = "Invalid time period"


class TimeSlotOverlap(SchedulerError):
    code = "time_slot_overlap"
    message = "Time period overlaps time slot"

    @property
    def conflicting_id(self) -> int:
        assert self.entity_id is not None
        return self.entity_id


class TimeOverrideOverlap(SchedulerError):
    code = "time_override_overlap"
    message = "Time period overlaps time override"

    @property
    def conflicting_id(self) -> int:
        assert self.entity_id is not None
        return self.entity_id


class UnknownTimeSlotId(SchedulerError):
    code = "unknown_time_slot_id"
    message = "Unknown time slot id"


class UnknownOverrideId(SchedulerError):
    code = "unknown_override_id"
    message = "Unknown time override id"


class UnknownActuatorId(SchedulerError):
    code = "unknown_actuator_id"
    message = "Unknown actuator id"
