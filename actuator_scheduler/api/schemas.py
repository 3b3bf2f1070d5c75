from __future__ import annotations
from datetime import date, time
from typing import Annotated, Any, Literal, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..domain.actuator import ActuatorSnapshot
from ..domain.models import (
    ActuatorState,
    ActuatorType,
    FloatState,
    FloatValueType,
    ToggleState,
    ToggleType,
)
from ..domain.schedule import Schedule, ScheduleSlot
from ..domain.time_slot import TimeSlot
from ..domain.timeperiod import TimePeriod, Weekday


class ToggleStateIn(BaseModel):
    kind: Literal["toggle"] = "toggle"
    on: bool


class FloatStateIn(BaseModel):
    kind: Literal["float"] = "float"
    value: float = Field(allow_inf_nan=False)


ActuatorStateIn = Annotated[Union[ToggleStateIn, FloatStateIn], Field(discriminator="kind")]


class TimePeriodIn(BaseModel):
    """Unset (null) fields and an empty `days` list are left unchanged by partial updates."""

    start_time: Optional[time] = None
    end_time: Optional[time] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days: List[Weekday] = Field(default_factory=list)

    @field_validator("start_time", "end_time")
    @classmethod
    def _naive_time(cls, v: Optional[time]) -> Optional[time]:
        if v is not None and v.tzinfo is not None:
            raise ValueError("time of day must not carry a time zone")
        return v

    def to_domain(self) -> TimePeriod:
        return TimePeriod.build(
            start_time=self.start_time,
            end_time=self.end_time,
            start_date=self.start_date,
            end_date=self.end_date,
            days=self.days,
        )


class DefaultStateRequest(BaseModel):
    state: ActuatorStateIn


class AddTimeSlotRequest(BaseModel):
    time_period: TimePeriodIn
    actuator_state: ActuatorStateIn
    enabled: bool = True


class EnabledRequest(BaseModel):
    enabled: bool


class ActuatorStateRequest(BaseModel):
    state: ActuatorStateIn


class CreatedResponse(BaseModel):
    id: int


# --- Domain <-> wire ---

def state_to_domain(model: Union[ToggleStateIn, FloatStateIn]) -> ActuatorState:
    if isinstance(model, ToggleStateIn):
        return ToggleState(model.on)
    return FloatState(model.value)


def state_to_wire(state: ActuatorState) -> dict[str, Any]:
    if isinstance(state, ToggleState):
        return {"kind": "toggle", "on": state.on, "display": str(state)}
    if isinstance(state, FloatState):
        return {"kind": "float", "value": state.value, "display": str(state)}
    raise TypeError(f"Unknown actuator state: {state!r}")


def type_to_wire(actuator_type: ActuatorType) -> dict[str, Any]:
    if isinstance(actuator_type, ToggleType):
        return {"kind": "toggle", "display": str(actuator_type)}
    if isinstance(actuator_type, FloatValueType):
        return {
            "kind": "float",
            "min": actuator_type.min,
            "max": actuator_type.max,
            "display": str(actuator_type),
        }
    raise TypeError(f"Unknown actuator type: {actuator_type!r}")


def _time_to_wire(t: Optional[time]) -> Optional[str]:
    if t is None:
        return None
    if t.second or t.microsecond:
        return t.isoformat()
    return t.isoformat(timespec="minutes")


def period_to_wire(period: TimePeriod) -> dict[str, Any]:
    dr = period.date_range
    return {
        "start_time": _time_to_wire(period.time_interval.start),
        "end_time": _time_to_wire(period.time_interval.end),
        "start_date": dr.start.isoformat() if dr.start else None,
        "end_date": dr.end.isoformat() if dr.end else None,
        "days": [d.value for d in period.sorted_days()],
    }


def timeslot_to_wire(ts: TimeSlot) -> dict[str, Any]:
    return {
        "enabled": ts.enabled,
        "actuator_state": state_to_wire(ts.actuator_state),
        "time_period": period_to_wire(ts.time_period),
        "time_override": {str(oid): period_to_wire(p) for oid, p in sorted(ts.time_override.items())},
    }


def snapshot_to_wire(snapshot: ActuatorSnapshot) -> dict[str, Any]:
    return {
        "name": snapshot.info.name,
        "actuator_type": type_to_wire(snapshot.info.actuator_type),
        "default_state": state_to_wire(snapshot.default_state),
        "timeslots": {str(tid): timeslot_to_wire(ts) for tid, ts in sorted(snapshot.timeslots.items())},
    }


def schedule_slot_to_wire(slot: ScheduleSlot) -> dict[str, Any]:
    return {
        "start_time": _time_to_wire(slot.time_interval.start),
        "end_time": _time_to_wire(slot.time_interval.end),
        "actuator_state": state_to_wire(slot.actuator_state),
        "timeslot_id": slot.timeslot_id,
        "override_id": slot.override_id,
    }


def schedule_to_wire(schedule: Schedule) -> dict[str, Any]:
    return {
        "days": {
            day.isoformat(): [schedule_slot_to_wire(s) for s in slots]
            for day, slots in schedule.days.items()
        }
    }
