from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Union


def _fmt_number(value: float) -> str:
    value = float(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class ToggleType:
    def valid(self) -> bool:
        return True

    def __str__(self) -> str:
        return "Toggle"


@dataclass(frozen=True)
class FloatValueType:
    min: float
    max: float

    def valid(self) -> bool:
        return self.min < self.max

    def __str__(self) -> str:
        return f"Float [{_fmt_number(self.min)}, {_fmt_number(self.max)}]"


ActuatorType = Union[ToggleType, FloatValueType]


@dataclass(frozen=True)
class ToggleState:
    on: bool

    def __str__(self) -> str:
        return "On" if self.on else "Off"


@dataclass(frozen=True)
class FloatState:
    value: float

    def __str__(self) -> str:
        return _fmt_number(self.value)


ActuatorState = Union[ToggleState, FloatState]


def parse_actuator_state(text: str) -> ActuatorState:
    """Parse "on"/"off" (any case) or a float literal. Raises ValueError otherwise."""
    s = text.strip()
    lowered = s.lower()
    if lowered == "on":
        return ToggleState(True)
    if lowered == "off":
        return ToggleState(False)
    return FloatState(float(s))


def accepts(actuator_type: ActuatorType, state: ActuatorState) -> bool:
    if isinstance(actuator_type, ToggleType):
        return isinstance(state, ToggleState)
    if isinstance(actuator_type, FloatValueType):
        return isinstance(state, FloatState) and actuator_type.min <= state.value <= actuator_type.max
    raise TypeError(f"Unknown actuator type: {actuator_type!r}")


@dataclass(frozen=True)
class ActuatorInfo:
    name: str
    actuator_type: ActuatorType

    def valid(self) -> bool:
        return self.actuator_type.valid()
