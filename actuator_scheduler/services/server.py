from __future__ import annotations

import json
import logging
from datetime import date, time
from pathlib import Path
from typing import Any, Optional

from ..core.config import settings
from ..core.locks import ReadWriteLock
from ..core.timeutil import today_local
from ..domain.actuator import Actuator, ActuatorSnapshot
from ..domain.errors import InvalidActuatorState, InvalidActuatorType, UnknownActuatorId
from ..domain.models import (
    ActuatorInfo,
    ActuatorState,
    ActuatorType,
    FloatValueType,
    ToggleType,
    parse_actuator_state,
)
from ..domain.schedule import Schedule
from ..domain.timeperiod import TimePeriod, Weekday

logger = logging.getLogger(__name__)

DEFAULT_ACTUATORS_PATH = Path(__file__).resolve().parent.parent / "config" / "default_actuators.json"


class ActuatorServer:
    """Owns the actuators and forwards every operation to the addressed one."""

    def __init__(self) -> None:
        self._actuators: dict[int, Actuator] = {}
        self._next_actuator_id = 0
        self._lock = ReadWriteLock()

    def add_actuator(self, info: ActuatorInfo, default_state: ActuatorState) -> int:
        if not info.valid():
            raise InvalidActuatorType()
        actuator = Actuator(info, default_state)
        if not actuator.valid():
            raise InvalidActuatorState()

        with self._lock.write():
            actuator_id = self._next_actuator_id
            self._actuators[actuator_id] = actuator
            self._next_actuator_id += 1
        logger.info("Registered actuator %s name=%s type=%s", actuator_id, info.name, info.actuator_type)
        return actuator_id

    def actuator(self, actuator_id: int) -> Actuator:
        with self._lock.read():
            try:
                return self._actuators[actuator_id]
            except KeyError:
                raise UnknownActuatorId(actuator_id) from None

    def list_actuators(self) -> dict[int, ActuatorSnapshot]:
        with self._lock.read():
            actuators = dict(self._actuators)
        return {aid: a.snapshot() for aid, a in sorted(actuators.items())}

    def get_schedule(
        self,
        actuator_id: int,
        start_date: Optional[date] = None,
        nb_days: Optional[int] = None,
    ) -> Schedule:
        actuator = self.actuator(actuator_id)
        if start_date is None:
            start_date = today_local()
        if nb_days is None:
            nb_days = settings.schedule_days
        return actuator.compute_schedule(start_date, nb_days)

    def set_default_state(self, actuator_id: int, default_state: ActuatorState) -> None:
        self.actuator(actuator_id).set_default_state(default_state)

    def add_time_slot(
        self,
        actuator_id: int,
        time_period: TimePeriod,
        actuator_state: ActuatorState,
        enabled: bool,
    ) -> int:
        return self.actuator(actuator_id).add_time_slot(time_period, actuator_state, enabled)

    def remove_time_slot(self, actuator_id: int, time_slot_id: int) -> None:
        self.actuator(actuator_id).remove_time_slot(time_slot_id)

    def time_slot_set_time_period(self, actuator_id: int, time_slot_id: int, time_period: TimePeriod) -> None:
        self.actuator(actuator_id).time_slot_set_time_period(time_slot_id, time_period)

    def time_slot_set_enabled(self, actuator_id: int, time_slot_id: int, enabled: bool) -> None:
        self.actuator(actuator_id).time_slot_set_enabled(time_slot_id, enabled)

    def time_slot_set_actuator_state(
        self, actuator_id: int, time_slot_id: int, actuator_state: ActuatorState
    ) -> None:
        self.actuator(actuator_id).time_slot_set_actuator_state(time_slot_id, actuator_state)

    def time_slot_add_time_override(self, actuator_id: int, time_slot_id: int, time_period: TimePeriod) -> int:
        return self.actuator(actuator_id).time_slot_add_time_override(time_slot_id, time_period)

    def time_slot_remove_time_override(self, actuator_id: int, time_slot_id: int, time_override_id: int) -> None:
        self.actuator(actuator_id).time_slot_remove_time_override(time_slot_id, time_override_id)


# --- Bootstrap ---

def _parse_type(entry: dict[str, Any]) -> ActuatorType:
    kind = str(entry.get("type", "toggle")).lower()
    if kind == "toggle":
        return ToggleType()
    if kind == "float":
        return FloatValueType(min=float(entry["min"]), max=float(entry["max"]))
    raise ValueError(f"Unknown actuator type: {kind}")


def _parse_hhmm(s: str) -> time:
    h, m = s.split(":")
    return time(int(h), int(m))


def _parse_period(entry: dict[str, Any]) -> TimePeriod:
    return TimePeriod.build(
        start_time=_parse_hhmm(entry["start_time"]),
        end_time=_parse_hhmm(entry["end_time"]),
        start_date=date.fromisoformat(entry["start_date"]),
        end_date=date.fromisoformat(entry["end_date"]),
        days=[Weekday(d) for d in entry.get("days", [])],
    )


def populate(server: ActuatorServer, data: dict[str, Any]) -> list[int]:
    """Create the actuators (and their time slots) described by `data`."""
    ids = []
    for a in data["actuators"]:
        info = ActuatorInfo(name=a["name"], actuator_type=_parse_type(a))
        actuator_id = server.add_actuator(info, parse_actuator_state(str(a["default_state"])))
        for ts in a.get("timeslots", []):
            server.add_time_slot(
                actuator_id,
                _parse_period(ts),
                parse_actuator_state(str(ts["state"])),
                bool(ts.get("enabled", True)),
            )
        ids.append(actuator_id)
    return ids


def _default_data() -> dict[str, Any]:
    return {
        "actuators": [
            {"name": "Light", "type": "toggle", "default_state": "off"},
            {"name": "Heater", "type": "float", "min": 5, "max": 30, "default_state": "16"},
        ]
    }


def load_actuators(server: ActuatorServer, path: Optional[str] = None) -> list[int]:
    actuators_path = Path(path) if path else DEFAULT_ACTUATORS_PATH
    try:
        data = json.loads(actuators_path.read_text())
        # Dry run so a bad entry halfway through leaves `server` untouched
        populate(ActuatorServer(), data)
    except Exception as e:
        logger.warning("Failed to load %s, using hardcoded defaults: %s", actuators_path, e)
        data = _default_data()
    return populate(server, data)
