from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.config import settings
from ..domain.errors import (
    SchedulerError,
    TimeOverrideOverlap,
    TimeSlotOverlap,
    UnknownActuatorId,
    UnknownOverrideId,
    UnknownTimeSlotId,
)
from ..services.server import ActuatorServer
from .schemas import (
    ActuatorStateRequest,
    AddTimeSlotRequest,
    CreatedResponse,
    DefaultStateRequest,
    EnabledRequest,
    TimePeriodIn,
    schedule_to_wire,
    snapshot_to_wire,
    state_to_domain,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getter (overridden in main via app.dependency_overrides) ---
def get_server() -> ActuatorServer:  # overridden in main
    raise RuntimeError("Server dependency not configured")


def _status_for(exc: SchedulerError) -> int:
    if isinstance(exc, (UnknownActuatorId, UnknownTimeSlotId, UnknownOverrideId)):
        return 404
    if isinstance(exc, (TimeSlotOverlap, TimeOverrideOverlap)):
        return 409
    return 400


@contextmanager
def _engine_errors() -> Iterator[None]:
    try:
        yield
    except SchedulerError as e:
        logger.info("Rejected request: %s", e)
        raise HTTPException(status_code=_status_for(e), detail=e.to_dict()) from e


@router.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}


@router.get("/actuators")
def list_actuators(server: ActuatorServer = Depends(get_server)):
    return {str(aid): snapshot_to_wire(snap) for aid, snap in server.list_actuators().items()}


@router.get("/actuators/{actuator_id}/schedule")
def get_schedule(
    actuator_id: int,
    start: Optional[date] = None,
    days: Optional[int] = Query(default=None, ge=1, le=366),
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        schedule = server.get_schedule(actuator_id, start_date=start, nb_days=days)
    return schedule_to_wire(schedule)


@router.put("/actuators/{actuator_id}/default-state")
def set_default_state(
    actuator_id: int,
    req: DefaultStateRequest,
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        server.set_default_state(actuator_id, state_to_domain(req.state))
    return {"ok": True}


@router.post("/actuators/{actuator_id}/timeslots", response_model=CreatedResponse)
def add_time_slot(
    actuator_id: int,
    req: AddTimeSlotRequest,
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        ts_id = server.add_time_slot(
            actuator_id,
            req.time_period.to_domain(),
            state_to_domain(req.actuator_state),
            req.enabled,
        )
    return CreatedResponse(id=ts_id)


@router.delete("/actuators/{actuator_id}/timeslots/{time_slot_id}")
def remove_time_slot(
    actuator_id: int,
    time_slot_id: int,
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        server.remove_time_slot(actuator_id, time_slot_id)
    return {"ok": True}


@router.patch("/actuators/{actuator_id}/timeslots/{time_slot_id}/time-period")
def time_slot_set_time_period(
    actuator_id: int,
    time_slot_id: int,
    req: TimePeriodIn,
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        server.time_slot_set_time_period(actuator_id, time_slot_id, req.to_domain())
    return {"ok": True}


@router.put("/actuators/{actuator_id}/timeslots/{time_slot_id}/enabled")
def time_slot_set_enabled(
    actuator_id: int,
    time_slot_id: int,
    req: EnabledRequest,
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        server.time_slot_set_enabled(actuator_id, time_slot_id, req.enabled)
    return {"ok": True, "enabled": req.enabled}


@router.put("/actuators/{actuator_id}/timeslots/{time_slot_id}/state")
def time_slot_set_actuator_state(
    actuator_id: int,
    time_slot_id: int,
    req: ActuatorStateRequest,
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        server.time_slot_set_actuator_state(actuator_id, time_slot_id, state_to_domain(req.state))
    return {"ok": True}


@router.post("/actuators/{actuator_id}/timeslots/{time_slot_id}/overrides", response_model=CreatedResponse)
def time_slot_add_time_override(
    actuator_id: int,
    time_slot_id: int,
    req: TimePeriodIn,
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        override_id = server.time_slot_add_time_override(actuator_id, time_slot_id, req.to_domain())
    return CreatedResponse(id=override_id)


@router.delete("/actuators/{actuator_id}/timeslots/{time_slot_id}/overrides/{time_override_id}")
def time_slot_remove_time_override(
    actuator_id: int,
    time_slot_id: int,
    time_override_id: int,
    server: ActuatorServer = Depends(get_server),
):
    with _engine_errors():
        server.time_slot_remove_time_override(actuator_id, time_slot_id, time_override_id)
    return {"ok": True}
