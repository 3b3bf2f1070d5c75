from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from actuator_scheduler.api import routes
from actuator_scheduler.domain.actuator import Actuator
from actuator_scheduler.domain.models import ActuatorInfo, FloatState, FloatValueType, ToggleState, ToggleType
from actuator_scheduler.domain.timeperiod import TimePeriod, WEEKDAYS, WEEKEND
from actuator_scheduler.services.server import ActuatorServer

from helpers import january


@pytest.fixture
def heater() -> Actuator:
    return Actuator(ActuatorInfo("Heater", FloatValueType(0, 100)), FloatState(15))


@pytest.fixture
def light() -> Actuator:
    return Actuator(ActuatorInfo("Light", ToggleType()), ToggleState(False))


@pytest.fixture
def weekday_morning() -> TimePeriod:
    return january("08:00", "10:00", WEEKDAYS)


@pytest.fixture
def weekend_morning() -> TimePeriod:
    return january("08:00", "10:00", WEEKEND)


@pytest.fixture
def server() -> ActuatorServer:
    srv = ActuatorServer()
    srv.add_actuator(ActuatorInfo("Light", ToggleType()), ToggleState(False))
    srv.add_actuator(ActuatorInfo("Heater", FloatValueType(0, 100)), FloatState(15))
    return srv


@pytest.fixture
def api_client(server: ActuatorServer) -> Iterator[TestClient]:
    app = FastAPI()
    app.dependency_overrides[routes.get_server] = lambda: server
    app.include_router(routes.router, prefix="/api")
    with TestClient(app) as client:
        yield client
