from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .core.config import settings
from .core.log import configure_logging

from .api.routes import router as api_router
import actuator_scheduler.api.routes as routes_module

from .services.server import ActuatorServer, load_actuators


logger = logging.getLogger(__name__)


# --- Singletons ---
server = ActuatorServer()


def get_server() -> ActuatorServer:
    return server


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting %s (timezone=%s)", settings.app_name, settings.timezone)

    if not server.list_actuators():
        ids = load_actuators(server, settings.actuators_file or None)
        logger.info("Loaded %s actuators", len(ids))

    try:
        yield
    finally:
        logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Make the dependency functions in routes resolve to the real ones
app.dependency_overrides[routes_module.get_server] = get_server

app.include_router(api_router, prefix="/api")
