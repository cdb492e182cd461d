"""Main FastAPI application for the heart rate telemetry forwarder."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI

from hrlink.api import router
from hrlink.config import AUTO_GRANT_PERMISSION, LOG_LEVEL, SENSOR_MODE
from hrlink.sensor import HeartRateSensor, HttpSensorFeed, SimulatedHeartRateSensor
from hrlink.session import MonitorSession
from hrlink.sink import RealtimeDatabaseSink

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SessionFactory = Callable[[], MonitorSession]


def build_session() -> MonitorSession:
    """Build a session from configuration."""
    sensor: HeartRateSensor
    if SENSOR_MODE == "simulated":
        sensor = SimulatedHeartRateSensor()
    else:
        sensor = HttpSensorFeed()
    return MonitorSession(sensor=sensor, sink=RealtimeDatabaseSink())


def create_app(
    session_factory: SessionFactory = build_session,
    auto_grant: bool = AUTO_GRANT_PERMISSION,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Lifespan context manager for startup and shutdown."""
        # Startup
        session = session_factory()
        app.state.session = session
        await session.start()
        if auto_grant:
            session.gate.resolve(True)
        yield
        # Shutdown
        await session.stop()
        app.state.session = None

    app = FastAPI(
        title="Heart Rate Telemetry Forwarder",
        description="Forwards heart rate sensor samples to a real-time database at a bounded rate",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()
