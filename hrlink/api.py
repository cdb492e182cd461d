"""FastAPI endpoints for the heart rate monitoring session."""

from fastapi import APIRouter, HTTPException, Request, status

from hrlink.models import (
    PermissionRequest,
    SensorReadingRequest,
    SessionSnapshot,
    StatusResponse,
)
from hrlink.sensor import HttpSensorFeed
from hrlink.session import MonitorSession

router = APIRouter()


def get_session(request: Request) -> MonitorSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Monitoring session is not running",
        )
    return session


@router.post(
    "/sensor/readings",
    response_model=StatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Push a raw sensor sample",
    description="Deliver one heart rate sample to the session as if it came from the sensor",
)
async def push_reading(reading: SensorReadingRequest, request: Request) -> StatusResponse:
    """
    Push a raw heart rate sample.

    Non-positive samples are accepted but discarded by the forwarder.
    At most one sample per throttle window is written to the remote database.
    """
    session = get_session(request)
    if not isinstance(session.sensor, HttpSensorFeed):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session is not reading from the HTTP sensor feed",
        )

    forwarded = session.sensor.push(reading.value)
    if forwarded is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Sensor access has not been granted",
        )

    return StatusResponse(status="accepted", forwarded=forwarded)


@router.post(
    "/sensor/permission",
    response_model=SessionSnapshot,
    summary="Report the sensor permission result",
)
async def report_permission(result: PermissionRequest, request: Request) -> SessionSnapshot:
    """Subscribe to the sensor when access is granted; unsubscribe when denied."""
    session = get_session(request)
    session.gate.resolve(result.granted)
    return session.snapshot()


@router.get(
    "/heart-rate/current",
    response_model=SessionSnapshot,
    summary="Current display state",
    description="Latest accepted heart rate and whether the sensor stream is stale",
)
async def current_heart_rate(request: Request) -> SessionSnapshot:
    return get_session(request).snapshot()


@router.get("/health", summary="Health check endpoint")
async def health_check() -> dict[str, str]:
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "heart-rate-forwarder"}
